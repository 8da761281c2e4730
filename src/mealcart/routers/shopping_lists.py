"""API routes for shopping list generation, swaps and check-off."""

from datetime import date, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from mealcart.database import get_db
from mealcart.logging_config import get_logger
from mealcart.normalize.quantity import QuantityParseError
from mealcart.plan.aggregation import IngredientLine
from mealcart.plan.service import (
    InvalidWeekError,
    ItemNotFoundError,
    ShoppingListError,
    ShoppingListNotFoundError,
    ShoppingListService,
)
from mealcart.plan.shopping_list import AggregatedIngredient, ShoppingList
from mealcart.repository import ShoppingListRepository

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/shopping-lists", tags=["shopping-lists"])


# =============================================================================
# Request/Response Schemas
# =============================================================================


class IngredientLineSchema(BaseModel):
    """One recipe ingredient line as written in the recipe."""

    name: str
    quantity: str | int | float | None = Field(
        None, description='Quantity expression, e.g. "1 1/2", "0.5" or "a pinch"'
    )
    unit: str = ""
    recipe_id: str | None = None

    def to_line(self) -> IngredientLine:
        return IngredientLine(
            name=self.name,
            quantity_expression=self.quantity,
            unit=self.unit,
            source_recipe_id=self.recipe_id,
        )


class ShoppingListCreateRequest(BaseModel):
    """Request to generate the shopping list for a meal plan week."""

    user_id: str = Field(default="default-user")
    meal_plan_id: str
    week_start_date: date
    ingredients: list[IngredientLineSchema] = Field(default_factory=list)


class RecalculateRequest(BaseModel):
    """A meal swap: ingredients of the removed and the added recipe."""

    old_ingredients: list[IngredientLineSchema] = Field(default_factory=list)
    new_ingredients: list[IngredientLineSchema] = Field(default_factory=list)


class ItemCollectedUpdate(BaseModel):
    """Check an item off or put it back."""

    ingredient_name: str
    unit: str
    collected: bool = True


class ShoppingListItemResponse(BaseModel):
    """Single item in the shopping list."""

    ingredient_name: str
    unit: str
    quantity: float
    exact_quantity: str = Field(description='Exact value as "numerator/denominator"')
    formatted_quantity: str
    display_quantity: str
    category: str
    is_ambiguous: bool
    collected: bool

    class Config:
        from_attributes = True


class ShoppingListResponse(BaseModel):
    """Shopping list with items grouped by store department."""

    id: str
    user_id: str
    meal_plan_id: str
    week_start_date: date
    items: list[ShoppingListItemResponse]
    items_by_category: dict[str, list[ShoppingListItemResponse]]
    total_items: int
    collected_count: int
    is_complete: bool
    generated_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


# =============================================================================
# Helpers
# =============================================================================


def get_service(db: AsyncSession = Depends(get_db)) -> ShoppingListService:
    """Dependency providing a service bound to the request's session."""
    return ShoppingListService(ShoppingListRepository(db))


def to_http_error(error: Exception) -> HTTPException:
    """Translate a domain error into an HTTP error."""
    if isinstance(error, QuantityParseError):
        return HTTPException(status_code=422, detail=str(error))
    if isinstance(error, (ShoppingListNotFoundError, ItemNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, InvalidWeekError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


def item_response(item: AggregatedIngredient) -> ShoppingListItemResponse:
    return ShoppingListItemResponse(
        ingredient_name=item.name,
        unit=item.unit,
        quantity=float(item.quantity),
        exact_quantity=f"{item.quantity.numerator}/{item.quantity.denominator}",
        formatted_quantity=item.formatted_quantity,
        display_quantity=item.display_quantity(),
        category=item.category.value,
        is_ambiguous=item.is_ambiguous,
        collected=item.collected,
    )


def shopping_list_response(shopping_list: ShoppingList) -> ShoppingListResponse:
    return ShoppingListResponse(
        id=shopping_list.id,
        user_id=shopping_list.user_id,
        meal_plan_id=shopping_list.meal_plan_id,
        week_start_date=shopping_list.week_start_date,
        items=[item_response(item) for item in shopping_list.items],
        items_by_category={
            category: [item_response(item) for item in items]
            for category, items in shopping_list.items_by_category.items()
        },
        total_items=len(shopping_list.items),
        collected_count=shopping_list.collected_count,
        is_complete=shopping_list.is_complete,
        generated_at=shopping_list.generated_at,
        updated_at=shopping_list.updated_at,
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/", response_model=ShoppingListResponse, status_code=status.HTTP_201_CREATED)
async def generate_shopping_list(
    request: ShoppingListCreateRequest,
    service: ShoppingListService = Depends(get_service),
) -> ShoppingListResponse:
    """
    Generate the shopping list for a meal plan week.

    Any list the user already has for that week is replaced.
    """
    logger.info(
        f"Generating shopping list for meal plan {request.meal_plan_id}: "
        f"{len(request.ingredients)} ingredient lines"
    )

    try:
        shopping_list = await service.generate(
            user_id=request.user_id,
            meal_plan_id=request.meal_plan_id,
            week_start_date=request.week_start_date,
            lines=[ingredient.to_line() for ingredient in request.ingredients],
        )
    except (QuantityParseError, ShoppingListError) as e:
        logger.warning(f"Shopping list generation rejected: {e}")
        raise to_http_error(e) from e

    return shopping_list_response(shopping_list)


@router.get("/", response_model=ShoppingListResponse)
async def get_shopping_list_for_week(
    week_start_date: Annotated[str, Query(description="Monday of the week, YYYY-MM-DD")],
    user_id: Annotated[str, Query(description="Owner of the list")] = "default-user",
    service: ShoppingListService = Depends(get_service),
) -> ShoppingListResponse:
    """Get a user's shopping list for the current or an upcoming week."""
    try:
        shopping_list = await service.get_for_week(user_id, week_start_date)
    except ShoppingListError as e:
        raise to_http_error(e) from e

    return shopping_list_response(shopping_list)


@router.get("/{shopping_list_id}", response_model=ShoppingListResponse)
async def get_shopping_list(
    shopping_list_id: str,
    service: ShoppingListService = Depends(get_service),
) -> ShoppingListResponse:
    """Get a specific shopping list by ID."""
    try:
        shopping_list = await service.get(shopping_list_id)
    except ShoppingListError as e:
        raise to_http_error(e) from e

    return shopping_list_response(shopping_list)


@router.post("/{shopping_list_id}/recalculate", response_model=ShoppingListResponse)
async def recalculate_shopping_list(
    shopping_list_id: str,
    request: RecalculateRequest,
    service: ShoppingListService = Depends(get_service),
) -> ShoppingListResponse:
    """
    Apply a meal swap to an existing shopping list.

    Quantities of the removed recipe are subtracted and those of the added
    recipe added; items already checked off stay checked off.
    """
    logger.info(
        f"Recalculating shopping list {shopping_list_id}: "
        f"-{len(request.old_ingredients)} +{len(request.new_ingredients)} lines"
    )

    try:
        shopping_list = await service.recalculate(
            shopping_list_id,
            old_lines=[ingredient.to_line() for ingredient in request.old_ingredients],
            new_lines=[ingredient.to_line() for ingredient in request.new_ingredients],
        )
    except (QuantityParseError, ShoppingListError) as e:
        logger.warning(f"Shopping list recalculation rejected: {e}")
        raise to_http_error(e) from e

    return shopping_list_response(shopping_list)


@router.patch("/{shopping_list_id}/items", response_model=ShoppingListResponse)
async def update_item_collected(
    shopping_list_id: str,
    request: ItemCollectedUpdate,
    service: ShoppingListService = Depends(get_service),
) -> ShoppingListResponse:
    """Check an item off the list, or uncheck it."""
    try:
        shopping_list = await service.set_collected(
            shopping_list_id,
            request.ingredient_name,
            request.unit,
            request.collected,
        )
    except ShoppingListError as e:
        raise to_http_error(e) from e

    return shopping_list_response(shopping_list)


@router.post("/{shopping_list_id}/reset", response_model=ShoppingListResponse)
async def reset_shopping_list(
    shopping_list_id: str,
    service: ShoppingListService = Depends(get_service),
) -> ShoppingListResponse:
    """Uncheck every item on the list."""
    try:
        shopping_list = await service.reset(shopping_list_id)
    except ShoppingListError as e:
        raise to_http_error(e) from e

    return shopping_list_response(shopping_list)
