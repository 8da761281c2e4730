"""Shopping list use cases: generate, recalculate, check off, reset."""

import uuid
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Protocol

from mealcart.config import get_settings
from mealcart.logging_config import LoggingContext, get_logger
from mealcart.normalize.units import identify_unit, normalize_ingredient_name
from mealcart.plan.aggregation import IngredientLine
from mealcart.plan.categorize import CategoryLookup, categorize
from mealcart.plan.recalculation import recalculate
from mealcart.plan.shopping_list import ShoppingList, aggregate

logger = get_logger(__name__)


class ShoppingListError(Exception):
    """Base exception for shopping list operations."""


class ShoppingListNotFoundError(ShoppingListError):
    """Raised when no shopping list exists for an id or week."""

    def __init__(self, identifier: str):
        super().__init__(f"Shopping list not found: {identifier}")
        self.identifier = identifier


class ItemNotFoundError(ShoppingListError):
    """Raised when an item key is not on the list."""

    def __init__(self, name: str, unit: str):
        super().__init__(f"Shopping list item not found: {name} ({unit})")
        self.name = name
        self.unit = unit


class InvalidWeekError(ShoppingListError):
    """Raised when a week start date is malformed or not a Monday."""


class PastWeekError(InvalidWeekError):
    """Raised when a week in the past is requested."""

    def __init__(self) -> None:
        super().__init__("Past weeks are not accessible")


class WeekOutOfRangeError(InvalidWeekError):
    """Raised when a week too far in the future is requested."""

    def __init__(self, max_weeks_ahead: int):
        super().__init__(f"Future week out of range: maximum {max_weeks_ahead} weeks ahead allowed")
        self.max_weeks_ahead = max_weeks_ahead


class ShoppingListStore(Protocol):
    """Persistence collaborator for shopping lists."""

    async def get(self, shopping_list_id: str, for_update: bool = False) -> ShoppingList | None: ...

    async def get_by_week(self, user_id: str, week_start_date: date) -> ShoppingList | None: ...

    async def add(self, shopping_list: ShoppingList) -> None: ...

    async def save(self, shopping_list: ShoppingList) -> None: ...

    async def delete(self, shopping_list: ShoppingList) -> None: ...

    async def prune_weeks(self, user_id: str, keep: int) -> int: ...

    async def commit(self) -> None: ...


def week_monday(day: date) -> date:
    """Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())


def validate_week_date(
    week_start_date: str | date,
    today: date | None = None,
    max_weeks_ahead: int | None = None,
) -> date:
    """
    Validate a week start date for shopping list lookups.

    The date must be an ISO date falling on a Monday, not in a past week and
    at most ``max_weeks_ahead`` weeks after the current one.
    """
    if max_weeks_ahead is None:
        max_weeks_ahead = get_settings().max_weeks_ahead

    if isinstance(week_start_date, date):
        week = week_start_date
    else:
        try:
            week = date.fromisoformat(week_start_date)
        except ValueError as e:
            raise InvalidWeekError(f"Invalid date format: {week_start_date!r}") from e

    if week.weekday() != 0:
        raise InvalidWeekError("Week start must be a Monday")

    current_monday = week_monday(today or date.today())
    weeks_diff = (week - current_monday).days // 7

    if weeks_diff < 0:
        raise PastWeekError()
    if weeks_diff > max_weeks_ahead:
        raise WeekOutOfRangeError(max_weeks_ahead)

    return week


class ShoppingListService:
    """Applies shopping list use cases against a store within one unit of work."""

    def __init__(
        self,
        store: ShoppingListStore,
        categorizer: CategoryLookup = categorize,
        retention_weeks: int | None = None,
    ):
        self.store = store
        self.categorizer = categorizer
        self.retention_weeks = (
            retention_weeks
            if retention_weeks is not None
            else get_settings().shopping_list_retention_weeks
        )

    async def generate(
        self,
        user_id: str,
        meal_plan_id: str,
        week_start_date: date,
        lines: Iterable[IngredientLine],
    ) -> ShoppingList:
        """
        Build a fresh shopping list for a generated meal plan.

        A list already stored for the same user and week is replaced, and its
        checked-off state goes with it.
        """
        items = aggregate(lines, self.categorizer)

        existing = await self.store.get_by_week(user_id, week_start_date)
        if existing is not None:
            logger.info(f"Replacing shopping list {existing.id} for week {week_start_date}")
            await self.store.delete(existing)

        shopping_list = ShoppingList(
            id=str(uuid.uuid4()),
            user_id=user_id,
            meal_plan_id=meal_plan_id,
            week_start_date=week_start_date,
            items=items,
        )

        with LoggingContext(shopping_list_id=shopping_list.id, user_id=user_id):
            await self.store.add(shopping_list)
            pruned = await self.store.prune_weeks(user_id, self.retention_weeks)
            await self.store.commit()

            logger.info(
                f"Generated shopping list for week {week_start_date}: "
                f"{len(items)} items, {pruned} old lists pruned"
            )

        return shopping_list

    async def recalculate(
        self,
        shopping_list_id: str,
        old_lines: Iterable[IngredientLine],
        new_lines: Iterable[IngredientLine],
    ) -> ShoppingList:
        """
        Apply a meal swap to a stored list.

        The list row is locked for the duration of the unit of work, so swaps
        on the same list apply one after another.
        """
        with LoggingContext(shopping_list_id=shopping_list_id):
            shopping_list = await self.store.get(shopping_list_id, for_update=True)
            if shopping_list is None:
                raise ShoppingListNotFoundError(shopping_list_id)

            shopping_list.items = recalculate(
                shopping_list.items, old_lines, new_lines, self.categorizer
            )
            shopping_list.updated_at = datetime.utcnow()

            await self.store.save(shopping_list)
            await self.store.commit()

            logger.info(f"Shopping list recalculated: {len(shopping_list.items)} items")

        return shopping_list

    async def get(self, shopping_list_id: str) -> ShoppingList:
        shopping_list = await self.store.get(shopping_list_id)
        if shopping_list is None:
            raise ShoppingListNotFoundError(shopping_list_id)
        return shopping_list

    async def get_for_week(self, user_id: str, week_start_date: str | date) -> ShoppingList:
        """Look up a user's list for a validated week."""
        week = validate_week_date(week_start_date)
        shopping_list = await self.store.get_by_week(user_id, week)
        if shopping_list is None:
            raise ShoppingListNotFoundError(f"{user_id}/{week.isoformat()}")
        return shopping_list

    async def set_collected(
        self,
        shopping_list_id: str,
        name: str,
        unit: str,
        collected: bool,
    ) -> ShoppingList:
        """
        Check an item off, or put it back.

        The item is matched on its normalized name and base unit, so "cups"
        finds the ml item and "Large  Can" finds "large can".
        """
        name = normalize_ingredient_name(name)
        unit = identify_unit(unit).base_unit

        shopping_list = await self.store.get(shopping_list_id, for_update=True)
        if shopping_list is None:
            raise ShoppingListNotFoundError(shopping_list_id)

        item = shopping_list.get_item(name, unit)
        if item is None:
            raise ItemNotFoundError(name, unit)

        item.collected = collected
        shopping_list.updated_at = datetime.utcnow()
        await self.store.save(shopping_list)
        await self.store.commit()

        logger.info(f"Item {name!r} ({unit}) on list {shopping_list_id} collected={collected}")
        return shopping_list

    async def reset(self, shopping_list_id: str) -> ShoppingList:
        """Uncheck every item on a list."""
        shopping_list = await self.store.get(shopping_list_id, for_update=True)
        if shopping_list is None:
            raise ShoppingListNotFoundError(shopping_list_id)

        for item in shopping_list.items:
            item.collected = False
        shopping_list.updated_at = datetime.utcnow()
        await self.store.save(shopping_list)
        await self.store.commit()

        logger.info(f"Reset {len(shopping_list.items)} items on list {shopping_list_id}")
        return shopping_list
