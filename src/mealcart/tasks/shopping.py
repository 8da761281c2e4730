"""Celery tasks for shopping list generation and recalculation."""

import asyncio
from datetime import date
from typing import Any

from mealcart.celery_app import celery_app
from mealcart.database import worker_session
from mealcart.logging_config import LoggingContext, configure_logging, get_logger
from mealcart.normalize.quantity import QuantityParseError
from mealcart.plan.aggregation import IngredientLine
from mealcart.plan.service import ShoppingListNotFoundError, ShoppingListService
from mealcart.repository import ShoppingListRepository

# Configure logging for Celery workers
configure_logging()
logger = get_logger(__name__)


def run_async(coro: Any) -> Any:
    """Run an async coroutine in a synchronous context."""
    try:
        loop = asyncio.get_event_loop()
        if loop.is_running():
            # If there's already an event loop, create a new one
            import concurrent.futures

            with concurrent.futures.ThreadPoolExecutor() as executor:
                future = executor.submit(asyncio.run, coro)
                return future.result()
        return loop.run_until_complete(coro)
    except RuntimeError:
        # No event loop exists, create one
        return asyncio.run(coro)


def to_lines(ingredients: list[dict[str, Any]]) -> list[IngredientLine]:
    """Ingredient lines from task payload mappings."""
    return [IngredientLine.from_dict(ingredient) for ingredient in ingredients]


async def generate_shopping_list(
    user_id: str,
    meal_plan_id: str,
    week_start_date: str,
    ingredients: list[dict[str, Any]],
) -> dict[str, Any]:
    async with worker_session() as session:
        service = ShoppingListService(ShoppingListRepository(session))
        shopping_list = await service.generate(
            user_id=user_id,
            meal_plan_id=meal_plan_id,
            week_start_date=date.fromisoformat(week_start_date),
            lines=to_lines(ingredients),
        )

    return {
        "status": "completed",
        "shopping_list_id": shopping_list.id,
        "total_items": len(shopping_list.items),
    }


async def recalculate_shopping_list(
    shopping_list_id: str,
    old_ingredients: list[dict[str, Any]],
    new_ingredients: list[dict[str, Any]],
) -> dict[str, Any]:
    async with worker_session() as session:
        service = ShoppingListService(ShoppingListRepository(session))
        shopping_list = await service.recalculate(
            shopping_list_id,
            old_lines=to_lines(old_ingredients),
            new_lines=to_lines(new_ingredients),
        )

    return {
        "status": "completed",
        "shopping_list_id": shopping_list.id,
        "total_items": len(shopping_list.items),
    }


@celery_app.task(
    bind=True,
    name="mealcart.tasks.shopping.generate_shopping_list_task",
    max_retries=3,
    default_retry_delay=30,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True,
    acks_late=True,
    reject_on_worker_lost=True,
)
def generate_shopping_list_task(
    self,
    user_id: str,
    meal_plan_id: str,
    week_start_date: str,
    ingredients: list[dict[str, Any]],
) -> dict[str, Any]:
    """
    Celery task to build the shopping list for a freshly generated meal plan.

    Args:
        user_id: Owner of the meal plan.
        meal_plan_id: The meal plan the list is generated for.
        week_start_date: Monday of the plan's week, ISO format.
        ingredients: Ingredient lines of every recipe in the plan, as
                     ``{"name", "quantity", "unit", "recipe_id"}`` mappings.

    Returns:
        dict with the new list's id and item count, or a ``failed`` status
        when an ingredient quantity cannot be parsed.
    """
    task_id = self.request.id

    with LoggingContext(task_id=task_id, user_id=user_id):
        logger.info(
            f"Starting shopping list generation for meal plan {meal_plan_id} "
            f"({len(ingredients)} lines)"
        )

        try:
            result = run_async(
                generate_shopping_list(user_id, meal_plan_id, week_start_date, ingredients)
            )
            logger.info(
                f"Shopping list {result['shopping_list_id']} generated "
                f"with {result['total_items']} items"
            )
            return result

        except QuantityParseError as e:
            # Same input fails the same way, so no retry
            logger.error(f"Shopping list generation failed: {e}")
            return {"status": "failed", "error": str(e)}

        except Exception as e:
            logger.exception(f"Shopping list generation task {task_id} failed with error: {e}")
            # Re-raise to trigger Celery retry mechanism
            raise


@celery_app.task(
    bind=True,
    name="mealcart.tasks.shopping.recalculate_shopping_list_task",
    max_retries=3,
    default_retry_delay=30,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True,
    acks_late=True,
    reject_on_worker_lost=True,
)
def recalculate_shopping_list_task(
    self,
    shopping_list_id: str,
    old_ingredients: list[dict[str, Any]],
    new_ingredients: list[dict[str, Any]],
) -> dict[str, Any]:
    """
    Celery task to apply a meal swap to a stored shopping list.

    Swaps on the same list are serialized by the row lock taken while the
    list is loaded, so concurrent tasks never lose an update.
    """
    task_id = self.request.id

    with LoggingContext(task_id=task_id, shopping_list_id=shopping_list_id):
        logger.info(
            f"Starting recalculation: -{len(old_ingredients)} +{len(new_ingredients)} lines"
        )

        try:
            result = run_async(
                recalculate_shopping_list(shopping_list_id, old_ingredients, new_ingredients)
            )
            logger.info(f"Recalculation finished with {result['total_items']} items")
            return result

        except QuantityParseError as e:
            logger.error(f"Recalculation failed: {e}")
            return {"status": "failed", "error": str(e)}

        except ShoppingListNotFoundError as e:
            logger.warning(f"Recalculation skipped: {e}")
            return {"status": "not_found", "error": str(e)}

        except Exception as e:
            logger.exception(f"Recalculation task {task_id} failed with error: {e}")
            raise
