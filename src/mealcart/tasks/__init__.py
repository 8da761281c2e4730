"""Celery tasks for background job processing."""

from mealcart.tasks.shopping import (
    generate_shopping_list_task,
    recalculate_shopping_list_task,
)

__all__ = [
    "generate_shopping_list_task",
    "recalculate_shopping_list_task",
]
