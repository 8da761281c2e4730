"""Shopping list aggregation, recalculation and use cases."""

from mealcart.plan.aggregation import AggregationKey, IngredientGroup, IngredientLine
from mealcart.plan.categorize import Category, categorize
from mealcart.plan.recalculation import recalculate
from mealcart.plan.shopping_list import AggregatedIngredient, ShoppingList, aggregate

__all__ = [
    "AggregatedIngredient",
    "AggregationKey",
    "Category",
    "IngredientGroup",
    "IngredientLine",
    "ShoppingList",
    "aggregate",
    "categorize",
    "recalculate",
]
