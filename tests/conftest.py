"""Pytest configuration and shared fixtures."""

from copy import deepcopy
from datetime import date

import pytest

from mealcart.plan.aggregation import IngredientLine
from mealcart.plan.shopping_list import ShoppingList

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (require external services)"
    )
    config.addinivalue_line("markers", "slow: marks tests as slow running")


# =============================================================================
# In-Memory Store
# =============================================================================


class InMemoryShoppingListStore:
    """Shopping list store keeping copies in a dict, for service and API tests."""

    def __init__(self):
        self.lists: dict[str, ShoppingList] = {}
        self.commits = 0
        self.locked: list[str] = []

    async def get(self, shopping_list_id: str, for_update: bool = False) -> ShoppingList | None:
        if for_update:
            self.locked.append(shopping_list_id)
        stored = self.lists.get(shopping_list_id)
        return deepcopy(stored) if stored is not None else None

    async def get_by_week(self, user_id: str, week_start_date: date) -> ShoppingList | None:
        for stored in self.lists.values():
            if stored.user_id == user_id and stored.week_start_date == week_start_date:
                return deepcopy(stored)
        return None

    async def add(self, shopping_list: ShoppingList) -> None:
        self.lists[shopping_list.id] = deepcopy(shopping_list)

    async def save(self, shopping_list: ShoppingList) -> None:
        self.lists[shopping_list.id] = deepcopy(shopping_list)

    async def delete(self, shopping_list: ShoppingList) -> None:
        self.lists.pop(shopping_list.id, None)

    async def prune_weeks(self, user_id: str, keep: int) -> int:
        owned = sorted(
            (stored for stored in self.lists.values() if stored.user_id == user_id),
            key=lambda stored: stored.week_start_date,
            reverse=True,
        )
        for stale in owned[keep:]:
            del self.lists[stale.id]
        return len(owned[keep:])

    async def commit(self) -> None:
        self.commits += 1


@pytest.fixture
def store():
    """Empty in-memory shopping list store."""
    return InMemoryShoppingListStore()


# =============================================================================
# Ingredient Line Fixtures
# =============================================================================


@pytest.fixture
def chicken_recipe_lines():
    """Recipe using a pound of chicken and two tomatoes."""
    return [
        IngredientLine("chicken", "1", "lb", source_recipe_id="recipe-chicken"),
        IngredientLine("tomato", "2", "whole", source_recipe_id="recipe-chicken"),
    ]


@pytest.fixture
def beef_recipe_lines():
    """Recipe using two pounds of beef and one tomato."""
    return [
        IngredientLine("beef", "2", "lb", source_recipe_id="recipe-beef"),
        IngredientLine("tomato", "1", "whole", source_recipe_id="recipe-beef"),
    ]


@pytest.fixture
def weekly_plan_lines(chicken_recipe_lines):
    """A week's ingredient lines: the chicken recipe, more chicken and an onion."""
    return [
        *chicken_recipe_lines,
        IngredientLine("chicken", "1", "lb", source_recipe_id="recipe-stir-fry"),
        IngredientLine("onion", "1", "whole", source_recipe_id="recipe-stir-fry"),
    ]


@pytest.fixture
def mock_ingredient_payload():
    """Ingredient lines as they arrive in API and task payloads."""
    return [
        {"name": "Chicken", "quantity": "1", "unit": "lb", "recipe_id": "recipe-chicken"},
        {"name": "tomato", "quantity": 2, "unit": "whole", "recipe_id": "recipe-chicken"},
        {"name": "salt", "quantity": "a pinch", "unit": "", "recipe_id": "recipe-chicken"},
        {"name": "milk", "quantity": "1 1/2", "unit": "cups", "recipe_id": "recipe-pancakes"},
    ]
