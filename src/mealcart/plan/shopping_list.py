"""Shopping list generation from meal plan ingredient lines."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from fractions import Fraction

from mealcart.logging_config import get_logger
from mealcart.plan.aggregation import (
    AggregationKey,
    IngredientGroup,
    IngredientLine,
    group_lines,
)
from mealcart.plan.categorize import Category, CategoryLookup, categorize
from mealcart.plan.rounding import format_quantity, to_display_string

logger = get_logger(__name__)


@dataclass
class AggregatedIngredient:
    """A single item in the shopping list."""

    name: str
    unit: str
    quantity: Fraction
    formatted_quantity: str
    category: Category
    is_ambiguous: bool = False
    collected: bool = False

    @property
    def key(self) -> AggregationKey:
        return AggregationKey(self.name, self.unit)

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.name, self.unit)

    def display_quantity(self) -> str:
        """Get human-readable quantity string, e.g. "1.5 L" or "3 item"."""
        if self.is_ambiguous and self.quantity == 0:
            return "as needed"
        qty, unit = to_display_string(self.quantity, self.unit)
        if unit:
            return f"{qty} {unit}"
        return qty


def make_item(
    key: AggregationKey,
    group: IngredientGroup,
    categorizer: CategoryLookup = categorize,
    collected: bool = False,
) -> AggregatedIngredient:
    """Build a shopping list item from an aggregated group."""
    return AggregatedIngredient(
        name=key.name,
        unit=key.unit,
        quantity=group.quantity,
        formatted_quantity=format_quantity(group.quantity, key.unit),
        category=categorizer(key.name),
        is_ambiguous=group.is_ambiguous,
        collected=collected,
    )


def sort_items(items: Iterable[AggregatedIngredient]) -> list[AggregatedIngredient]:
    """Deterministic list order: by normalized name, then base unit."""
    return sorted(items, key=lambda item: item.sort_key)


def aggregate(
    lines: Iterable[IngredientLine],
    categorizer: CategoryLookup = categorize,
) -> list[AggregatedIngredient]:
    """
    Aggregate ingredient lines into shopping list items.

    Lines are grouped by (normalized name, base unit); quantities in
    incompatible units stay separate items. Qualitative amounts ("a pinch")
    add nothing but flag their item as ambiguous.

    Raises:
        QuantityParseError: If any line has an unparsable quantity. No partial
            list is returned.
    """
    groups = group_lines(lines)
    items = sort_items(make_item(key, group, categorizer) for key, group in groups.items())

    ambiguous_count = sum(1 for item in items if item.is_ambiguous)
    logger.info(f"Aggregated {len(items)} shopping items ({ambiguous_count} ambiguous)")

    return items


@dataclass
class ShoppingList:
    """Complete shopping list for one user's week."""

    id: str
    user_id: str
    meal_plan_id: str
    week_start_date: date
    items: list[AggregatedIngredient] = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime | None = None

    def get_item(self, name: str, unit: str) -> AggregatedIngredient | None:
        """Find an item by its aggregation key."""
        key = AggregationKey(name, unit)
        for item in self.items:
            if item.key == key:
                return item
        return None

    @property
    def items_by_category(self) -> dict[str, list[AggregatedIngredient]]:
        """Items grouped by department, departments in store order, empty ones left out."""
        grouped: dict[str, list[AggregatedIngredient]] = {}
        for category in Category:
            category_items = [item for item in self.items if item.category is category]
            if category_items:
                grouped[category.value] = category_items
        return grouped

    @property
    def collected_count(self) -> int:
        return sum(1 for item in self.items if item.collected)

    @property
    def is_complete(self) -> bool:
        """True once every item has been checked off."""
        return bool(self.items) and self.collected_count == len(self.items)
