"""Grouping and exact summation of normalized ingredient lines."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, NamedTuple

from mealcart.logging_config import get_logger
from mealcart.normalize.quantity import (
    Ambiguous,
    QuantityParseError,
    parse_quantity,
)
from mealcart.normalize.units import UnitCategory, identify_unit, normalize_ingredient_name

logger = get_logger(__name__)


class AggregationKey(NamedTuple):
    """Identity of a mergeable group: normalized name plus base unit."""

    name: str
    unit: str


@dataclass(frozen=True)
class IngredientLine:
    """One ingredient line of a recipe, as supplied by the meal planner."""

    name: str
    quantity_expression: str | int | float | Fraction | None
    unit: str = ""
    source_recipe_id: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], recipe_id: str | None = None) -> "IngredientLine":
        """Build a line from a ``{"name", "quantity", "unit"}`` mapping."""
        return cls(
            name=data.get("name", ""),
            quantity_expression=data.get("quantity"),
            unit=data.get("unit") or "",
            source_recipe_id=data.get("recipe_id", recipe_id),
        )


@dataclass(frozen=True)
class NormalizedLine:
    """An ingredient line converted into its base unit."""

    key: AggregationKey
    quantity: Fraction
    unit_category: UnitCategory
    is_ambiguous: bool


@dataclass(frozen=True)
class IngredientGroup:
    """Running total for one aggregation key."""

    quantity: Fraction = Fraction(0)
    is_ambiguous: bool = False

    def __add__(self, other: "IngredientGroup") -> "IngredientGroup":
        return IngredientGroup(
            quantity=self.quantity + other.quantity,
            is_ambiguous=self.is_ambiguous or other.is_ambiguous,
        )


def normalize_line(line: IngredientLine) -> NormalizedLine:
    """
    Parse and convert a single ingredient line.

    Raises:
        QuantityParseError: Naming the ingredient and its recipe when the
            quantity cannot be parsed.
    """
    try:
        parsed = parse_quantity(line.quantity_expression)
    except QuantityParseError as e:
        raise e.with_context(ingredient=line.name, recipe_id=line.source_recipe_id) from e

    unit = identify_unit(line.unit)
    key = AggregationKey(normalize_ingredient_name(line.name), unit.base_unit)

    if isinstance(parsed, Ambiguous):
        return NormalizedLine(key, Fraction(0), unit.category, is_ambiguous=True)

    return NormalizedLine(key, parsed * unit.factor, unit.category, is_ambiguous=False)


def group_normalized(lines: Iterable[NormalizedLine]) -> dict[AggregationKey, IngredientGroup]:
    """Group normalized lines by key, summing quantities exactly."""
    groups: dict[AggregationKey, IngredientGroup] = {}
    for line in lines:
        contribution = IngredientGroup(line.quantity, line.is_ambiguous)
        groups[line.key] = groups.get(line.key, IngredientGroup()) + contribution
    return groups


def group_lines(lines: Iterable[IngredientLine]) -> dict[AggregationKey, IngredientGroup]:
    """
    Normalize and group raw ingredient lines.

    Every line is normalized before anything is grouped, so a single bad
    quantity fails the whole call.
    """
    normalized = [normalize_line(line) for line in lines if line.name and line.name.strip()]
    groups = group_normalized(normalized)
    logger.debug(f"Grouped {len(normalized)} ingredient lines into {len(groups)} items")
    return groups


def merge_groups(
    *partials: Mapping[AggregationKey, IngredientGroup],
) -> dict[AggregationKey, IngredientGroup]:
    """
    Combine partial groupings.

    ``merge_groups(group_lines(a), group_lines(b)) == group_lines(a + b)``.
    """
    merged: dict[AggregationKey, IngredientGroup] = {}
    for partial in partials:
        for key, group in partial.items():
            merged[key] = merged.get(key, IngredientGroup()) + group
    return merged
