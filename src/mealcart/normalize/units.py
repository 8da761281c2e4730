"""Unit normalization and conversion utilities."""

from dataclasses import dataclass
from enum import Enum
from fractions import Fraction

from mealcart.logging_config import get_logger

logger = get_logger(__name__)


class UnitCategory(str, Enum):
    """Measurement family a unit belongs to."""

    VOLUME = "volume"
    WEIGHT = "weight"
    COUNT = "count"
    OPAQUE = "opaque"


# Base unit every recognized unit of a category converts into
BASE_UNITS: dict[UnitCategory, str] = {
    UnitCategory.VOLUME: "ml",
    UnitCategory.WEIGHT: "g",
    UnitCategory.COUNT: "item",
}


# =============================================================================
# Unit Conversion Tables
# =============================================================================

# Volume conversions (base unit: ml)
VOLUME_UNITS: dict[str, Fraction] = {
    "ml": Fraction(1),
    "milliliter": Fraction(1),
    "milliliters": Fraction(1),
    "millilitre": Fraction(1),
    "millilitres": Fraction(1),
    "l": Fraction(1000),
    "liter": Fraction(1000),
    "liters": Fraction(1000),
    "litre": Fraction(1000),
    "litres": Fraction(1000),
    "cup": Fraction(240),
    "cups": Fraction(240),
    "tbsp": Fraction(15),
    "tbs": Fraction(15),
    "tablespoon": Fraction(15),
    "tablespoons": Fraction(15),
    "tsp": Fraction(5),
    "teaspoon": Fraction(5),
    "teaspoons": Fraction(5),
}

# Weight conversions (base unit: g)
WEIGHT_UNITS: dict[str, Fraction] = {
    "g": Fraction(1),
    "gram": Fraction(1),
    "grams": Fraction(1),
    "kg": Fraction(1000),
    "kilogram": Fraction(1000),
    "kilograms": Fraction(1000),
    "oz": Fraction(2835, 100),
    "ounce": Fraction(2835, 100),
    "ounces": Fraction(2835, 100),
    "lb": Fraction(45359, 100),
    "lbs": Fraction(45359, 100),
    "pound": Fraction(45359, 100),
    "pounds": Fraction(45359, 100),
}

# Count-based units (no conversion needed, base unit: item).
# A missing unit counts items too: "2 eggs".
COUNT_UNITS: dict[str, Fraction] = {
    "": Fraction(1),
    "item": Fraction(1),
    "items": Fraction(1),
    "whole": Fraction(1),
    "piece": Fraction(1),
    "pieces": Fraction(1),
    "pc": Fraction(1),
    "pcs": Fraction(1),
    "clove": Fraction(1),
    "cloves": Fraction(1),
}

_UNIT_TABLES: tuple[tuple[UnitCategory, dict[str, Fraction]], ...] = (
    (UnitCategory.VOLUME, VOLUME_UNITS),
    (UnitCategory.WEIGHT, WEIGHT_UNITS),
    (UnitCategory.COUNT, COUNT_UNITS),
)


@dataclass(frozen=True)
class NormalizedUnit:
    """A unit resolved to its category, base unit and conversion factor."""

    category: UnitCategory
    base_unit: str
    factor: Fraction

    @property
    def is_opaque(self) -> bool:
        return self.category is UnitCategory.OPAQUE


def _clean_unit(unit: str | None) -> str:
    return " ".join((unit or "").lower().split())


def identify_unit(unit: str | None) -> NormalizedUnit:
    """
    Resolve a free-text unit against the synonym tables.

    Unrecognized units are opaque: they are their own base unit with factor 1,
    so "2 cans" never merges with anything but other cans.
    """
    cleaned = _clean_unit(unit)

    for category, table in _UNIT_TABLES:
        if cleaned in table:
            return NormalizedUnit(category, BASE_UNITS[category], table[cleaned])

    logger.debug(f"Unrecognized unit {unit!r}, keeping it as an opaque unit")
    return NormalizedUnit(UnitCategory.OPAQUE, cleaned, Fraction(1))


def normalize_unit(unit: str | None, quantity: Fraction) -> tuple[UnitCategory, str, Fraction]:
    """
    Convert a quantity into the base unit of its category.

    Returns:
        Tuple of (category, base_unit, base_quantity), e.g.
        ``normalize_unit("lb", Fraction(1)) == (WEIGHT, "g", Fraction(45359, 100))``.
    """
    normalized = identify_unit(unit)
    return normalized.category, normalized.base_unit, quantity * normalized.factor


def category_for_base_unit(base_unit: str) -> UnitCategory:
    """Recover the category of an already-normalized base unit."""
    for category, base in BASE_UNITS.items():
        if base == base_unit:
            return category
    return UnitCategory.OPAQUE


def can_aggregate(unit1: str | None, unit2: str | None) -> bool:
    """
    Check if two units can be aggregated together.

    Recognized units aggregate within their category; opaque units only with
    the very same unit.
    """
    return identify_unit(unit1).base_unit == identify_unit(unit2).base_unit


def normalize_ingredient_name(name: str) -> str:
    """Normalize an ingredient name for grouping: trimmed, lowercase, single-spaced."""
    if not name:
        return ""
    return " ".join(name.lower().split())
