"""Normalize recipe quantities, units and ingredient names."""

from mealcart.normalize.quantity import (
    Ambiguous,
    QuantityParseError,
    is_ambiguous_quantity,
    parse_quantity,
    quantity_value,
)
from mealcart.normalize.units import (
    NormalizedUnit,
    UnitCategory,
    can_aggregate,
    identify_unit,
    normalize_ingredient_name,
    normalize_unit,
)

__all__ = [
    "Ambiguous",
    "NormalizedUnit",
    "QuantityParseError",
    "UnitCategory",
    "can_aggregate",
    "identify_unit",
    "is_ambiguous_quantity",
    "normalize_ingredient_name",
    "normalize_unit",
    "parse_quantity",
    "quantity_value",
]
