"""Display rounding of exact shopping quantities.

Quantities are summed and stored as exact fractions. The helpers here only
produce what the user reads; nothing rounded here is fed back into
arithmetic.
"""

import math
from fractions import Fraction

from mealcart.normalize.units import UnitCategory, category_for_base_unit

# Decimal places shown for volume and weight quantities
DISPLAY_DECIMALS = 1

_KITCHEN_DENOMINATORS = (4, 3, 2)


def _round_half_up(value: Fraction, decimals: int = 0) -> Fraction:
    scale = 10**decimals
    return Fraction(math.floor(value * scale + Fraction(1, 2)), scale)


def round_to_kitchen_fraction(quantity: Fraction) -> Fraction:
    """
    Round a quantity to a value a cook would measure.

    Rounding rules:
    - below 1: nearest quarter, third or half (quarters win ties), never 0
      for a positive amount
    - 1 to 10: nearest half
    - 10 and above: nearest whole number
    """
    if quantity < 1:
        candidates = [
            _round_half_up(quantity * denominator) / denominator
            for denominator in _KITCHEN_DENOMINATORS
        ]
        closest = min(candidates, key=lambda candidate: abs(quantity - candidate))
        if quantity > 0 and closest == 0:
            return Fraction(1, _KITCHEN_DENOMINATORS[0])
        return closest
    if quantity < 10:
        return _round_half_up(quantity * 2) / 2
    return _round_half_up(quantity)


def round_practical(quantity: Fraction, base_unit: str) -> Fraction:
    """Round an exact quantity for display according to its unit category."""
    category = category_for_base_unit(base_unit)

    if category is UnitCategory.COUNT:
        # Nobody buys half an onion
        return Fraction(math.ceil(quantity))
    if category is UnitCategory.OPAQUE:
        return round_to_kitchen_fraction(quantity)
    return _round_half_up(quantity, DISPLAY_DECIMALS)


def format_decimal(value: Fraction) -> str:
    """Render a rounded value: integers without decimals, otherwise trailing zeros dropped."""
    if value.denominator == 1:
        return str(value.numerator)
    return f"{float(value):.{DISPLAY_DECIMALS + 2}f}".rstrip("0").rstrip(".")


def format_fraction(value: Fraction) -> str:
    """Render a kitchen fraction: 3/2 -> "1 1/2", 1/2 -> "1/2", 4/2 -> "2"."""
    whole, remainder = divmod(value.numerator, value.denominator)
    if remainder == 0:
        return str(whole)
    fraction = f"{remainder}/{value.denominator}"
    return f"{whole} {fraction}" if whole else fraction


def practical_quantity(quantity: Fraction, base_unit: str) -> tuple[Fraction, str]:
    """
    Round an exact quantity and format it for display.

    Returns:
        Tuple of (rounded_quantity, formatted_string).
    """
    rounded = round_practical(quantity, base_unit)
    if category_for_base_unit(base_unit) is UnitCategory.OPAQUE:
        return rounded, format_fraction(rounded)
    return rounded, format_decimal(rounded)


def format_quantity(quantity: Fraction, base_unit: str) -> str:
    """Formatted display string for an exact quantity."""
    return practical_quantity(quantity, base_unit)[1]


def to_display_string(quantity: Fraction, base_unit: str) -> tuple[str, str]:
    """
    Convert an exact base-unit quantity into a human-friendly (quantity, unit) pair.

    Large volumes and weights are shown in litres and kilograms.
    """
    category = category_for_base_unit(base_unit)

    if category is UnitCategory.VOLUME and quantity >= 1000:
        return format_decimal(_round_half_up(quantity / 1000, 2)), "L"
    if category is UnitCategory.WEIGHT and quantity >= 1000:
        return format_decimal(_round_half_up(quantity / 1000, 2)), "kg"
    return format_quantity(quantity, base_unit), base_unit
