"""Exact parsing of recipe quantity expressions."""

import math
import re
from dataclasses import dataclass
from fractions import Fraction

from mealcart.logging_config import get_logger

logger = get_logger(__name__)


# Qualitative amounts that cannot be measured. They contribute nothing to a sum
# but flag the aggregated item so the user still sees it.
AMBIGUOUS_QUANTITIES: frozenset[str] = frozenset(
    {
        "pinch",
        "a pinch",
        "pinches",
        "dash",
        "a dash",
        "to taste",
        "taste",
        "handful",
        "a handful",
        "some",
        "sprinkle",
        "a sprinkle",
        "as needed",
        "optional",
    }
)

_INTEGER_RE = re.compile(r"^\d+$")
_DECIMAL_RE = re.compile(r"^(\d*)\.(\d+)$")
_FRACTION_RE = re.compile(r"^(-?\d+)\s*/\s*(-?\d+)$")
_MIXED_RE = re.compile(r"^(\d+)\s+(\d+\s*/\s*-?\d+)$")


class QuantityParseError(ValueError):
    """Raised when a quantity is neither a number nor a recognized qualitative phrase."""

    def __init__(
        self,
        expression: object,
        reason: str | None = None,
        ingredient: str | None = None,
        recipe_id: str | None = None,
    ):
        self.expression = expression
        self.reason = reason
        self.ingredient = ingredient
        self.recipe_id = recipe_id
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        message = f"Cannot parse quantity {self.expression!r}"
        if self.ingredient:
            message += f" for ingredient {self.ingredient!r}"
        if self.recipe_id:
            message += f" in recipe {self.recipe_id!r}"
        if self.reason:
            message += f": {self.reason}"
        return message

    def with_context(
        self, ingredient: str | None = None, recipe_id: str | None = None
    ) -> "QuantityParseError":
        """Return a copy of this error naming the offending ingredient and recipe."""
        return QuantityParseError(
            self.expression,
            reason=self.reason,
            ingredient=ingredient or self.ingredient,
            recipe_id=recipe_id or self.recipe_id,
        )


@dataclass(frozen=True)
class Ambiguous:
    """Marker for a qualitative quantity such as "a pinch" or "to taste"."""

    expression: str = ""


ParsedQuantity = Fraction | Ambiguous


def is_ambiguous_quantity(expression: str) -> bool:
    """
    Check whether a quantity string is a recognized qualitative phrase.

    Matches the phrase itself ("to taste") as well as phrases that open or
    close with one ("pinch of", "salt to taste").
    """
    normalized = " ".join(expression.lower().split())
    if not normalized or normalized in AMBIGUOUS_QUANTITIES:
        return True

    return any(
        normalized.startswith(f"{keyword} ") or normalized.endswith(f" {keyword}")
        for keyword in AMBIGUOUS_QUANTITIES
    )


def _parse_fraction(text: str, expression: object) -> Fraction:
    match = _FRACTION_RE.match(text)
    if not match:
        raise QuantityParseError(expression, "invalid fraction")

    numerator = int(match.group(1))
    denominator = int(match.group(2))
    if denominator == 0:
        raise QuantityParseError(expression, "denominator cannot be zero")
    if denominator < 0:
        raise QuantityParseError(expression, "negative denominator is not allowed")
    if numerator < 0:
        raise QuantityParseError(expression, "negative quantities are not allowed")
    return Fraction(numerator, denominator)


def _parse_decimal(whole: str, fraction_digits: str) -> Fraction:
    # Fixed-point scaling: "1.25" -> 125 / 100
    scale = 10 ** len(fraction_digits)
    return Fraction(int(whole or "0") * scale + int(fraction_digits), scale)


def _parse_number(text: str, expression: object) -> Fraction | None:
    """Exact value of a numeric expression, or None if it is not one."""
    if text.startswith("-"):
        raise QuantityParseError(expression, "negative quantities are not allowed")

    if _INTEGER_RE.match(text):
        return Fraction(int(text))

    decimal_match = _DECIMAL_RE.match(text)
    if decimal_match:
        return _parse_decimal(decimal_match.group(1), decimal_match.group(2))

    mixed_match = _MIXED_RE.match(text)
    if mixed_match:
        whole = Fraction(int(mixed_match.group(1)))
        return whole + _parse_fraction(mixed_match.group(2), expression)

    if "/" in text:
        return _parse_fraction(text, expression)

    return None


def _leading_number(text: str, expression: object) -> Fraction | None:
    # "2 pinches", "1 1/2 optional": the amount before a qualitative word counts
    tokens = text.split()
    for size in (2, 1):
        if len(tokens) <= size or tokens[0][0] not in "0123456789.-":
            continue
        head = " ".join(tokens[:size])
        tail = " ".join(tokens[size:])
        if not is_ambiguous_quantity(tail):
            continue
        number = _parse_number(head, expression)
        if number is not None:
            return number
    return None


def parse_quantity_string(quantity_str: str) -> ParsedQuantity:
    """
    Parse a quantity string into an exact Fraction.

    Handles formats like:
    - "2"
    - "1.5" (exact, never through float)
    - "1/2"
    - "1 1/2" (one and a half)
    - "2 pinches", "1/2 optional" (the leading number counts)
    - "a pinch", "to taste", "" (returns Ambiguous)

    Raises:
        QuantityParseError: For negative values, zero denominators and
            anything that is neither numeric nor qualitative.
    """
    text = " ".join(quantity_str.strip().split())

    if is_ambiguous_quantity(text):
        number = _leading_number(text, quantity_str)
        if number is not None:
            return number
        logger.debug(f"Treating quantity {quantity_str!r} as ambiguous")
        return Ambiguous(text.lower())

    number = _parse_number(text, quantity_str)
    if number is None:
        raise QuantityParseError(quantity_str, "not a number, fraction or qualitative amount")
    return number


def parse_quantity(expression: str | int | float | Fraction | None) -> ParsedQuantity:
    """
    Parse a quantity expression into an exact rational or an Ambiguous marker.

    Native numbers are accepted as well: ints and Fractions are exact, floats
    are read through their shortest decimal representation so that ``0.1``
    becomes exactly ``1/10``.
    """
    if expression is None:
        return Ambiguous()

    if isinstance(expression, bool):
        raise QuantityParseError(expression, "booleans are not quantities")

    if isinstance(expression, Fraction):
        if expression < 0:
            raise QuantityParseError(expression, "negative quantities are not allowed")
        return expression

    if isinstance(expression, int):
        if expression < 0:
            raise QuantityParseError(expression, "negative quantities are not allowed")
        return Fraction(expression)

    if isinstance(expression, float):
        if not math.isfinite(expression):
            raise QuantityParseError(expression, "not a finite number")
        if expression < 0:
            raise QuantityParseError(expression, "negative quantities are not allowed")
        return Fraction(repr(expression))

    if isinstance(expression, str):
        return parse_quantity_string(expression)

    raise QuantityParseError(expression, f"unsupported type {type(expression).__name__}")


def quantity_value(parsed: ParsedQuantity) -> Fraction:
    """Numeric contribution of a parsed quantity (zero for ambiguous amounts)."""
    if isinstance(parsed, Ambiguous):
        return Fraction(0)
    return parsed
