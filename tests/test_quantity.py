"""Unit tests for quantity expression parsing."""

from fractions import Fraction

import pytest

from mealcart.normalize.quantity import (
    Ambiguous,
    QuantityParseError,
    is_ambiguous_quantity,
    parse_quantity,
    parse_quantity_string,
    quantity_value,
)


class TestParseQuantityString:
    """Tests for parse_quantity_string function."""

    def test_parse_integer(self):
        """Test parsing simple integers."""
        assert parse_quantity_string("2") == Fraction(2)
        assert parse_quantity_string("10") == Fraction(10)

    def test_parse_decimal_exactly(self):
        """Decimals become exact fractions, never floats."""
        assert parse_quantity_string("1.5") == Fraction(3, 2)
        assert parse_quantity_string("0.1") == Fraction(1, 10)
        assert parse_quantity_string(".25") == Fraction(1, 4)

    def test_parse_fraction(self):
        """Test parsing simple fractions."""
        assert parse_quantity_string("1/2") == Fraction(1, 2)
        assert parse_quantity_string("3/4") == Fraction(3, 4)
        assert parse_quantity_string("1 / 3") == Fraction(1, 3)

    def test_parse_mixed_fraction(self):
        """Test parsing mixed fractions like '1 1/2'."""
        assert parse_quantity_string("1 1/2") == Fraction(3, 2)
        assert parse_quantity_string("2 1/4") == Fraction(9, 4)

    def test_surrounding_whitespace(self):
        """Whitespace around the expression is ignored."""
        assert parse_quantity_string("  2 ") == Fraction(2)

    def test_parse_ambiguous(self):
        """Qualitative phrases parse to the Ambiguous marker."""
        assert isinstance(parse_quantity_string("a pinch"), Ambiguous)
        assert isinstance(parse_quantity_string("To Taste"), Ambiguous)
        assert isinstance(parse_quantity_string(""), Ambiguous)

    def test_number_before_qualitative_word(self):
        """A leading number is the amount, the qualitative word is dropped."""
        assert parse_quantity_string("2 pinches") == Fraction(2)
        assert parse_quantity_string("1/2 optional") == Fraction(1, 2)
        assert parse_quantity_string("1 1/2 to taste") == Fraction(3, 2)
        assert parse_quantity_string("0.5 as needed") == Fraction(1, 2)
        assert isinstance(parse_quantity_string("salt to taste"), Ambiguous)

    def test_bad_number_before_qualitative_word(self):
        """A malformed leading number is still an error."""
        for expression in ("1/0 optional", "-1 pinch"):
            with pytest.raises(QuantityParseError):
                parse_quantity_string(expression)

    def test_zero_denominator(self):
        """A zero denominator is rejected."""
        with pytest.raises(QuantityParseError, match="denominator cannot be zero"):
            parse_quantity_string("1/0")

    def test_negative_values(self):
        """Negative quantities are rejected in every form."""
        for expression in ("-1", "-0.5", "-1/2", "1/-2"):
            with pytest.raises(QuantityParseError):
                parse_quantity_string(expression)

    def test_garbage(self):
        """Non-numeric, non-qualitative text is rejected."""
        with pytest.raises(QuantityParseError, match="not a number"):
            parse_quantity_string("lots")


class TestIsAmbiguousQuantity:
    """Tests for is_ambiguous_quantity function."""

    def test_keywords(self):
        """Recognized keywords match regardless of case."""
        assert is_ambiguous_quantity("pinch")
        assert is_ambiguous_quantity("A Handful")
        assert is_ambiguous_quantity("as needed")

    def test_phrases_around_keywords(self):
        """Phrases opening or closing with a keyword match."""
        assert is_ambiguous_quantity("pinch of")
        assert is_ambiguous_quantity("salt to taste")

    def test_numbers_are_not_ambiguous(self):
        """Numeric expressions are not ambiguous."""
        assert not is_ambiguous_quantity("2")
        assert not is_ambiguous_quantity("1 1/2")


class TestParseQuantity:
    """Tests for parse_quantity function."""

    def test_none_is_ambiguous(self):
        """A missing quantity is an unmeasured amount."""
        assert parse_quantity(None) == Ambiguous()

    def test_native_numbers(self):
        """Ints, Fractions and floats are accepted exactly."""
        assert parse_quantity(3) == Fraction(3)
        assert parse_quantity(Fraction(2, 3)) == Fraction(2, 3)
        assert parse_quantity(0.1) == Fraction(1, 10)
        assert parse_quantity(1e-05) == Fraction(1, 100000)

    def test_rejects_bad_native_values(self):
        """Negative, non-finite and boolean values are rejected."""
        for expression in (-1, Fraction(-1, 2), -0.5, float("nan"), float("inf"), True):
            with pytest.raises(QuantityParseError):
                parse_quantity(expression)

    def test_rejects_unsupported_types(self):
        """Other types are rejected."""
        with pytest.raises(QuantityParseError, match="unsupported type"):
            parse_quantity(["1"])  # type: ignore[arg-type]

    def test_quantity_value(self):
        """Ambiguous amounts contribute zero."""
        assert quantity_value(Ambiguous("pinch")) == 0
        assert quantity_value(Fraction(5, 2)) == Fraction(5, 2)


class TestQuantityParseError:
    """Tests for QuantityParseError messages."""

    def test_is_value_error(self):
        """Parse errors are ValueErrors."""
        assert issubclass(QuantityParseError, ValueError)

    def test_with_context_names_ingredient_and_recipe(self):
        """Context is carried into the message."""
        error = QuantityParseError("lots", "not a number").with_context("flour", "recipe-42")
        assert error.ingredient == "flour"
        assert error.recipe_id == "recipe-42"
        assert "'flour'" in str(error)
        assert "'recipe-42'" in str(error)
        assert str(error).endswith(": not a number")
