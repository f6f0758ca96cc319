"""
Unit tests for the money policy.

Tests cover:
- Parsing and rejection of malformed values
- Truncating arithmetic at 18 places
- Wire rendering
- Independence from the global decimal context
"""

from decimal import Decimal, localcontext

import pytest

from referral_engine.utils.exceptions import InvalidInputError
from referral_engine.utils.money import MONEY, ZERO, MoneyPolicy


class TestParse:
    """Test MoneyPolicy.parse."""

    def test_parse_string(self):
        """Decimal strings parse exactly."""
        assert MONEY.parse("100.50") == Decimal("100.5")

    def test_parse_strips_whitespace(self):
        """Surrounding whitespace is ignored."""
        assert MONEY.parse("  7 ") == Decimal("7")

    def test_parse_int_and_decimal(self):
        """Integers and Decimals are accepted."""
        assert MONEY.parse(5) == Decimal("5")
        assert MONEY.parse(Decimal("2.25")) == Decimal("2.25")

    def test_parse_truncates_to_18_places(self):
        """Digits past the 18th place are dropped, not rounded."""
        assert MONEY.parse("0.1234567890123456789") == Decimal(
            "0.123456789012345678"
        )

    @pytest.mark.parametrize(
        "value", ["", "   ", "abc", "1.2.3", "NaN", "Infinity", "-Infinity"]
    )
    def test_parse_rejects_malformed(self, value):
        """Unparsable and non-finite values raise InvalidInputError."""
        with pytest.raises(InvalidInputError):
            MONEY.parse(value)

    @pytest.mark.parametrize("value", ["1_000", "0.5_0", "_1"])
    def test_parse_rejects_underscore_literals(self, value):
        """Python numeric underscores are not part of the wire format."""
        with pytest.raises(InvalidInputError):
            MONEY.parse(value)

    @pytest.mark.parametrize("value", ["1e60", "1e61", Decimal("9" * 70)])
    def test_parse_rejects_values_beyond_precision(self, value):
        """Values too wide for the private context are invalid input."""
        with pytest.raises(InvalidInputError, match="precision"):
            MONEY.parse(value)

    def test_parse_widest_supported_value(self):
        """60 integer digits plus 18 fractional digits still fit."""
        value = "9" * 60
        assert MONEY.parse(value) == Decimal(value)

    @pytest.mark.parametrize("value", [1.5, True, None])
    def test_parse_rejects_unsupported_types(self, value):
        """Floats, booleans and None never enter the money path."""
        with pytest.raises(InvalidInputError):
            MONEY.parse(value)


class TestArithmetic:
    """Test truncating arithmetic."""

    def test_multiply_exact(self):
        """Exact products are kept."""
        assert MONEY.multiply(Decimal("10000"), Decimal("0.01")) == Decimal(
            "100"
        )

    def test_multiply_truncates(self):
        """Products are truncated toward zero at 18 places."""
        result = MONEY.multiply(
            Decimal("0.000000000000000003"), Decimal("0.5")
        )
        assert result == Decimal("0.000000000000000001")

    def test_add_and_sum(self):
        """Addition and summation stay exact."""
        assert MONEY.add(Decimal("0.1"), Decimal("0.2")) == Decimal("0.3")
        assert MONEY.sum(
            [Decimal("30"), Decimal("3"), Decimal("2")]
        ) == Decimal("35")

    def test_sum_empty(self):
        """Sum of nothing is zero."""
        assert MONEY.sum([]) == ZERO

    def test_divide(self):
        """Division truncates instead of rounding."""
        assert MONEY.divide(Decimal("2"), Decimal("3")) == Decimal(
            "0.666666666666666666"
        )

    def test_divide_by_zero(self):
        """Division by zero raises InvalidInputError."""
        with pytest.raises(InvalidInputError):
            MONEY.divide(Decimal("1"), ZERO)

    def test_ignores_global_context(self):
        """A low-precision global context does not affect the policy."""
        with localcontext() as ctx:
            ctx.prec = 3
            result = MONEY.multiply(Decimal("123.456"), Decimal("2"))

        assert result == Decimal("246.912")

    def test_custom_policy(self):
        """Policies with fewer places truncate accordingly."""
        cents = MoneyPolicy(places=2)
        assert cents.parse("1.999") == Decimal("1.99")


class TestToWire:
    """Test wire rendering."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (Decimal("100.000"), "100"),
            (Decimal("27.50"), "27.5"),
            (Decimal("0"), "0"),
            (Decimal("0E-18"), "0"),
            (Decimal("1E+2"), "100"),
            (Decimal("0.000000000000000001"), "0.000000000000000001"),
        ],
    )
    def test_to_wire(self, value, expected):
        """No exponent and no trailing zeros."""
        assert MONEY.to_wire(value) == expected
