"""Tests for money helpers."""

from decimal import Decimal

import pytest

from affiliate.utils.money import clamp_non_negative, round_money, to_decimal


class TestRoundMoney:
    """Half-up rounding to cents."""

    def test_half_up(self):
        assert round_money(Decimal("0.005")) == Decimal("0.01")
        assert round_money(Decimal("2.345")) == Decimal("2.35")
        assert round_money(Decimal("-2.345")) == Decimal("-2.35")

    def test_already_rounded(self):
        assert round_money(Decimal("10")) == Decimal("10.00")

    def test_too_many_digits(self):
        """Quantizing past the decimal context is a ValueError."""
        with pytest.raises(ValueError):
            round_money(Decimal("1e30"))


class TestToDecimal:
    """Loose numeric parsing."""

    def test_accepts_numbers_and_strings(self):
        assert to_decimal(5) == Decimal("5")
        assert to_decimal(" 1.50 ") == Decimal("1.50")
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(Decimal("3.3")) == Decimal("3.3")

    @pytest.mark.parametrize(
        "value",
        ["", "abc", None, True, "NaN", "Infinity", [1], "1e30", Decimal("-1e18")],
    )
    def test_rejects_non_amounts(self, value):
        with pytest.raises(ValueError):
            to_decimal(value)


def test_clamp_non_negative():
    assert clamp_non_negative(Decimal("-0.01")) == Decimal("0.00")
    assert clamp_non_negative(Decimal("1.00")) == Decimal("1.00")
