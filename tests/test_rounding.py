"""Unit tests for the shared money and ratio rounding."""

from decimal import Decimal

import pytest

from claimflow.core.exceptions import InvalidInputError
from claimflow.finance.rounding import (
    multiply_money,
    require_amount,
    round_fraction,
    round_money,
    same_cents,
    to_float_or_none,
)


class TestRounding:

    def test_money_rounds_half_up(self):
        assert round_money(2.675) == 2.68
        assert round_money(Decimal("0.005")) == 0.01

    def test_fraction_rounds_half_up_to_four_places(self):
        assert round_fraction(Decimal("0.22705")) == 0.2271
        assert round_fraction(1 / 3) == 0.3333

    def test_multiply_money_is_exact(self):
        assert multiply_money(10000, 0.125) == 1250.00

    def test_same_cents(self):
        assert same_cents(1000.1, 1000.1000001)
        assert not same_cents(1000.1, 1000.11)


class TestRequireAmount:

    @pytest.mark.parametrize("value", [-0.01, float("nan"), float("inf"), True, "abc", None])
    def test_rejects(self, value):
        with pytest.raises(InvalidInputError):
            require_amount(value, "amount")

    def test_accepts_decimal(self):
        assert require_amount(Decimal("12.50"), "amount") == 12.5

    def test_blank_configured_value_is_none(self):
        assert to_float_or_none("  ", "rate") is None
        assert to_float_or_none("0.125", "rate") == 0.125
