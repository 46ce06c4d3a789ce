"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import Money, Quantity


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation_rounds_to_cents(self):
        m = Money(Decimal("10.5"))
        assert m.amount == Decimal("10.50")
        assert m.amount.as_tuple().exponent == -2

    def test_rounds_half_up(self):
        assert Money(Decimal("0.005")).amount == Decimal("0.01")
        assert Money(Decimal("2.345")).amount == Decimal("2.35")
        assert Money(Decimal("2.344")).amount == Decimal("2.34")

    def test_of_factory_from_string(self):
        assert Money.of("25.99").amount == Decimal("25.99")

    def test_of_factory_from_int(self):
        assert Money.of(10).amount == Decimal("10.00")

    def test_of_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("ten")

    def test_of_rejects_none(self):
        with pytest.raises(ValidationError, match="required"):
            Money.of(None)

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_non_finite_rejected(self):
        with pytest.raises(ValidationError, match="finite"):
            Money.of("NaN")

    def test_amount_beyond_decimal_precision_rejected(self):
        with pytest.raises(ValidationError, match="too large"):
            Money.of("1e30")

    def test_sum_beyond_decimal_precision_rejected(self):
        huge = Money.of("9" * 26)
        with pytest.raises(ValidationError, match="too large"):
            huge + huge

    def test_addition(self):
        assert Money.of("10") + Money.of("5.50") == Money.of("15.50")

    def test_pay_down(self):
        assert Money.of("12.50").pay_down(Money.of("5")) == Money.of("7.50")

    def test_pay_down_saturates_at_zero(self):
        result = Money.of("3.00").pay_down(Money.of("10"))
        assert result == Money.zero()
        assert result.is_zero

    def test_plain_string_has_two_fraction_digits(self):
        assert Money.of("15").to_plain_string() == "15.00"
        assert Money.of("9.5").to_plain_string() == "9.50"
        assert Money.zero().to_plain_string() == "0.00"
        assert str(Money.of("1234567.891")) == "1234567.89"

    def test_comparison_operators(self):
        assert Money.of("5") < Money.of("10")
        assert Money.of("10") > Money.of("5")
        assert Money.of("10") >= Money.of("10")
        assert Money.of("10") <= Money.of("10.00")


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_valid_quantity(self):
        assert Quantity(5).value == 5

    def test_zero_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(0)

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(-3)

    def test_bool_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(True)

    def test_str(self):
        assert str(Quantity(7)) == "7"
