"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from dealcart.domain.exceptions import ValidationError
from dealcart.domain.model.value_objects import Money, Quantity


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")
        assert m.currency == "MYR"

    def test_of_factory_from_string(self):
        assert Money.of("25.99").amount == Decimal("25.99")

    def test_of_factory_from_float_avoids_binary_noise(self):
        assert Money.of(0.1).amount == Decimal("0.1")

    def test_of_treats_missing_as_zero(self):
        assert Money.of(None) == Money.zero()
        assert Money.of("") == Money.zero()

    def test_of_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("abc")

    def test_of_rejects_bool(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of(True)

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_non_finite_rejected(self):
        with pytest.raises(ValidationError, match="finite"):
            Money(Decimal("NaN"))

    def test_addition(self):
        assert Money.of("10") + Money.of("5.50") == Money.of("15.50")

    def test_subtraction_going_negative_rejected(self):
        with pytest.raises(ValidationError, match="negative amount"):
            Money.of("5") - Money.of("10")

    def test_multiplication_by_int(self):
        assert Money.of("7.50") * 3 == Money.of("22.50")

    def test_multiplication_by_float_rejected(self):
        with pytest.raises(TypeError):
            Money.of("7.50") * 1.5

    def test_currency_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money.of("1") + Money(Decimal("1"), "USD")

    def test_comparison(self):
        assert Money.of("5") < Money.of("10")
        assert Money.of("10") >= Money.of("10")

    def test_str_uses_ringgit(self):
        assert str(Money.of("30")) == "RM30.00"
        assert str(Money.of("4.5")) == "RM4.50"


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_valid(self):
        assert Quantity(3).value == 3

    def test_zero_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(0)

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(-2)

    def test_non_integer_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(1.5)
