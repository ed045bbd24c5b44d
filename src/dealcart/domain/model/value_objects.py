"""Value objects for prices and quantities.

Both validate on construction, so an invalid price or a zero-unit line
cannot be represented.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import total_ordering

from dealcart.domain.exceptions import ValidationError

_ZERO = Decimal("0")


@total_ordering
@dataclass(frozen=True, eq=True)
class Money:
    """A price in ringgit.

    Deal totals arrive as strings or floats; they are held as Decimal so
    that summing a cart never drifts by a sen.
    """

    amount: Decimal
    currency: str = "MYR"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, not {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Money amount must be finite, got {self.amount}")
        if self.amount < _ZERO:
            raise ValidationError(f"Money amount cannot be negative ({self.amount})")

    def __add__(self, other: Money) -> Money:
        return self._combine(other, self.amount + other.amount)

    def __sub__(self, other: Money) -> Money:
        difference = self.amount - other.amount
        if difference < _ZERO:
            raise ValidationError(f"Subtracting {other} from {self} gives a negative amount")
        return self._combine(other, difference)

    def __mul__(self, units: int) -> Money:
        # bool is an int subclass; a line never has True units.
        if isinstance(units, bool) or not isinstance(units, int):
            raise TypeError(f"Money can only be scaled by an int, not {type(units).__name__}")
        return Money(self.amount * units, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount < other.amount

    def __str__(self) -> str:
        return f"RM{self.amount:.2f}"

    def _combine(self, other: Money, amount: Decimal) -> Money:
        self._check_currency(other)
        return Money(amount, self.currency)

    def _check_currency(self, other: Money) -> None:
        if other.currency != self.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")

    @staticmethod
    def zero() -> Money:
        return Money(_ZERO)

    @staticmethod
    def of(amount: str | float | int | Decimal | None) -> Money:
        """Coerce a payload value to Money.

        ``None`` and the empty string count as zero: deal payloads leave
        ``original_total`` out when there is nothing to compare against.
        """
        if amount is None or amount == "":
            return Money.zero()
        if isinstance(amount, bool):
            raise ValidationError(f"Invalid money amount: {amount!r}")
        try:
            value = Decimal(str(amount).strip())
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc
        return Money(value)


@dataclass(frozen=True)
class Quantity:
    """Units on a cart line; zero is expressed by removing the line."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, not {type(self.value).__name__}"
            )
        if self.value < 1:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)
