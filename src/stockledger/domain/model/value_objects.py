"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from stockledger.domain.exceptions import ValidationError

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """Non-negative monetary amount, always held at two decimal places.

    Uses Decimal to avoid floating-point rounding errors.  Every value is
    quantized half-up on construction, so arithmetic results are rounded
    the same way.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Money amount must be finite, got {self.amount}")
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )
        try:
            rounded = self.amount.quantize(_CENTS, rounding=ROUND_HALF_UP)
        except InvalidOperation as exc:
            raise ValidationError(f"Money amount is too large: {self.amount}") from exc
        # frozen dataclass: bypass __setattr__ to store the rounded amount
        object.__setattr__(self, "amount", rounded)

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + other.amount)

    def pay_down(self, payment: Money) -> Money:
        """Subtract *payment*, saturating at zero.

        Overpayment is absorbed; no credit balance is kept.
        """
        result = self.amount - payment.amount
        if result < Decimal("0"):
            return Money.zero()
        return Money(result)

    def __lt__(self, other: Money) -> bool:
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        return self.amount >= other.amount

    @property
    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    # --- Display --------------------------------------------------------------

    def to_plain_string(self) -> str:
        """Plain decimal text with exactly two fraction digits, e.g. ``"12.50"``."""
        return f"{self.amount:.2f}"

    def __str__(self) -> str:
        return self.to_plain_string()

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0"))

    @staticmethod
    def of(amount: str | int | Decimal | None) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        if amount is None:
            raise ValidationError("Amount is required")
        try:
            return Money(Decimal(str(amount).strip()))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that shipments and deliveries always move at
    least one unit.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)
