"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from mycomarket.domain.exceptions import ValidationError

CENTS = Decimal("0.01")
QUANTITY_STEP = Decimal("0.001")


def _to_decimal(value: str | int | Decimal) -> Decimal:
    if isinstance(value, float):
        raise ValidationError("Floats are not accepted, pass a string or Decimal")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid decimal value: {value!r}") from exc


@dataclass(frozen=True)
class Money:
    """Non-negative monetary amount, always held in minor units (2 places).

    Uses Decimal to avoid floating-point drift across repeated
    commission splits.
    """

    amount: Decimal
    currency: str = "CHF"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )
        object.__setattr__(
            self, "amount", self.amount.quantize(CENTS, rounding=ROUND_HALF_UP)
        )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        result = self.amount - other.amount
        if result < Decimal("0"):
            raise ValidationError("Money subtraction would result in a negative amount")
        return Money(result, self.currency)

    def __mul__(self, factor: Decimal | int) -> Money:
        if isinstance(factor, Quantity):
            factor = factor.value
        if not isinstance(factor, (int, Decimal)):
            raise TypeError(
                f"Can only multiply Money by int or Decimal, got {type(factor).__name__}"
            )
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount >= other.amount

    def percentage(self, percent: Decimal) -> Money:
        """Return ``percent``% of this amount, rounded half-up to cents."""
        return Money(self.amount * percent / Decimal("100"), self.currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | int | Decimal) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        return Money(_to_decimal(amount))

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0"))


@dataclass(frozen=True)
class Quantity:
    """A strictly positive decimal quantity (kilograms, boxes, ...).

    Enforces the invariant that you cannot book zero or negative amounts.
    """

    value: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            raise ValidationError(
                f"Quantity must be a Decimal, got {type(self.value).__name__}"
            )
        object.__setattr__(
            self, "value", self.value.quantize(QUANTITY_STEP, rounding=ROUND_HALF_UP)
        )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return f"{self.value.normalize():f}"

    @staticmethod
    def of(value: str | int | Decimal) -> Quantity:
        return Quantity(_to_decimal(value))
