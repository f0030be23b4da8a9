"""ProductStock aggregate: available quantity per product.

Reservations are taken straight out of ``quantity``; a release puts the
same amount back.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from mycomarket.domain.exceptions import InsufficientStock, ValidationError


@dataclass
class ProductStock:
    """Aggregate root for stock tracking.

    Invariant: ``quantity`` is never negative.
    """

    product_id: str
    quantity: Decimal = Decimal("0")

    def can_reserve(self, quantity: Decimal) -> bool:
        return self.quantity >= quantity

    def reserve(self, quantity: Decimal) -> None:
        """Take ``quantity`` out of the available stock.

        Raises InsufficientStock if not enough is left.
        """
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        if not self.can_reserve(quantity):
            raise InsufficientStock(
                f"Insufficient stock for product '{self.product_id}' "
                f"(need {quantity}, have {self.quantity} available)"
            )
        self.quantity -= quantity

    def release(self, quantity: Decimal) -> None:
        """Return previously reserved stock (cancellation, expiry)."""
        if quantity <= 0:
            raise ValidationError("Release quantity must be positive")
        self.quantity += quantity

    def restock(self, quantity: Decimal) -> None:
        if quantity <= 0:
            raise ValidationError("Restock quantity must be positive")
        self.quantity += quantity
