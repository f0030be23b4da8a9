"""DeliverySlot aggregate: bounded capacity for one product on one day."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from mycomarket.domain.exceptions import (
    CapacityBelowReserved,
    InvalidCapacity,
    OverbookingError,
)


@dataclass
class DeliverySlot:
    """Aggregate root for a reservable delivery day.

    Invariants:
    - ``0 <= reserved <= max_capacity``
    - ``max_capacity`` is never lowered below ``reserved``

    Use ``DeliverySlot.create()`` for new slots; ``__init__`` stays
    plain so repositories can reconstitute stored slots.
    """

    id: int | None
    product_id: str
    date: date
    max_capacity: Decimal
    reserved: Decimal = Decimal("0")
    is_available: bool = True

    # --- Factory (used for NEW slots only) ------------------------------------

    @staticmethod
    def create(
        product_id: str,
        slot_date: date,
        max_capacity: Decimal,
        available_stock: Decimal,
        today: date,
    ) -> DeliverySlot:
        if slot_date < today:
            raise InvalidCapacity(
                f"Cannot open a delivery slot in the past ({slot_date.isoformat()})"
            )
        if max_capacity <= 0:
            raise InvalidCapacity("Slot capacity must be positive")
        if max_capacity > available_stock:
            raise InvalidCapacity(
                f"Slot capacity {max_capacity} exceeds available stock "
                f"{available_stock} for product '{product_id}'"
            )
        return DeliverySlot(
            id=None,
            product_id=product_id,
            date=slot_date,
            max_capacity=max_capacity,
        )

    # --- Capacity management --------------------------------------------------

    @property
    def remaining_capacity(self) -> Decimal:
        return self.max_capacity - self.reserved

    def update_capacity(self, new_max_capacity: Decimal, available_stock: Decimal) -> None:
        """Change the slot size.

        The extra head-room over what is already reserved must still be
        backed by stock that has not been taken yet.
        """
        if new_max_capacity < self.reserved:
            raise CapacityBelowReserved(
                f"Capacity {new_max_capacity} is below the {self.reserved} already reserved"
            )
        if new_max_capacity - self.reserved > available_stock:
            raise InvalidCapacity(
                f"Slot capacity {new_max_capacity} exceeds available stock "
                f"{available_stock} plus reserved {self.reserved}"
            )
        self.max_capacity = new_max_capacity

    def reserve(self, quantity: Decimal) -> None:
        if not self.is_available:
            raise OverbookingError(f"Delivery slot #{self.id} is closed for booking")
        if self.reserved + quantity > self.max_capacity:
            raise OverbookingError(
                f"Delivery slot #{self.id} cannot take {quantity} "
                f"(only {self.remaining_capacity} left)"
            )
        self.reserved += quantity

    def release(self, quantity: Decimal) -> None:
        """Give capacity back, never going below zero."""
        self.reserved = max(Decimal("0"), self.reserved - quantity)
