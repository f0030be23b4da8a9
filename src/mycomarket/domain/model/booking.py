"""Booking: a client's hold on delivery-slot capacity.

Lifecycle::

    TEMPORARY --promote--> PENDING --confirm--> CONFIRMED
        |                     |
        +------cancel---------+-----------> CANCELLED

A TEMPORARY booking carries ``expires_at``; once that passes the expiry
sweep cancels it.  CONFIRMED and CANCELLED are terminal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum

from mycomarket.domain.exceptions import InvalidStateTransition
from mycomarket.domain.model.value_objects import Money, Quantity

HOLD_DURATION = timedelta(hours=2)


class BookingStatus(Enum):
    TEMPORARY = "TEMPORARY"
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


CANCELLABLE_STATUSES = (BookingStatus.TEMPORARY, BookingStatus.PENDING)


@dataclass
class Booking:
    id: int | None
    slot_id: int
    order_id: int
    product_id: str
    producer_id: str
    quantity: Quantity
    price: Money  # unit price locked at booking time
    status: BookingStatus = BookingStatus.TEMPORARY
    expires_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def hold(
        slot_id: int,
        order_id: int,
        product_id: str,
        producer_id: str,
        quantity: Quantity,
        price: Money,
        now: datetime,
    ) -> Booking:
        """Create a fresh TEMPORARY booking expiring ``HOLD_DURATION`` from now."""
        return Booking(
            id=None,
            slot_id=slot_id,
            order_id=order_id,
            product_id=product_id,
            producer_id=producer_id,
            quantity=quantity,
            price=price,
            status=BookingStatus.TEMPORARY,
            expires_at=now + HOLD_DURATION,
            created_at=now,
        )

    # --- Computed -------------------------------------------------------------

    @property
    def line_total(self) -> Money:
        return self.price * self.quantity.value

    @property
    def is_live(self) -> bool:
        return self.status != BookingStatus.CANCELLED

    @property
    def is_cancellable(self) -> bool:
        return self.status in CANCELLABLE_STATUSES

    def is_expired(self, now: datetime) -> bool:
        return (
            self.status == BookingStatus.TEMPORARY
            and self.expires_at is not None
            and self.expires_at <= now
        )

    # --- State transitions ----------------------------------------------------

    def cancel(self) -> None:
        if not self.is_cancellable:
            raise InvalidStateTransition(
                f"Cannot cancel booking #{self.id} in {self.status.value} status"
            )
        self.status = BookingStatus.CANCELLED
        self.expires_at = None

    def promote(self) -> None:
        """TEMPORARY -> PENDING: the hold becomes permanent."""
        self._expect(BookingStatus.TEMPORARY, "promote")
        self.status = BookingStatus.PENDING
        self.expires_at = None

    def confirm(self) -> None:
        self._expect(BookingStatus.PENDING, "confirm")
        self.status = BookingStatus.CONFIRMED

    def change_quantity(self, new_quantity: Quantity) -> Decimal:
        """Set a new quantity and return the signed difference."""
        if not self.is_cancellable:
            raise InvalidStateTransition(
                f"Cannot change booking #{self.id} in {self.status.value} status"
            )
        delta = new_quantity.value - self.quantity.value
        self.quantity = new_quantity
        return delta

    def _expect(self, expected: BookingStatus, action: str) -> None:
        if self.status != expected:
            raise InvalidStateTransition(
                f"Cannot {action} booking #{self.id}: current status is "
                f"{self.status.value}, expected {expected.value}"
            )
