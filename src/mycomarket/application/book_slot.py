"""Application service: Book Delivery Slot use case.

Runs slot capacity and stock reservation in one unit of work: a client
either gets both or neither.  Lost write races are retried.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from mycomarket.application.dto import BookingDTO
from mycomarket.application.retry import retry_on_conflict
from mycomarket.domain.model.value_objects import Quantity
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.booking_lifecycle import BookingLifecycle


class BookSlotHandler:

    def __init__(self, uow: UnitOfWork, retry_attempts: int = 3) -> None:
        self._uow = uow
        self.retry_attempts = retry_attempts

    @retry_on_conflict
    def handle(
        self,
        slot_id: int,
        user_id: str,
        quantity: str | Decimal,
        order_id: int | None = None,
        now: datetime | None = None,
    ) -> BookingDTO:
        """Hold capacity for the user's cart (a new cart if ``order_id`` is None)."""
        qty = Quantity.of(quantity)
        now = now or datetime.now(timezone.utc)

        with self._uow:
            booking = BookingLifecycle(self._uow).book(slot_id, order_id, user_id, qty, now)
            return BookingDTO.from_domain(booking)
