"""Abstract repository for Booking entities."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime

from mycomarket.domain.model.booking import Booking, BookingStatus


class BookingRepository(ABC):

    @abstractmethod
    def get(self, booking_id: int) -> Booking | None:
        """Return a booking by ID, or None."""

    @abstractmethod
    def list_by_order(self, order_id: int) -> list[Booking]:
        """Return every booking attached to an order."""

    @abstractmethod
    def list_live_by_slot(self, slot_id: int) -> list[Booking]:
        """Return the non-cancelled bookings of a slot."""

    @abstractmethod
    def list_expired(self, now: datetime, limit: int) -> list[Booking]:
        """Return up to ``limit`` TEMPORARY bookings whose hold has run out."""

    @abstractmethod
    def save(self, booking: Booking) -> None:
        """Persist a new or updated booking (assigns ``id`` on first save)."""

    @abstractmethod
    def compare_and_set_status(
        self,
        booking: Booking,
        expected: Iterable[BookingStatus],
        expired_before: datetime | None = None,
    ) -> bool:
        """Write ``booking``'s status and expiry only if the stored status
        is still one of ``expected`` (and, when given, the stored expiry is
        not after ``expired_before``).

        Returns False when another writer changed the row first.
        """
