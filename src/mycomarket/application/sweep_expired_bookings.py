"""Application service: Expiry Sweep use case.

Finds TEMPORARY bookings whose two-hour hold ran out and cancels them,
one unit of work per booking.  Safe to run while clients cancel or check
out the same bookings: a booking that changed in between is skipped, and
one that fails is logged without stopping the pass.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from mycomarket.application.retry import retry_on_conflict
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.booking_lifecycle import BookingLifecycle

logger = logging.getLogger(__name__)


class SweepExpiredBookingsHandler:

    def __init__(self, uow: UnitOfWork, batch_size: int = 100, retry_attempts: int = 3) -> None:
        self._uow = uow
        self._batch_size = batch_size
        self.retry_attempts = retry_attempts

    def handle(self, now: datetime | None = None) -> list[int]:
        """Run one sweep pass and return the IDs of the bookings released."""
        now = now or datetime.now(timezone.utc)

        with self._uow:
            candidates = [
                b.id for b in self._uow.bookings.list_expired(now, self._batch_size)
            ]

        released: list[int] = []
        for booking_id in candidates:
            try:
                if self._expire_one(booking_id, now):
                    released.append(booking_id)  # type: ignore[arg-type]
            except Exception:
                logger.exception("Could not expire booking #%s", booking_id)

        if candidates:
            logger.info(
                "Expiry sweep: %d candidates, %d released", len(candidates), len(released)
            )
        return released

    @retry_on_conflict
    def _expire_one(self, booking_id: int, now: datetime) -> bool:
        with self._uow:
            return BookingLifecycle(self._uow).expire(booking_id, now)
