"""Application service: Cancel Booking use case."""

from __future__ import annotations

from mycomarket.application.dto import BookingDTO
from mycomarket.application.retry import retry_on_conflict
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.booking_lifecycle import BookingLifecycle
from mycomarket.domain.service.wallet_ledger import LedgerPolicy, WalletLedger


class CancelBookingHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        policy: LedgerPolicy | None = None,
        retry_attempts: int = 3,
    ) -> None:
        self._uow = uow
        self._policy = policy or LedgerPolicy()
        self.retry_attempts = retry_attempts

    @retry_on_conflict
    def handle(self, booking_id: int) -> BookingDTO:
        """Cancel a hold and give its capacity and stock back.

        Once the order is checked out, the producer's pending sale and the
        order total follow in the same transaction.  Raises
        InvalidStateTransition if the booking is already CONFIRMED or
        CANCELLED (including by the expiry sweep).
        """
        with self._uow:
            lifecycle = BookingLifecycle(self._uow, WalletLedger(self._uow, self._policy))
            booking = lifecycle.cancel(booking_id)
            return BookingDTO.from_domain(booking)
