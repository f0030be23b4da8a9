"""Application service: Change Booking Quantity use case."""

from __future__ import annotations

from decimal import Decimal

from mycomarket.application.dto import BookingDTO
from mycomarket.application.retry import retry_on_conflict
from mycomarket.domain.model.value_objects import Quantity
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.booking_lifecycle import BookingLifecycle
from mycomarket.domain.service.wallet_ledger import LedgerPolicy, WalletLedger


class ChangeBookingQuantityHandler:

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
    def handle(self, booking_id: int, quantity: str | Decimal) -> BookingDTO:
        new_quantity = Quantity.of(quantity)
        with self._uow:
            lifecycle = BookingLifecycle(self._uow, WalletLedger(self._uow, self._policy))
            booking = lifecycle.change_quantity(booking_id, new_quantity)
            return BookingDTO.from_domain(booking)
