"""Application service: Update Delivery Slot use case.

Producers resize a slot or close it to new bookings.  Existing holds
are never touched.
"""

from __future__ import annotations

from decimal import Decimal

from mycomarket.application.dto import SlotDTO
from mycomarket.application.retry import retry_on_conflict
from mycomarket.domain.exceptions import ValidationError
from mycomarket.domain.model.value_objects import Quantity
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.delivery_slot_manager import DeliverySlotManager
from mycomarket.domain.service.stock_ledger import StockLedger


class UpdateSlotHandler:

    def __init__(self, uow: UnitOfWork, retry_attempts: int = 3) -> None:
        self._uow = uow
        self.retry_attempts = retry_attempts

    @retry_on_conflict
    def handle(
        self,
        slot_id: int,
        max_capacity: str | Decimal | None = None,
        is_available: bool | None = None,
    ) -> SlotDTO:
        if max_capacity is None and is_available is None:
            raise ValidationError("Nothing to update")

        with self._uow:
            manager = DeliverySlotManager(self._uow.slots, StockLedger(self._uow.stock))
            slot = manager.get(slot_id)
            if max_capacity is not None:
                slot = manager.update_capacity(slot_id, Quantity.of(max_capacity).value)
            if is_available is not None:
                slot = manager.set_availability(slot_id, is_available)
            return SlotDTO.from_domain(slot)
