"""Application service: Delete Delivery Slot use case."""

from __future__ import annotations

from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.delivery_slot_manager import DeliverySlotManager
from mycomarket.domain.service.stock_ledger import StockLedger


class DeleteSlotHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, slot_id: int) -> None:
        """Remove a slot nobody holds capacity on."""
        with self._uow:
            DeliverySlotManager(self._uow.slots, StockLedger(self._uow.stock)).delete_slot(slot_id)
