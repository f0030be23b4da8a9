"""Application service: Create Delivery Slot use case."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

from mycomarket.application.dto import SlotDTO
from mycomarket.domain.exceptions import EntityNotFoundError
from mycomarket.domain.model.value_objects import Quantity
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.delivery_slot_manager import DeliverySlotManager
from mycomarket.domain.service.stock_ledger import StockLedger


class CreateSlotHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        product_id: str,
        slot_date: date,
        max_capacity: str | Decimal,
        today: date | None = None,
    ) -> SlotDTO:
        """Open a delivery day for a product.

        The capacity may not exceed the product's current stock and the
        day may not be in the past.
        """
        today = today or datetime.now(timezone.utc).date()
        capacity = Quantity.of(max_capacity).value

        with self._uow:
            if self._uow.catalog.get(product_id) is None:
                raise EntityNotFoundError(f"Product '{product_id}' not found in catalog")
            manager = DeliverySlotManager(self._uow.slots, StockLedger(self._uow.stock))
            slot = manager.create_slot(product_id, slot_date, capacity, today)
            return SlotDTO.from_domain(slot)
