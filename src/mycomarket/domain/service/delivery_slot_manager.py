"""Domain service: Delivery Slot Manager.

Owns slot capacity.  ``try_reserve`` is meant to run in the same unit of
work as the matching stock reservation so both succeed or neither does.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from mycomarket.domain.exceptions import (
    EntityNotFoundError,
    OverbookingError,
    ValidationError,
)
from mycomarket.domain.model.delivery_slot import DeliverySlot
from mycomarket.domain.model.value_objects import Quantity
from mycomarket.domain.repository.delivery_slot_repository import DeliverySlotRepository
from mycomarket.domain.service.stock_ledger import StockLedger


class DeliverySlotManager:

    def __init__(self, slot_repo: DeliverySlotRepository, stock_ledger: StockLedger) -> None:
        self._slot_repo = slot_repo
        self._stock_ledger = stock_ledger

    def get(self, slot_id: int, for_update: bool = False) -> DeliverySlot:
        slot = self._slot_repo.get(slot_id, for_update=for_update)
        if slot is None:
            raise EntityNotFoundError(f"Delivery slot #{slot_id} not found")
        return slot

    def create_slot(
        self,
        product_id: str,
        slot_date: date,
        max_capacity: Decimal,
        today: date,
    ) -> DeliverySlot:
        slot = DeliverySlot.create(
            product_id=product_id,
            slot_date=slot_date,
            max_capacity=max_capacity,
            available_stock=self._stock_ledger.available(product_id),
            today=today,
        )
        self._slot_repo.save(slot)
        return slot

    def update_capacity(self, slot_id: int, new_max_capacity: Decimal) -> DeliverySlot:
        slot = self.get(slot_id, for_update=True)
        slot.update_capacity(
            new_max_capacity, self._stock_ledger.available(slot.product_id)
        )
        self._slot_repo.save(slot)
        return slot

    def set_availability(self, slot_id: int, is_available: bool) -> DeliverySlot:
        slot = self.get(slot_id, for_update=True)
        slot.is_available = is_available
        self._slot_repo.save(slot)
        return slot

    def delete_slot(self, slot_id: int) -> None:
        slot = self.get(slot_id, for_update=True)
        if slot.reserved > 0:
            raise ValidationError(
                f"Cannot delete delivery slot #{slot_id} with {slot.reserved} reserved"
            )
        self._slot_repo.delete(slot_id)

    def try_reserve(self, slot_id: int, quantity: Quantity) -> None:
        if self._slot_repo.try_increment_reserved(slot_id, quantity.value):
            return
        # Re-read only to explain the refusal.
        slot = self.get(slot_id)
        if not slot.is_available:
            raise OverbookingError(f"Delivery slot #{slot_id} is closed for booking")
        raise OverbookingError(
            f"Delivery slot #{slot_id} cannot take {quantity} "
            f"(only {slot.remaining_capacity} left)"
        )

    def release_reservation(self, slot_id: int, quantity: Quantity) -> None:
        if not self._slot_repo.decrement_reserved(slot_id, quantity.value):
            raise EntityNotFoundError(f"Delivery slot #{slot_id} not found")
