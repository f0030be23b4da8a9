"""Abstract repository for DeliverySlot aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from mycomarket.domain.model.delivery_slot import DeliverySlot


class DeliverySlotRepository(ABC):

    @abstractmethod
    def get(self, slot_id: int, for_update: bool = False) -> DeliverySlot | None:
        """Return a slot by ID, optionally locking its row."""

    @abstractmethod
    def list_for_product(self, product_id: str) -> list[DeliverySlot]:
        """Return every slot of a product, ordered by date."""

    @abstractmethod
    def save(self, slot: DeliverySlot) -> None:
        """Persist a new or updated slot (assigns ``id`` on first save)."""

    @abstractmethod
    def delete(self, slot_id: int) -> None:
        """Remove a slot."""

    @abstractmethod
    def try_increment_reserved(self, slot_id: int, quantity: Decimal) -> bool:
        """Atomically add to ``reserved`` if the slot is open and has room."""

    @abstractmethod
    def decrement_reserved(self, slot_id: int, quantity: Decimal) -> bool:
        """Atomically subtract from ``reserved``, floored at zero."""
