"""Application service: List Delivery Slots use case (query)."""

from __future__ import annotations

from mycomarket.application.dto import SlotDTO
from mycomarket.domain.repository.unit_of_work import UnitOfWork


class ListSlotsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: str) -> list[SlotDTO]:
        with self._uow:
            return [
                SlotDTO.from_domain(slot)
                for slot in self._uow.slots.list_for_product(product_id)
            ]
