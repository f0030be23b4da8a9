"""SQLAlchemy-backed implementation of DeliverySlotRepository."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import case, delete, select, update
from sqlalchemy.orm import Session

from mycomarket.domain.model.delivery_slot import DeliverySlot
from mycomarket.domain.repository.delivery_slot_repository import DeliverySlotRepository
from mycomarket.infrastructure.persistence.orm import SlotRow, from_milli, to_milli


class SqlDeliverySlotRepository(DeliverySlotRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, slot_id: int, for_update: bool = False) -> DeliverySlot | None:
        row = self._session.get(
            SlotRow,
            slot_id,
            populate_existing=True,
            with_for_update=True if for_update else None,
        )
        return self._to_domain(row) if row is not None else None

    def list_for_product(self, product_id: str) -> list[DeliverySlot]:
        rows = self._session.scalars(
            select(SlotRow)
            .where(SlotRow.product_id == product_id)
            .order_by(SlotRow.slot_date, SlotRow.id)
            .execution_options(populate_existing=True)
        )
        return [self._to_domain(row) for row in rows]

    def save(self, slot: DeliverySlot) -> None:
        if slot.id is None:
            row = SlotRow()
            self._session.add(row)
        else:
            row = self._session.get(SlotRow, slot.id)
        row.product_id = slot.product_id
        row.slot_date = slot.date
        row.max_capacity_milli = to_milli(slot.max_capacity)
        row.reserved_milli = to_milli(slot.reserved)
        row.is_available = slot.is_available
        self._session.flush()
        slot.id = row.id

    def delete(self, slot_id: int) -> None:
        self._session.execute(
            delete(SlotRow)
            .where(SlotRow.id == slot_id)
            .execution_options(synchronize_session=False)
        )

    def try_increment_reserved(self, slot_id: int, quantity: Decimal) -> bool:
        milli = to_milli(quantity)
        result = self._session.execute(
            update(SlotRow)
            .where(
                SlotRow.id == slot_id,
                SlotRow.is_available.is_(True),
                SlotRow.reserved_milli + milli <= SlotRow.max_capacity_milli,
            )
            .values(reserved_milli=SlotRow.reserved_milli + milli)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def decrement_reserved(self, slot_id: int, quantity: Decimal) -> bool:
        milli = to_milli(quantity)
        result = self._session.execute(
            update(SlotRow)
            .where(SlotRow.id == slot_id)
            .values(
                reserved_milli=case(
                    (SlotRow.reserved_milli > milli, SlotRow.reserved_milli - milli),
                    else_=0,
                )
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def _to_domain(row: SlotRow) -> DeliverySlot:
        return DeliverySlot(
            id=row.id,
            product_id=row.product_id,
            date=row.slot_date,
            max_capacity=from_milli(row.max_capacity_milli),
            reserved=from_milli(row.reserved_milli),
            is_available=row.is_available,
        )
