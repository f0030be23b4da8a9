"""SQLAlchemy-backed implementation of BookingRepository."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from mycomarket.domain.model.booking import Booking, BookingStatus
from mycomarket.domain.model.value_objects import Money, Quantity
from mycomarket.domain.repository.booking_repository import BookingRepository
from mycomarket.infrastructure.persistence.orm import (
    BookingRow,
    from_cents,
    from_milli,
    to_cents,
    to_milli,
    to_utc,
)


class SqlBookingRepository(BookingRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, booking_id: int) -> Booking | None:
        row = self._session.get(BookingRow, booking_id, populate_existing=True)
        return self._to_domain(row) if row is not None else None

    def list_by_order(self, order_id: int) -> list[Booking]:
        return self._select(
            select(BookingRow).where(BookingRow.order_id == order_id).order_by(BookingRow.id)
        )

    def list_live_by_slot(self, slot_id: int) -> list[Booking]:
        return self._select(
            select(BookingRow)
            .where(
                BookingRow.slot_id == slot_id,
                BookingRow.status != BookingStatus.CANCELLED.value,
            )
            .order_by(BookingRow.id)
        )

    def list_expired(self, now: datetime, limit: int) -> list[Booking]:
        return self._select(
            select(BookingRow)
            .where(
                BookingRow.status == BookingStatus.TEMPORARY.value,
                BookingRow.expires_at <= to_utc(now),
            )
            .order_by(BookingRow.expires_at, BookingRow.id)
            .limit(limit)
        )

    def save(self, booking: Booking) -> None:
        if booking.id is None:
            row = BookingRow()
            self._session.add(row)
        else:
            row = self._session.get(BookingRow, booking.id)
        row.slot_id = booking.slot_id
        row.order_id = booking.order_id
        row.product_id = booking.product_id
        row.producer_id = booking.producer_id
        row.quantity_milli = to_milli(booking.quantity.value)
        row.price_cents = to_cents(booking.price)
        row.status = booking.status.value
        row.expires_at = to_utc(booking.expires_at)
        row.created_at = to_utc(booking.created_at)
        self._session.flush()
        booking.id = row.id

    def compare_and_set_status(
        self,
        booking: Booking,
        expected: Iterable[BookingStatus],
        expired_before: datetime | None = None,
    ) -> bool:
        conditions = [
            BookingRow.id == booking.id,
            BookingRow.status.in_([status.value for status in expected]),
        ]
        if expired_before is not None:
            conditions.append(BookingRow.expires_at <= to_utc(expired_before))
        result = self._session.execute(
            update(BookingRow)
            .where(*conditions)
            .values(status=booking.status.value, expires_at=to_utc(booking.expires_at))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # --- Internal helpers -----------------------------------------------------

    def _select(self, stmt) -> list[Booking]:
        rows = self._session.scalars(stmt.execution_options(populate_existing=True))
        return [self._to_domain(row) for row in rows]

    @staticmethod
    def _to_domain(row: BookingRow) -> Booking:
        return Booking(
            id=row.id,
            slot_id=row.slot_id,
            order_id=row.order_id,
            product_id=row.product_id,
            producer_id=row.producer_id,
            quantity=Quantity(from_milli(row.quantity_milli)),
            price=Money(from_cents(row.price_cents)),
            status=BookingStatus(row.status),
            expires_at=to_utc(row.expires_at),
            created_at=to_utc(row.created_at),
        )
