"""SQLAlchemy-backed implementation of OrderRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from mycomarket.domain.model.order import Order, OrderItem, OrderStatus
from mycomarket.domain.model.value_objects import Money, Quantity
from mycomarket.domain.repository.order_repository import OrderRepository
from mycomarket.infrastructure.persistence.orm import (
    OrderItemRow,
    OrderRow,
    from_cents,
    from_milli,
    to_cents,
    to_milli,
    to_utc,
)


class SqlOrderRepository(OrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, order_id: int, for_update: bool = False) -> Order | None:
        row = self._session.get(
            OrderRow,
            order_id,
            options=[selectinload(OrderRow.items)],
            populate_existing=True,
            with_for_update=True if for_update else None,
        )
        return self._to_domain(row) if row is not None else None

    def list_history(self, user_id: str) -> list[Order]:
        rows = self._session.scalars(
            select(OrderRow)
            .options(selectinload(OrderRow.items))
            .where(
                OrderRow.user_id == user_id,
                OrderRow.status != OrderStatus.DRAFT.value,
            )
            .order_by(OrderRow.created_at.desc(), OrderRow.id.desc())
            .execution_options(populate_existing=True)
        )
        return [self._to_domain(row) for row in rows]

    def save(self, order: Order) -> None:
        if order.id is None:
            row = OrderRow()
            self._session.add(row)
        else:
            row = self._session.get(OrderRow, order.id, options=[selectinload(OrderRow.items)])
        row.user_id = order.user_id
        row.status = order.status.value
        row.total_cents = to_cents(order.total)
        row.platform_fee_cents = (
            to_cents(order.platform_fee) if order.platform_fee is not None else None
        )
        row.metadata_ = order.metadata
        row.created_at = to_utc(order.created_at)

        # Items are owned by the order: replace the whole collection.
        row.items.clear()
        for position, item in enumerate(order.items):
            row.items.append(
                OrderItemRow(
                    position=position,
                    product_id=item.product_id,
                    producer_id=item.producer_id,
                    product_name=item.product_name,
                    quantity_milli=to_milli(item.quantity.value),
                    unit_price_cents=to_cents(item.unit_price),
                )
            )
        self._session.flush()
        order.id = row.id

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        return Order(
            id=row.id,
            user_id=row.user_id,
            items=[
                OrderItem(
                    product_id=item.product_id,
                    producer_id=item.producer_id,
                    product_name=item.product_name,
                    quantity=Quantity(from_milli(item.quantity_milli)),
                    unit_price=Money(from_cents(item.unit_price_cents)),
                )
                for item in row.items
            ],
            status=OrderStatus(row.status),
            total=Money(from_cents(row.total_cents)),
            platform_fee=(
                Money(from_cents(row.platform_fee_cents))
                if row.platform_fee_cents is not None else None
            ),
            metadata=row.metadata_,
            created_at=to_utc(row.created_at),
        )
