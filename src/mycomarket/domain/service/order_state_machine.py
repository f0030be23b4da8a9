"""Domain service: Order State Machine.

Moving an order to a new status drags its bookings, its item stock and
the producers' wallets along.  Everything happens inside the caller's
unit of work, so a failing sub-step leaves the order where it was.

Must be built inside an open unit of work.
"""

from __future__ import annotations

import logging
from datetime import datetime

from mycomarket.domain.exceptions import EntityNotFoundError, ValidationError
from mycomarket.domain.model.booking import BookingStatus
from mycomarket.domain.model.order import FULFILLMENT_STATUSES, Order, OrderStatus
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.booking_lifecycle import BookingLifecycle
from mycomarket.domain.service.stock_ledger import StockLedger
from mycomarket.domain.service.wallet_ledger import WalletLedger

logger = logging.getLogger(__name__)


class OrderStateMachine:

    def __init__(self, uow: UnitOfWork, ledger: WalletLedger) -> None:
        self._uow = uow
        self._ledger = ledger
        self._bookings = BookingLifecycle(uow, ledger)
        self._stock = StockLedger(uow.stock)

    def transition(
        self,
        order_id: int,
        new_status: OrderStatus,
        now: datetime,
    ) -> tuple[Order, OrderStatus]:
        """Apply ``new_status`` and return the order with its previous status."""
        order = self._uow.orders.get(order_id, for_update=True)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        previous = order.transition_to(new_status)

        if new_status == OrderStatus.CANCELLED:
            self._cancel(order, previous)
        else:
            if previous == OrderStatus.DRAFT:
                self._checkout(order, now)
            if new_status in FULFILLMENT_STATUSES:
                self._confirm_bookings(order)
            if new_status == OrderStatus.INVOICE_PAID:
                self._ledger.post_sale(order)
            if self._ledger.policy.is_finalized(new_status):
                self._ledger.post_sale(order)
                self._ledger.settle_pending(order)

        self._uow.orders.save(order)
        logger.info(
            "Order #%s moved %s -> %s", order.id, previous.value, new_status.value
        )
        return order, previous

    # --- Steps ----------------------------------------------------------------

    def _checkout(self, order: Order, now: datetime) -> None:
        """Leave DRAFT: holds become permanent and sales start pending."""
        for booking in self._uow.bookings.list_by_order(order.id):  # type: ignore[arg-type]
            if booking.status != BookingStatus.TEMPORARY:
                continue
            if booking.is_expired(now):
                self._bookings.expire(booking.id, now, refresh_order=False)  # type: ignore[arg-type]
            else:
                self._bookings.promote(booking.id)  # type: ignore[arg-type]

        bookings = self._uow.bookings.list_by_order(order.id)  # type: ignore[arg-type]
        if not order.items and not any(b.is_live for b in bookings):
            raise ValidationError(f"Order #{order.id} is empty, nothing to check out")
        order.recompute_total(bookings)
        self._ledger.post_sale(order)

    def _confirm_bookings(self, order: Order) -> None:
        for booking in self._uow.bookings.list_by_order(order.id):  # type: ignore[arg-type]
            if booking.status == BookingStatus.PENDING:
                self._bookings.confirm(booking.id)  # type: ignore[arg-type]

    def _cancel(self, order: Order, previous: OrderStatus) -> None:
        for booking in self._uow.bookings.list_by_order(order.id):  # type: ignore[arg-type]
            if booking.is_cancellable:
                self._bookings.cancel(booking.id, refresh_order=False)  # type: ignore[arg-type]

        # Items of a fulfilled order have left the warehouse.
        if previous not in FULFILLMENT_STATUSES:
            for item in order.items:
                self._stock.release(item.product_id, item.quantity)

        self._ledger.cancel_pending(order)
