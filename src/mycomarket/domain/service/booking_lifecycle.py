"""Domain service: Booking Lifecycle.

Every status change is written with a compare-and-swap on the stored
status, so a client cancel racing the expiry sweep releases the hold
exactly once: the loser sees no matching row and backs off.  Cancelling
or resizing a booking of a checked-out order re-posts the order's sales.

Must be built inside an open unit of work.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from mycomarket.domain.exceptions import EntityNotFoundError, InvalidStateTransition
from mycomarket.domain.model.booking import (
    CANCELLABLE_STATUSES,
    Booking,
    BookingStatus,
)
from mycomarket.domain.model.value_objects import Quantity
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.cart import resolve_cart
from mycomarket.domain.service.delivery_slot_manager import DeliverySlotManager
from mycomarket.domain.service.stock_ledger import StockLedger
from mycomarket.domain.service.wallet_ledger import WalletLedger

logger = logging.getLogger(__name__)


class BookingLifecycle:

    def __init__(self, uow: UnitOfWork, ledger: WalletLedger | None = None) -> None:
        self._uow = uow
        self._ledger = ledger
        self._stock = StockLedger(uow.stock)
        self._slots = DeliverySlotManager(uow.slots, self._stock)

    def get(self, booking_id: int) -> Booking:
        booking = self._uow.bookings.get(booking_id)
        if booking is None:
            raise EntityNotFoundError(f"Booking #{booking_id} not found")
        return booking

    # --- Holding --------------------------------------------------------------

    def book(
        self,
        slot_id: int,
        order_id: int | None,
        user_id: str,
        quantity: Quantity,
        now: datetime,
    ) -> Booking:
        """Hold ``quantity`` on a slot for the user's cart.

        Slot capacity is taken first, then stock; if the stock step
        fails the enclosing unit of work rolls the slot step back.
        """
        slot = self._slots.get(slot_id)
        product = self._uow.catalog.get(slot.product_id)
        if product is None:
            raise EntityNotFoundError(f"Product '{slot.product_id}' not found in catalog")

        order = resolve_cart(self._uow.orders, order_id, user_id)

        self._slots.try_reserve(slot_id, quantity)
        self._stock.reserve(slot.product_id, quantity)

        booking = Booking.hold(
            slot_id=slot_id,
            order_id=order.id,  # type: ignore[arg-type]
            product_id=product.id,
            producer_id=product.producer_id,
            quantity=quantity,
            price=product.price,  # <-- price snapshot
            now=now,
        )
        self._uow.bookings.save(booking)
        self._refresh_order(order.id)  # type: ignore[arg-type]

        logger.info(
            "Booking #%s holds %s on slot #%s for order #%s until %s",
            booking.id, quantity, slot_id, order.id, booking.expires_at.isoformat(),
        )
        return booking

    def change_quantity(self, booking_id: int, new_quantity: Quantity) -> Booking:
        booking = self.get(booking_id)
        old_quantity = booking.quantity
        delta = booking.change_quantity(new_quantity)
        if delta == 0:
            return booking

        # Lock in the current status before moving capacity around.
        self._swap(booking, expected=(booking.status,), action="change")
        if delta > 0:
            grow = Quantity(delta)
            self._slots.try_reserve(booking.slot_id, grow)
            self._stock.reserve(booking.product_id, grow)
        else:
            shrink = Quantity(-delta)
            self._slots.release_reservation(booking.slot_id, shrink)
            self._stock.release(booking.product_id, shrink)
        self._uow.bookings.save(booking)
        self._refresh_order(booking.order_id)

        logger.info(
            "Booking #%s quantity changed %s -> %s", booking.id, old_quantity, new_quantity
        )
        return booking

    # --- Transitions ----------------------------------------------------------

    def cancel(self, booking_id: int, refresh_order: bool = True) -> Booking:
        """Cancel a TEMPORARY or PENDING booking and release its hold."""
        booking = self.get(booking_id)
        booking.cancel()
        self._swap(booking, expected=CANCELLABLE_STATUSES, action="cancel")
        self._release(booking)
        if refresh_order:
            self._refresh_order(booking.order_id)
        logger.info("Booking #%s cancelled, %s released", booking.id, booking.quantity)
        return booking

    def expire(self, booking_id: int, now: datetime, refresh_order: bool = True) -> bool:
        """Cancel a hold whose time ran out.

        Returns False, doing nothing, when the booking is gone, was
        promoted or cancelled meanwhile, or has not expired yet.
        """
        booking = self._uow.bookings.get(booking_id)
        if booking is None or not booking.is_expired(now):
            return False
        booking.cancel()
        if not self._uow.bookings.compare_and_set_status(
            booking, expected=(BookingStatus.TEMPORARY,), expired_before=now
        ):
            logger.debug("Booking #%s changed before it could expire", booking_id)
            return False
        self._release(booking)
        if refresh_order:
            self._refresh_order(booking.order_id)
        logger.info("Booking #%s expired, %s released", booking.id, booking.quantity)
        return True

    def promote(self, booking_id: int) -> Booking:
        booking = self.get(booking_id)
        booking.promote()
        self._swap(booking, expected=(BookingStatus.TEMPORARY,), action="promote")
        return booking

    def confirm(self, booking_id: int) -> Booking:
        booking = self.get(booking_id)
        booking.confirm()
        self._swap(booking, expected=(BookingStatus.PENDING,), action="confirm")
        return booking

    # --- Internal helpers -----------------------------------------------------

    def _swap(
        self,
        booking: Booking,
        expected: Iterable[BookingStatus],
        action: str,
    ) -> None:
        if not self._uow.bookings.compare_and_set_status(booking, expected=expected):
            raise InvalidStateTransition(
                f"Cannot {action} booking #{booking.id}: it was changed concurrently"
            )

    def _release(self, booking: Booking) -> None:
        self._slots.release_reservation(booking.slot_id, booking.quantity)
        self._stock.release(booking.product_id, booking.quantity)

    def _refresh_order(self, order_id: int) -> None:
        """Recompute the order total; once checked out, re-post its sales too.

        Checked-out orders are only re-posted when a ledger was given.
        """
        order = self._uow.orders.get(order_id, for_update=True)
        if order is None or order.is_terminal:
            return
        order.recompute_total(self._uow.bookings.list_by_order(order_id))
        if not order.is_cart and self._ledger is not None:
            self._ledger.post_sale(order)
        self._uow.orders.save(order)
