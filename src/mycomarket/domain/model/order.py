"""Order aggregate.

The Order owns its line items; bookings point at the order by id and
are passed in whenever the total is recomputed.  A DRAFT order is the
client's cart and never shows up in order history.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from mycomarket.domain.exceptions import InvalidStateTransition, ValidationError
from mycomarket.domain.model.booking import Booking
from mycomarket.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    INVOICE_PENDING = "INVOICE_PENDING"
    INVOICE_PAID = "INVOICE_PAID"
    INVOICE_OVERDUE = "INVOICE_OVERDUE"


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.DRAFT: frozenset({
        OrderStatus.PENDING,
        OrderStatus.CONFIRMED,
        OrderStatus.INVOICE_PENDING,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.PENDING: frozenset({
        OrderStatus.CONFIRMED,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.CONFIRMED: frozenset({
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.INVOICE_PENDING: frozenset({
        OrderStatus.INVOICE_PAID,
        OrderStatus.INVOICE_OVERDUE,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.INVOICE_OVERDUE: frozenset({
        OrderStatus.INVOICE_PAID,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.INVOICE_PAID: frozenset({
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# Statuses in which held bookings count as fulfilled.
FULFILLMENT_STATUSES = frozenset({
    OrderStatus.CONFIRMED,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
    OrderStatus.INVOICE_PAID,
})


@dataclass
class OrderItem:
    """A catalog line bought outside of any delivery slot.

    ``unit_price`` is a snapshot taken when the item entered the cart.
    """

    product_id: str
    producer_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass
class Order:
    """Aggregate root for client orders.

    Use ``Order.create()`` for new carts.  ``platform_fee`` stays None
    until the sale is first posted to the producers' wallets.
    """

    id: int | None
    user_id: str
    items: list[OrderItem] = field(default_factory=list)
    status: OrderStatus = OrderStatus.DRAFT
    total: Money = field(default_factory=Money.zero)
    platform_fee: Money | None = None
    metadata: bytes = b""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(user_id: str) -> Order:
        if not user_id or not user_id.strip():
            raise ValidationError("User ID is required")
        return Order(id=None, user_id=user_id.strip())

    # --- Cart editing ---------------------------------------------------------

    def add_item(self, item: OrderItem) -> None:
        """Add a line, merging with an existing line for the same product."""
        self._assert_draft("add items to")
        for i, existing in enumerate(self.items):
            if existing.product_id == item.product_id:
                self.items[i] = OrderItem(
                    product_id=existing.product_id,
                    producer_id=existing.producer_id,
                    product_name=existing.product_name,
                    quantity=Quantity(existing.quantity.value + item.quantity.value),
                    unit_price=existing.unit_price,
                )
                return
        self.items.append(item)

    def remove_item(self, product_id: str) -> OrderItem:
        self._assert_draft("remove items from")
        for i, existing in enumerate(self.items):
            if existing.product_id == product_id:
                return self.items.pop(i)
        raise ValidationError(f"Product '{product_id}' is not in order #{self.id}")

    def recompute_total(self, bookings: Iterable[Booking]) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.line_total
        for booking in bookings:
            if booking.is_live:
                result = result + booking.line_total
        self.total = result
        return result

    # --- State transitions ----------------------------------------------------

    def can_transition_to(self, new_status: OrderStatus) -> bool:
        return new_status in ALLOWED_TRANSITIONS[self.status]

    def transition_to(self, new_status: OrderStatus) -> OrderStatus:
        """Move to ``new_status`` and return the previous status."""
        if not self.can_transition_to(new_status):
            raise InvalidStateTransition(
                f"Invalid order transition #{self.id}: "
                f"{self.status.value} -> {new_status.value}"
            )
        previous = self.status
        self.status = new_status
        return previous

    def set_platform_fee(self, fee: Money) -> None:
        """Record the marketplace commission of the order's current lines."""
        self.platform_fee = fee

    # --- Computed properties --------------------------------------------------

    @property
    def is_cart(self) -> bool:
        return self.status == OrderStatus.DRAFT

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.status]

    # --- Internal helpers -----------------------------------------------------

    def _assert_draft(self, action: str) -> None:
        if self.status != OrderStatus.DRAFT:
            raise InvalidStateTransition(
                f"Cannot {action} order #{self.id} in {self.status.value} status"
            )
