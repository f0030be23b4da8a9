"""Resolving the DRAFT order (cart) a client is adding to."""

from __future__ import annotations

from mycomarket.domain.exceptions import (
    EntityNotFoundError,
    InvalidStateTransition,
    ValidationError,
)
from mycomarket.domain.model.order import Order
from mycomarket.domain.repository.order_repository import OrderRepository


def resolve_cart(orders: OrderRepository, order_id: int | None, user_id: str) -> Order:
    """Return the user's cart, opening a new DRAFT order when none is given."""
    if order_id is None:
        order = Order.create(user_id)
        orders.save(order)
        return order

    order = orders.get(order_id, for_update=True)
    if order is None:
        raise EntityNotFoundError(f"Order #{order_id} not found")
    if order.user_id != user_id:
        raise ValidationError(f"Order #{order_id} does not belong to user '{user_id}'")
    if not order.is_cart:
        raise InvalidStateTransition(
            f"Order #{order_id} is {order.status.value}, only DRAFT orders can be edited"
        )
    return order
