"""Application service: Show Order use case (query)."""

from __future__ import annotations

from mycomarket.application.dto import OrderDTO
from mycomarket.domain.exceptions import EntityNotFoundError
from mycomarket.domain.repository.unit_of_work import UnitOfWork


class ShowOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int) -> OrderDTO:
        with self._uow:
            order = self._uow.orders.get(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            return OrderDTO.from_domain(order, self._uow.bookings.list_by_order(order_id))


class OrderHistoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, user_id: str) -> list[OrderDTO]:
        """Checked-out orders of a user, newest first.  Carts are left out."""
        with self._uow:
            return [
                OrderDTO.from_domain(order, self._uow.bookings.list_by_order(order.id))  # type: ignore[arg-type]
                for order in self._uow.orders.list_history(user_id)
            ]
