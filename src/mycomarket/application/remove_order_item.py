"""Application service: Remove Order Item use case."""

from __future__ import annotations

from mycomarket.application.dto import OrderDTO
from mycomarket.application.retry import retry_on_conflict
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.cart import resolve_cart
from mycomarket.domain.service.stock_ledger import StockLedger


class RemoveOrderItemHandler:

    def __init__(self, uow: UnitOfWork, retry_attempts: int = 3) -> None:
        self._uow = uow
        self.retry_attempts = retry_attempts

    @retry_on_conflict
    def handle(self, user_id: str, order_id: int, product_id: str) -> OrderDTO:
        """Drop a line from the cart and give its stock back."""
        with self._uow:
            order = resolve_cart(self._uow.orders, order_id, user_id)
            item = order.remove_item(product_id)
            StockLedger(self._uow.stock).release(item.product_id, item.quantity)
            bookings = self._uow.bookings.list_by_order(order_id)
            order.recompute_total(bookings)
            self._uow.orders.save(order)
            return OrderDTO.from_domain(order, bookings)
