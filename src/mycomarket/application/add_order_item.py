"""Application service: Add Order Item use case.

Puts a catalog product in the client's cart.  Stock is reserved right
away, at the current price (snapshot).
"""

from __future__ import annotations

from decimal import Decimal

from mycomarket.application.dto import OrderDTO
from mycomarket.application.retry import retry_on_conflict
from mycomarket.domain.exceptions import EntityNotFoundError
from mycomarket.domain.model.order import OrderItem
from mycomarket.domain.model.value_objects import Quantity
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.cart import resolve_cart
from mycomarket.domain.service.stock_ledger import StockLedger


class AddOrderItemHandler:

    def __init__(self, uow: UnitOfWork, retry_attempts: int = 3) -> None:
        self._uow = uow
        self.retry_attempts = retry_attempts

    @retry_on_conflict
    def handle(
        self,
        user_id: str,
        product_id: str,
        quantity: str | Decimal,
        order_id: int | None = None,
    ) -> OrderDTO:
        qty = Quantity.of(quantity)

        with self._uow:
            product = self._uow.catalog.get(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product '{product_id}' not found in catalog")

            order = resolve_cart(self._uow.orders, order_id, user_id)
            StockLedger(self._uow.stock).reserve(product_id, qty)
            order.add_item(
                OrderItem(
                    product_id=product.id,
                    producer_id=product.producer_id,
                    product_name=product.name,
                    quantity=qty,
                    unit_price=product.price,  # <-- price snapshot
                )
            )
            bookings = self._uow.bookings.list_by_order(order.id)  # type: ignore[arg-type]
            order.recompute_total(bookings)
            self._uow.orders.save(order)
            return OrderDTO.from_domain(order, bookings)
