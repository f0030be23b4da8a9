"""Domain service: Stock Ledger.

Every stock movement caused by a reservation goes through here.  The
check and the decrement happen in a single conditional write, so two
concurrent bookings can never both take the last units.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from mycomarket.domain.exceptions import EntityNotFoundError, InsufficientStock
from mycomarket.domain.model.stock import ProductStock
from mycomarket.domain.model.value_objects import Quantity
from mycomarket.domain.repository.stock_repository import StockRepository

logger = logging.getLogger(__name__)


class StockLedger:

    def __init__(self, stock_repo: StockRepository) -> None:
        self._stock_repo = stock_repo

    def available(self, product_id: str) -> Decimal:
        stock = self._stock_repo.get(product_id)
        return stock.quantity if stock is not None else Decimal("0")

    def reserve(self, product_id: str, quantity: Quantity) -> None:
        """Take ``quantity`` out of the product's stock or fail untouched."""
        if not self._stock_repo.try_decrement(product_id, quantity.value):
            raise InsufficientStock(
                f"Insufficient stock for product '{product_id}' "
                f"(need {quantity}, have {self.available(product_id)} available)"
            )
        logger.debug("Reserved %s of product %s", quantity, product_id)

    def release(self, product_id: str, quantity: Quantity) -> None:
        """Put ``quantity`` back.  Callers release each hold at most once."""
        if not self._stock_repo.increment(product_id, quantity.value):
            raise EntityNotFoundError(f"No stock record for product '{product_id}'")
        logger.debug("Released %s of product %s", quantity, product_id)

    def restock(self, product_id: str, quantity: Quantity) -> ProductStock:
        stock = self._stock_repo.get(product_id)
        if stock is None:
            stock = ProductStock(product_id=product_id)
            stock.restock(quantity.value)
            self._stock_repo.save(stock)
        else:
            self._stock_repo.increment(product_id, quantity.value)
            stock = self._stock_repo.get(product_id)
        logger.info("Restocked product %s by %s (now %s)", product_id, quantity, stock.quantity)
        return stock
