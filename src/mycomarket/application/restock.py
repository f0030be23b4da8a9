"""Application service: Restock use case.

Stock arrives from the producer's harvest; this is the entry point the
catalog side uses to top up the engine's stock rows.
"""

from __future__ import annotations

from decimal import Decimal

from mycomarket.domain.exceptions import EntityNotFoundError
from mycomarket.domain.model.stock import ProductStock
from mycomarket.domain.model.value_objects import Quantity
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.stock_ledger import StockLedger


class RestockHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: str, quantity: str | Decimal) -> ProductStock:
        with self._uow:
            if self._uow.catalog.get(product_id) is None:
                raise EntityNotFoundError(f"Product '{product_id}' not found in catalog")
            return StockLedger(self._uow.stock).restock(product_id, Quantity.of(quantity))
