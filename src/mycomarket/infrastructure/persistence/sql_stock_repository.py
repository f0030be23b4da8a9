"""SQLAlchemy-backed implementation of StockRepository.

Reservations are single conditional UPDATE statements; the affected row
count tells whether the stock was there.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import update
from sqlalchemy.orm import Session

from mycomarket.domain.model.stock import ProductStock
from mycomarket.domain.repository.stock_repository import StockRepository
from mycomarket.infrastructure.persistence.orm import StockRow, from_milli, to_milli


class SqlStockRepository(StockRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, product_id: str) -> ProductStock | None:
        row = self._session.get(StockRow, product_id, populate_existing=True)
        if row is None:
            return None
        return ProductStock(product_id=row.product_id, quantity=from_milli(row.quantity_milli))

    def save(self, stock: ProductStock) -> None:
        row = self._session.get(StockRow, stock.product_id)
        if row is None:
            row = StockRow(product_id=stock.product_id)
            self._session.add(row)
        row.quantity_milli = to_milli(stock.quantity)
        self._session.flush()

    def try_decrement(self, product_id: str, quantity: Decimal) -> bool:
        milli = to_milli(quantity)
        result = self._session.execute(
            update(StockRow)
            .where(StockRow.product_id == product_id, StockRow.quantity_milli >= milli)
            .values(quantity_milli=StockRow.quantity_milli - milli)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def increment(self, product_id: str, quantity: Decimal) -> bool:
        milli = to_milli(quantity)
        result = self._session.execute(
            update(StockRow)
            .where(StockRow.product_id == product_id)
            .values(quantity_milli=StockRow.quantity_milli + milli)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
