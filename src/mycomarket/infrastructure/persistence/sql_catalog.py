"""SQLAlchemy-backed implementation of ProductCatalog."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from mycomarket.domain.model.product import CatalogProduct
from mycomarket.domain.model.value_objects import Money
from mycomarket.domain.repository.catalog import ProductCatalog
from mycomarket.infrastructure.persistence.orm import ProductRow, from_cents, to_cents


class SqlProductCatalog(ProductCatalog):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, product_id: str) -> CatalogProduct | None:
        row = self._session.get(ProductRow, product_id, populate_existing=True)
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[CatalogProduct]:
        rows = self._session.scalars(select(ProductRow).order_by(ProductRow.id))
        return [self._to_domain(row) for row in rows]

    def save(self, product: CatalogProduct) -> None:
        row = self._session.get(ProductRow, product.id)
        if row is None:
            row = ProductRow(id=product.id)
            self._session.add(row)
        row.producer_id = product.producer_id
        row.name = product.name
        row.price_cents = to_cents(product.price)
        row.unit = product.unit
        self._session.flush()

    @staticmethod
    def _to_domain(row: ProductRow) -> CatalogProduct:
        return CatalogProduct(
            id=row.id,
            producer_id=row.producer_id,
            name=row.name,
            price=Money(from_cents(row.price_cents)),
            unit=row.unit,
        )
