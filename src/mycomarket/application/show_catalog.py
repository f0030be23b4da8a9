"""Application service: Show Catalog use case (query)."""

from __future__ import annotations

from dataclasses import dataclass

from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.stock_ledger import StockLedger


@dataclass(frozen=True)
class CatalogLineDTO:
    product_id: str
    name: str
    producer_id: str
    price: str
    unit: str
    available: str


class ShowCatalogHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[CatalogLineDTO]:
        with self._uow:
            ledger = StockLedger(self._uow.stock)
            return [
                CatalogLineDTO(
                    product_id=product.id,
                    name=product.name,
                    producer_id=product.producer_id,
                    price=str(product.price),
                    unit=product.unit,
                    available=f"{ledger.available(product.id).normalize():f}",
                )
                for product in self._uow.catalog.list_all()
            ]
