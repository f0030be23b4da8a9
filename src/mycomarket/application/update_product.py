"""Application service: Update Product Price use case."""

from __future__ import annotations

from mycomarket.domain.exceptions import EntityNotFoundError
from mycomarket.domain.model.product import CatalogProduct
from mycomarket.domain.model.value_objects import Money
from mycomarket.domain.repository.unit_of_work import UnitOfWork


class UpdateProductPriceHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: str, new_price: str) -> CatalogProduct:
        """Change a product's price.

        Bookings and cart lines keep the price they were made at.
        """
        with self._uow:
            product = self._uow.catalog.get(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product '{product_id}' not found in catalog")
            product.price = Money.of(new_price)
            self._uow.catalog.save(product)
            return product
