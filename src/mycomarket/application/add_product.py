"""Application service: Add Product use case.

Seeds the local catalog read model with a producer's product.
"""

from __future__ import annotations

from mycomarket.domain.exceptions import ValidationError
from mycomarket.domain.model.product import CatalogProduct
from mycomarket.domain.model.value_objects import Money
from mycomarket.domain.repository.unit_of_work import UnitOfWork


class AddProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        producer_id: str,
        name: str,
        price: str,
        unit: str = "kg",
        product_id: str | None = None,
    ) -> CatalogProduct:
        """Add a new product to the catalog."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")

        with self._uow:
            all_products = self._uow.catalog.list_all()
            if any(p.name == name.strip() and p.producer_id == producer_id for p in all_products):
                raise ValidationError(f"Producer {producer_id} already sells '{name}'")

            if product_id is None:
                # Auto-assign the next numeric ID
                numeric = [int(p.id) for p in all_products if p.id.isdigit()]
                product_id = str(max(numeric) + 1) if numeric else "1"
            elif self._uow.catalog.get(product_id) is not None:
                raise ValidationError(f"Product '{product_id}' already exists")

            product = CatalogProduct(
                id=product_id,
                producer_id=producer_id,
                name=name.strip(),
                price=Money.of(price),
                unit=unit,
            )
            self._uow.catalog.save(product)
            return product
