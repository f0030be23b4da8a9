"""Abstract access to the product catalog.

The catalog is maintained elsewhere; the reservation engine reads
products through this interface.  ``save`` exists so deployments and
tests can seed the local read model.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from mycomarket.domain.model.product import CatalogProduct


class ProductCatalog(ABC):

    @abstractmethod
    def get(self, product_id: str) -> CatalogProduct | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[CatalogProduct]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: CatalogProduct) -> None:
        """Persist a new or updated product."""
