"""Abstract repository for ProductStock aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from mycomarket.domain.model.stock import ProductStock


class StockRepository(ABC):

    @abstractmethod
    def get(self, product_id: str) -> ProductStock | None:
        """Return the stock row for a product, or None."""

    @abstractmethod
    def save(self, stock: ProductStock) -> None:
        """Persist a new or updated stock row."""

    @abstractmethod
    def try_decrement(self, product_id: str, quantity: Decimal) -> bool:
        """Atomically take ``quantity`` if at least that much is available.

        Returns False, changing nothing, when the row is missing or short.
        """

    @abstractmethod
    def increment(self, product_id: str, quantity: Decimal) -> bool:
        """Atomically add ``quantity``; False if the row does not exist."""
