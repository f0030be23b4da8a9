"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from mycomarket.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def get(self, order_id: int, for_update: bool = False) -> Order | None:
        """Return an order by its ID, optionally locking its row."""

    @abstractmethod
    def list_history(self, user_id: str) -> list[Order]:
        """Return the user's orders, carts (DRAFT) excluded, newest first."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order with its items."""
