"""Application services: posting and settling an order's sales.

Both are idempotent and normally driven by order transitions; they are
exposed for administrators repairing a ledger by hand.
"""

from __future__ import annotations

from mycomarket.application.retry import retry_on_conflict
from mycomarket.domain.exceptions import EntityNotFoundError
from mycomarket.domain.model.order import Order
from mycomarket.domain.model.value_objects import Money
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.wallet_ledger import LedgerPolicy, WalletLedger


def _locked_order(uow: UnitOfWork, order_id: int) -> Order:
    order = uow.orders.get(order_id, for_update=True)
    if order is None:
        raise EntityNotFoundError(f"Order #{order_id} not found")
    return order


class PostSaleHandler:

    def __init__(self, uow: UnitOfWork, policy: LedgerPolicy, retry_attempts: int = 3) -> None:
        self._uow = uow
        self._policy = policy
        self.retry_attempts = retry_attempts

    @retry_on_conflict
    def handle(self, order_id: int) -> Money:
        """Credit the order's producers and return the platform fee."""
        with self._uow:
            order = _locked_order(self._uow, order_id)
            fee = WalletLedger(self._uow, self._policy).post_sale(order)
            self._uow.orders.save(order)
            return fee


class SettlePendingHandler:

    def __init__(self, uow: UnitOfWork, policy: LedgerPolicy, retry_attempts: int = 3) -> None:
        self._uow = uow
        self._policy = policy
        self.retry_attempts = retry_attempts

    @retry_on_conflict
    def handle(self, order_id: int) -> int:
        """Move the order's pending sales into balance; returns how many."""
        with self._uow:
            order = _locked_order(self._uow, order_id)
            return WalletLedger(self._uow, self._policy).settle_pending(order)
