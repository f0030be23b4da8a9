"""Unit of Work: one transaction spanning every repository.

Usage::

    with uow:
        uow.slots.try_increment_reserved(...)
        uow.stock.try_decrement(...)

Leaving the block normally commits; leaving it with an exception rolls
back everything written inside it, then lets the exception propagate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from mycomarket.domain.repository.booking_repository import BookingRepository
from mycomarket.domain.repository.catalog import ProductCatalog
from mycomarket.domain.repository.delivery_slot_repository import DeliverySlotRepository
from mycomarket.domain.repository.order_repository import OrderRepository
from mycomarket.domain.repository.stock_repository import StockRepository
from mycomarket.domain.repository.wallet_repository import (
    WalletRepository,
    WalletTransactionRepository,
    WithdrawalRepository,
)


class UnitOfWork(ABC):

    catalog: ProductCatalog
    stock: StockRepository
    slots: DeliverySlotRepository
    bookings: BookingRepository
    orders: OrderRepository
    wallets: WalletRepository
    transactions: WalletTransactionRepository
    withdrawals: WithdrawalRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every change of the current block durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every change of the current block."""
