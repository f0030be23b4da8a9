"""Abstract repositories for the wallet ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod

from mycomarket.domain.model.wallet import (
    TransactionStatus,
    TransactionType,
    Wallet,
    WalletTransaction,
)
from mycomarket.domain.model.withdrawal import Withdrawal, WithdrawalStatus


class WalletRepository(ABC):

    @abstractmethod
    def get(self, wallet_id: int, for_update: bool = False) -> Wallet | None:
        """Return a wallet by ID, optionally locking its row."""

    @abstractmethod
    def get_by_producer(self, producer_id: str, for_update: bool = False) -> Wallet | None:
        """Return the producer's wallet, or None if it was never created."""

    @abstractmethod
    def list_all(self) -> list[Wallet]:
        """Return every wallet."""

    @abstractmethod
    def save(self, wallet: Wallet) -> None:
        """Persist a new or updated wallet (assigns ``id`` on first save)."""


class WalletTransactionRepository(ABC):

    @abstractmethod
    def find_sale(self, wallet_id: int, order_id: int) -> WalletTransaction | None:
        """Return the SALE line of an order in a wallet, if any."""

    @abstractmethod
    def find_by_withdrawal(self, withdrawal_id: int) -> WalletTransaction | None:
        """Return the WITHDRAWAL line linked to a withdrawal request."""

    @abstractmethod
    def list_by_order(
        self,
        order_id: int,
        type: TransactionType,
        status: TransactionStatus | None = None,
    ) -> list[WalletTransaction]:
        """Return an order's transactions of one type, optionally by status."""

    @abstractmethod
    def list_recent(self, wallet_id: int, limit: int) -> list[WalletTransaction]:
        """Return a wallet's newest transactions first."""

    @abstractmethod
    def save(self, transaction: WalletTransaction) -> None:
        """Persist a new or updated transaction (assigns ``id`` on first save)."""


class WithdrawalRepository(ABC):

    @abstractmethod
    def get(self, withdrawal_id: int) -> Withdrawal | None:
        """Return a withdrawal by ID, or None."""

    @abstractmethod
    def list_recent(self, wallet_id: int, limit: int) -> list[Withdrawal]:
        """Return a wallet's newest withdrawals first."""

    @abstractmethod
    def list_pending(self) -> list[Withdrawal]:
        """Return every withdrawal waiting for an administrator."""

    @abstractmethod
    def save(self, withdrawal: Withdrawal) -> None:
        """Persist a new or updated withdrawal (assigns ``id`` on first save)."""

    @abstractmethod
    def compare_and_set_status(self, withdrawal: Withdrawal, expected: WithdrawalStatus) -> bool:
        """Write the resolution only if the stored status is still ``expected``."""
