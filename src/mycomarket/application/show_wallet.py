"""Application service: Show Wallet use case (query).

A producer without sales yet still gets an (empty) wallet, created on
first look.
"""

from __future__ import annotations

from mycomarket.application.dto import TransactionDTO, WalletDTO, WithdrawalDTO
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.wallet_ledger import LedgerPolicy, WalletLedger

RECENT_TRANSACTIONS = 50
RECENT_WITHDRAWALS = 20


class ShowWalletHandler:

    def __init__(self, uow: UnitOfWork, policy: LedgerPolicy) -> None:
        self._uow = uow
        self._policy = policy

    def handle(self, producer_id: str) -> WalletDTO:
        with self._uow:
            wallet = WalletLedger(self._uow, self._policy).ensure_wallet(producer_id)
            transactions = self._uow.transactions.list_recent(wallet.id, RECENT_TRANSACTIONS)  # type: ignore[arg-type]
            withdrawals = self._uow.withdrawals.list_recent(wallet.id, RECENT_WITHDRAWALS)  # type: ignore[arg-type]
            return WalletDTO(
                producer_id=wallet.producer_id,
                balance=str(wallet.balance),
                pending_balance=str(wallet.pending_balance),
                total_earned=str(wallet.total_earned),
                total_withdrawn=str(wallet.total_withdrawn),
                transactions=[TransactionDTO.from_domain(t) for t in transactions],
                withdrawals=[WithdrawalDTO.from_domain(w) for w in withdrawals],
            )
