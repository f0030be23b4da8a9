"""Domain service: Withdrawal Workflow.

A producer asks for a payout, the amount is parked in pending balance,
and an administrator later approves or rejects it.  Resolution is a
compare-and-swap on the withdrawal's status, so two administrators
clicking at once cannot both move the money.

Must be built inside an open unit of work.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime

from mycomarket.domain.exceptions import (
    AlreadyProcessed,
    EntityNotFoundError,
    ValidationError,
)
from mycomarket.domain.model.value_objects import Money
from mycomarket.domain.model.wallet import (
    TransactionStatus,
    TransactionType,
    WalletTransaction,
)
from mycomarket.domain.model.withdrawal import Withdrawal, WithdrawalStatus
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.wallet_ledger import WalletLedger

logger = logging.getLogger(__name__)


class WithdrawalWorkflow:

    def __init__(self, uow: UnitOfWork, ledger: WalletLedger) -> None:
        self._uow = uow
        self._ledger = ledger

    def request(
        self,
        producer_id: str,
        amount: Money,
        bank_details: dict,
        now: datetime,
    ) -> Withdrawal:
        if not bank_details:
            raise ValidationError("Bank details are required for a withdrawal")

        wallet = self._ledger.ensure_wallet(producer_id, for_update=True)
        wallet.hold_withdrawal(amount)

        withdrawal = Withdrawal(
            id=None,
            wallet_id=wallet.id,  # type: ignore[arg-type]
            amount=amount,
            bank_details=json.dumps(bank_details).encode("utf-8"),
            requested_at=now,
        )
        self._uow.withdrawals.save(withdrawal)

        self._uow.transactions.save(WalletTransaction(
            id=None,
            wallet_id=wallet.id,  # type: ignore[arg-type]
            type=TransactionType.WITHDRAWAL,
            amount=-amount.amount,
            status=TransactionStatus.PENDING,
            withdrawal_id=withdrawal.id,
            description=f"Withdrawal request #{withdrawal.id}",
            metadata=json.dumps({
                "withdrawalId": withdrawal.id,
                "requestedAt": now.isoformat(),
            }).encode("utf-8"),
            created_at=now,
        ))
        self._uow.wallets.save(wallet)

        logger.info(
            "Producer %s requested withdrawal #%s of %s", producer_id, withdrawal.id, amount
        )
        return withdrawal

    def resolve(
        self,
        withdrawal_id: int,
        outcome: WithdrawalStatus,
        note: str | None,
        now: datetime,
    ) -> Withdrawal:
        withdrawal = self._uow.withdrawals.get(withdrawal_id)
        if withdrawal is None:
            raise EntityNotFoundError(f"Withdrawal #{withdrawal_id} not found")

        withdrawal.resolve(outcome, note, now)
        if not self._uow.withdrawals.compare_and_set_status(
            withdrawal, expected=WithdrawalStatus.PENDING
        ):
            raise AlreadyProcessed(f"Withdrawal #{withdrawal_id} was already processed")

        wallet = self._uow.wallets.get(withdrawal.wallet_id, for_update=True)
        if wallet is None:
            raise EntityNotFoundError(f"Wallet #{withdrawal.wallet_id} not found")
        if outcome == WithdrawalStatus.COMPLETED:
            wallet.complete_withdrawal(withdrawal.amount)
        else:
            wallet.reject_withdrawal(withdrawal.amount)
        self._uow.wallets.save(wallet)

        tx = self._uow.transactions.find_by_withdrawal(withdrawal_id)
        if tx is None:
            logger.warning("No ledger line found for withdrawal #%s", withdrawal_id)
        else:
            if outcome == WithdrawalStatus.COMPLETED:
                tx.complete()
            else:
                tx.cancel()
            self._uow.transactions.save(tx)

        logger.info(
            "Withdrawal #%s of %s resolved %s", withdrawal_id, withdrawal.amount, outcome.value
        )
        return withdrawal
