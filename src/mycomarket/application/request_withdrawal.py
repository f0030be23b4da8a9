"""Application service: Request Withdrawal use case."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from mycomarket.application.dto import WithdrawalDTO
from mycomarket.application.notifications import Notifier, NullNotifier, notify_safely
from mycomarket.application.retry import retry_on_conflict
from mycomarket.domain.model.value_objects import Money
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.wallet_ledger import LedgerPolicy, WalletLedger
from mycomarket.domain.service.withdrawal_workflow import WithdrawalWorkflow


class RequestWithdrawalHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        policy: LedgerPolicy,
        notifier: Notifier | None = None,
        retry_attempts: int = 3,
    ) -> None:
        self._uow = uow
        self._policy = policy
        self._notifier = notifier or NullNotifier()
        self.retry_attempts = retry_attempts

    @retry_on_conflict
    def handle(
        self,
        producer_id: str,
        amount: str | Decimal,
        bank_details: dict,
        now: datetime | None = None,
    ) -> WithdrawalDTO:
        """Park ``amount`` of the producer's balance until an admin decides."""
        money = Money.of(amount)
        now = now or datetime.now(timezone.utc)

        with self._uow:
            workflow = WithdrawalWorkflow(self._uow, WalletLedger(self._uow, self._policy))
            withdrawal = workflow.request(producer_id, money, bank_details, now)

        notify_safely(
            lambda: self._notifier.withdrawal_requested(producer_id, withdrawal),
            f"withdrawal #{withdrawal.id} requested",
        )
        return WithdrawalDTO.from_domain(withdrawal)
