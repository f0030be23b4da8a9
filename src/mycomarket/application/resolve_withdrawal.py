"""Application service: Resolve Withdrawal use case (administrators)."""

from __future__ import annotations

from datetime import datetime, timezone

from mycomarket.application.dto import WithdrawalDTO
from mycomarket.application.notifications import Notifier, NullNotifier, notify_safely
from mycomarket.application.retry import retry_on_conflict
from mycomarket.domain.model.withdrawal import WithdrawalStatus
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.wallet_ledger import LedgerPolicy, WalletLedger
from mycomarket.domain.service.withdrawal_workflow import WithdrawalWorkflow


class ResolveWithdrawalHandler:

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
        withdrawal_id: int,
        outcome: WithdrawalStatus | str,
        note: str | None = None,
        now: datetime | None = None,
    ) -> WithdrawalDTO:
        outcome = WithdrawalStatus(outcome)
        now = now or datetime.now(timezone.utc)

        with self._uow:
            workflow = WithdrawalWorkflow(self._uow, WalletLedger(self._uow, self._policy))
            withdrawal = workflow.resolve(withdrawal_id, outcome, note, now)

        notify_safely(
            lambda: self._notifier.withdrawal_resolved(withdrawal),
            f"withdrawal #{withdrawal_id} {outcome.value}",
        )
        return WithdrawalDTO.from_domain(withdrawal)


class ListPendingWithdrawalsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[WithdrawalDTO]:
        with self._uow:
            return [WithdrawalDTO.from_domain(w) for w in self._uow.withdrawals.list_pending()]
