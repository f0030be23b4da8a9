"""Application service: Transition Order use case.

Moves an order through its lifecycle (checkout, fulfillment, invoice,
cancellation).  Booking, stock and wallet side effects commit together
with the status change; notifications go out only after the commit.
"""

from __future__ import annotations

from datetime import datetime, timezone

from mycomarket.application.dto import OrderDTO
from mycomarket.application.notifications import Notifier, NullNotifier, notify_safely
from mycomarket.application.retry import retry_on_conflict
from mycomarket.domain.model.order import OrderStatus
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.order_state_machine import OrderStateMachine
from mycomarket.domain.service.wallet_ledger import LedgerPolicy, WalletLedger


class TransitionOrderHandler:

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
        order_id: int,
        new_status: OrderStatus | str,
        now: datetime | None = None,
    ) -> OrderDTO:
        new_status = OrderStatus(new_status)
        now = now or datetime.now(timezone.utc)

        with self._uow:
            machine = OrderStateMachine(self._uow, WalletLedger(self._uow, self._policy))
            order, previous = machine.transition(order_id, new_status, now)
            dto = OrderDTO.from_domain(order, self._uow.bookings.list_by_order(order_id))

        if previous == OrderStatus.DRAFT and new_status != OrderStatus.CANCELLED:
            notify_safely(
                lambda: self._notifier.order_placed(order), f"order #{order_id} placed"
            )
        notify_safely(
            lambda: self._notifier.order_status_changed(order, previous),
            f"order #{order_id} status {new_status.value}",
        )
        return dto
