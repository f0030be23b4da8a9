"""Outbound notifications (email, in-app).

Sending happens after the ledger change is committed and is
fire-and-forget: a failing notifier is logged, never re-raised, so it
cannot undo money that already moved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from mycomarket.domain.model.order import Order, OrderStatus
from mycomarket.domain.model.withdrawal import Withdrawal

logger = logging.getLogger(__name__)


class Notifier(ABC):

    @abstractmethod
    def order_placed(self, order: Order) -> None:
        """A cart was checked out."""

    @abstractmethod
    def order_status_changed(self, order: Order, previous: OrderStatus) -> None:
        """An order moved to a new status."""

    @abstractmethod
    def withdrawal_requested(self, producer_id: str, withdrawal: Withdrawal) -> None:
        """A producer asked to be paid out."""

    @abstractmethod
    def withdrawal_resolved(self, withdrawal: Withdrawal) -> None:
        """An administrator approved or rejected a withdrawal."""


class NullNotifier(Notifier):

    def order_placed(self, order: Order) -> None:
        pass

    def order_status_changed(self, order: Order, previous: OrderStatus) -> None:
        pass

    def withdrawal_requested(self, producer_id: str, withdrawal: Withdrawal) -> None:
        pass

    def withdrawal_resolved(self, withdrawal: Withdrawal) -> None:
        pass


def notify_safely(send: Callable[[], None], what: str) -> None:
    try:
        send()
    except Exception:
        logger.exception("Notification failed: %s", what)
