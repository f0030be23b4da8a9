"""Notifier that writes each event to the application log.

Stands in for the email and in-app channels, which live in other
services.
"""

from __future__ import annotations

import logging

from mycomarket.application.notifications import Notifier
from mycomarket.domain.model.order import Order, OrderStatus
from mycomarket.domain.model.withdrawal import Withdrawal

logger = logging.getLogger("mycomarket.notifications")


class LoggingNotifier(Notifier):

    def order_placed(self, order: Order) -> None:
        logger.info("Order #%s placed by %s, total %s", order.id, order.user_id, order.total)

    def order_status_changed(self, order: Order, previous: OrderStatus) -> None:
        logger.info(
            "Order #%s of %s: %s -> %s",
            order.id, order.user_id, previous.value, order.status.value,
        )

    def withdrawal_requested(self, producer_id: str, withdrawal: Withdrawal) -> None:
        logger.info(
            "Producer %s requested withdrawal #%s of %s",
            producer_id, withdrawal.id, withdrawal.amount,
        )

    def withdrawal_resolved(self, withdrawal: Withdrawal) -> None:
        logger.info(
            "Withdrawal #%s %s%s",
            withdrawal.id,
            withdrawal.status.value,
            f" ({withdrawal.processor_note})" if withdrawal.processor_note else "",
        )
