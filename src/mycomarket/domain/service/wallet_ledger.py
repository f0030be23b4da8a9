"""Domain service: Wallet Ledger.

Turns an order's sales into producer earnings.  Posting is an upsert
keyed by ``(wallet, order)``: re-posting the same order never creates a
second SALE line, it moves the existing one to the current net amount.
Only pending lines may go down; a settled sale is final.

Must be built inside an open unit of work.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal

from mycomarket.domain.exceptions import ValidationError
from mycomarket.domain.model.order import Order, OrderStatus
from mycomarket.domain.model.value_objects import Money
from mycomarket.domain.model.wallet import (
    TransactionStatus,
    TransactionType,
    Wallet,
    WalletTransaction,
)
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.service.commission import (
    CommissionSplit,
    ProducerSale,
    group_by_producer,
    split_commission,
)

logger = logging.getLogger(__name__)

DEFAULT_COMMISSION_PERCENTAGE = Decimal("10")

# Statuses an order can be in once it has passed each possible finalized status.
FINALIZED_OR_LATER: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.CONFIRMED: frozenset({
        OrderStatus.CONFIRMED,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
    }),
    OrderStatus.DELIVERED: frozenset({OrderStatus.DELIVERED}),
}


@dataclass(frozen=True)
class LedgerPolicy:
    """Marketplace-wide accounting parameters.

    ``finalized_status`` is the order status at which sales become
    withdrawable.  Routes that skip it (PENDING straight to DELIVERED)
    settle at the first status beyond it.
    """

    commission_percentage: Decimal = DEFAULT_COMMISSION_PERCENTAGE
    finalized_status: OrderStatus = OrderStatus.DELIVERED

    def is_finalized(self, status: OrderStatus) -> bool:
        return status in FINALIZED_OR_LATER.get(
            self.finalized_status, frozenset({self.finalized_status})
        )


class WalletLedger:

    def __init__(self, uow: UnitOfWork, policy: LedgerPolicy) -> None:
        self._uow = uow
        self._policy = policy

    @property
    def policy(self) -> LedgerPolicy:
        return self._policy

    def ensure_wallet(self, producer_id: str, for_update: bool = False) -> Wallet:
        """Return the producer's wallet, creating an empty one on first use."""
        wallet = self._uow.wallets.get_by_producer(producer_id, for_update=for_update)
        if wallet is None:
            wallet = Wallet(id=None, producer_id=producer_id)
            self._uow.wallets.save(wallet)
            logger.info("Created wallet #%s for producer %s", wallet.id, producer_id)
        return wallet

    # --- Sales ----------------------------------------------------------------

    def post_sale(self, order: Order) -> Money:
        """Bring every producer's SALE line of ``order`` to its current net share.

        Producers left without live lines get their pending sale voided.
        Sets ``order.platform_fee`` to the fee of the current lines and
        returns it.  The caller saves the order.
        """
        bookings = self._uow.bookings.list_by_order(order.id)  # type: ignore[arg-type]
        sales = group_by_producer(order.items, bookings)
        available = self._policy.is_finalized(order.status)

        total_fee = Money.zero()
        for producer_id in sorted(sales):
            sale = sales[producer_id]
            split = split_commission(sale.gross, self._policy.commission_percentage)
            total_fee = total_fee + split.fee
            self._post_producer_sale(order, sale, split, available)
        self._void_dropped_sales(order, set(sales))

        order.set_platform_fee(total_fee)
        return total_fee

    def settle_pending(self, order: Order) -> int:
        """Make the order's pending sales withdrawable; returns how many moved."""
        moved = 0
        for tx in self._uow.transactions.list_by_order(
            order.id, TransactionType.SALE, TransactionStatus.PENDING  # type: ignore[arg-type]
        ):
            wallet = self._wallet(tx.wallet_id)
            tx.complete()
            wallet.settle(tx.magnitude)
            self._uow.transactions.save(tx)
            self._uow.wallets.save(wallet)
            moved += 1
            logger.info(
                "Settled %s for producer %s (order #%s)",
                tx.magnitude, wallet.producer_id, order.id,
            )
        return moved

    def cancel_pending(self, order: Order) -> int:
        """Void the order's still-pending sales; completed ones stay."""
        voided = 0
        for tx in self._uow.transactions.list_by_order(
            order.id, TransactionType.SALE, TransactionStatus.PENDING  # type: ignore[arg-type]
        ):
            wallet = self._wallet(tx.wallet_id)
            tx.cancel()
            wallet.void_pending(tx.magnitude)
            self._uow.transactions.save(tx)
            self._uow.wallets.save(wallet)
            voided += 1
            logger.info(
                "Voided pending sale of %s for producer %s (order #%s)",
                tx.magnitude, wallet.producer_id, order.id,
            )
        return voided

    # --- Internal helpers -----------------------------------------------------

    def _post_producer_sale(
        self,
        order: Order,
        sale: ProducerSale,
        split: CommissionSplit,
        available: bool,
    ) -> None:
        wallet = self.ensure_wallet(sale.producer_id, for_update=True)
        metadata = self._sale_metadata(sale, split)
        existing = self._uow.transactions.find_sale(wallet.id, order.id)  # type: ignore[arg-type]

        if existing is None:
            tx = WalletTransaction(
                id=None,
                wallet_id=wallet.id,  # type: ignore[arg-type]
                type=TransactionType.SALE,
                amount=split.net.amount,
                status=TransactionStatus.COMPLETED if available else TransactionStatus.PENDING,
                order_id=order.id,
                description=f"Sale - order #{order.id}",
                metadata=metadata,
            )
            wallet.credit_sale(split.net, available=available)
            logger.info(
                "Posted sale for order #%s: producer %s gross %s fee %s net %s (%s)",
                order.id, sale.producer_id, split.gross, split.fee, split.net, tx.status.value,
            )
        else:
            tx = existing
            if tx.status == TransactionStatus.CANCELLED:
                logger.warning(
                    "Sale of order #%s for producer %s was cancelled, not re-posting",
                    order.id, sale.producer_id,
                )
                return
            delta = split.net.amount - tx.amount
            if delta < 0:
                if tx.status != TransactionStatus.PENDING:
                    raise ValidationError(
                        f"Settled sale of order #{order.id} for producer {sale.producer_id} "
                        f"cannot shrink from {tx.amount} to {split.net.amount}"
                    )
                # total_earned keeps the old figure; it never decreases.
                wallet.void_pending(Money(-delta))
            elif delta > 0:
                wallet.credit_sale(
                    Money(delta), available=tx.status == TransactionStatus.COMPLETED
                )
            if delta:
                logger.info(
                    "Adjusted sale for order #%s: producer %s %+.2f",
                    order.id, sale.producer_id, delta,
                )
            tx.amount = split.net.amount
            tx.metadata = metadata

        self._uow.transactions.save(tx)
        self._uow.wallets.save(wallet)

    def _void_dropped_sales(self, order: Order, producer_ids: set[str]) -> None:
        for tx in self._uow.transactions.list_by_order(
            order.id, TransactionType.SALE  # type: ignore[arg-type]
        ):
            if tx.status == TransactionStatus.CANCELLED:
                continue
            wallet = self._wallet(tx.wallet_id)
            if wallet.producer_id in producer_ids:
                continue
            if tx.status != TransactionStatus.PENDING:
                raise ValidationError(
                    f"Settled sale of order #{order.id} for producer {wallet.producer_id} "
                    f"cannot be taken back"
                )
            tx.cancel()
            wallet.void_pending(tx.magnitude)
            self._uow.transactions.save(tx)
            self._uow.wallets.save(wallet)
            logger.info(
                "Voided pending sale of %s for producer %s (order #%s): no live lines left",
                tx.magnitude, wallet.producer_id, order.id,
            )

    def _wallet(self, wallet_id: int) -> Wallet:
        wallet = self._uow.wallets.get(wallet_id, for_update=True)
        if wallet is None:
            raise ValidationError(f"Wallet #{wallet_id} referenced by a transaction is missing")
        return wallet

    def _sale_metadata(self, sale: ProducerSale, split: CommissionSplit) -> bytes:
        return json.dumps({
            "items": sale.lines,
            "platformFeePercentage": str(self._policy.commission_percentage),
            "grossAmount": str(split.gross.amount),
            "fee": str(split.fee.amount),
            "netAmount": str(split.net.amount),
        }).encode("utf-8")
