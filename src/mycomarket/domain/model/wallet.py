"""Wallet aggregate and its transactions.

Money moves between four buckets of a producer's wallet:

- ``pending_balance``: sales not yet delivered, and withdrawals in review
- ``balance``: what the producer may withdraw
- ``total_earned``: every net sale ever credited (never decreases)
- ``total_withdrawn``: every withdrawal paid out
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from mycomarket.domain.exceptions import (
    InsufficientBalance,
    InvalidStateTransition,
    ValidationError,
)
from mycomarket.domain.model.value_objects import Money


class TransactionType(Enum):
    SALE = "SALE"
    WITHDRAWAL = "WITHDRAWAL"


class TransactionStatus(Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


@dataclass
class Wallet:
    """Aggregate root for a producer's earnings.

    Invariants: ``balance`` and ``pending_balance`` never go negative
    (enforced by ``Money``); ``total_earned`` only grows.
    """

    id: int | None
    producer_id: str
    balance: Money = field(default_factory=Money.zero)
    pending_balance: Money = field(default_factory=Money.zero)
    total_earned: Money = field(default_factory=Money.zero)
    total_withdrawn: Money = field(default_factory=Money.zero)

    # --- Sales ----------------------------------------------------------------

    def credit_sale(self, amount: Money, available: bool) -> None:
        """Book a net sale, either straight to ``balance`` or to pending."""
        if available:
            self.balance = self.balance + amount
        else:
            self.pending_balance = self.pending_balance + amount
        self.total_earned = self.total_earned + amount

    def settle(self, amount: Money) -> None:
        """Release a pending sale into the withdrawable balance."""
        self.pending_balance = self.pending_balance - amount
        self.balance = self.balance + amount

    def void_pending(self, amount: Money) -> None:
        """Take a pending sale, or part of it, back out of the wallet."""
        self.pending_balance = self.pending_balance - amount

    # --- Withdrawals ----------------------------------------------------------

    def hold_withdrawal(self, amount: Money) -> None:
        if amount.is_zero:
            raise ValidationError("Withdrawal amount must be positive")
        if amount > self.balance:
            raise InsufficientBalance(
                f"Available balance {self.balance} does not cover {amount}; "
                f"pending funds cannot be withdrawn"
            )
        self.balance = self.balance - amount
        self.pending_balance = self.pending_balance + amount

    def complete_withdrawal(self, amount: Money) -> None:
        self.pending_balance = self.pending_balance - amount
        self.total_withdrawn = self.total_withdrawn + amount

    def reject_withdrawal(self, amount: Money) -> None:
        self.pending_balance = self.pending_balance - amount
        self.balance = self.balance + amount


@dataclass
class WalletTransaction:
    """One ledger line.  SALE amounts are positive, WITHDRAWAL negative."""

    id: int | None
    wallet_id: int
    type: TransactionType
    amount: Decimal
    status: TransactionStatus = TransactionStatus.PENDING
    order_id: int | None = None
    withdrawal_id: int | None = None
    description: str = ""
    metadata: bytes = b""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def magnitude(self) -> Money:
        return Money(abs(self.amount))

    def complete(self) -> None:
        self._leave_pending(TransactionStatus.COMPLETED)

    def cancel(self) -> None:
        self._leave_pending(TransactionStatus.CANCELLED)

    def _leave_pending(self, new_status: TransactionStatus) -> None:
        if self.status != TransactionStatus.PENDING:
            raise InvalidStateTransition(
                f"Transaction #{self.id} is already {self.status.value}"
            )
        self.status = new_status
