"""Unit tests for the Wallet aggregate, its transactions and withdrawals."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from mycomarket.domain.exceptions import (
    AlreadyProcessed,
    InsufficientBalance,
    InvalidStateTransition,
    ValidationError,
)
from mycomarket.domain.model.value_objects import Money
from mycomarket.domain.model.wallet import (
    TransactionStatus,
    TransactionType,
    Wallet,
    WalletTransaction,
)
from mycomarket.domain.model.withdrawal import Withdrawal, WithdrawalStatus

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _wallet(balance: str = "0", pending: str = "0") -> Wallet:
    return Wallet(
        id=1,
        producer_id="prod-a",
        balance=Money.of(balance),
        pending_balance=Money.of(pending),
    )


class TestSales:

    def test_pending_sale(self):
        wallet = _wallet()
        wallet.credit_sale(Money.of("72"), available=False)
        assert wallet.pending_balance == Money.of("72")
        assert wallet.balance == Money.zero()
        assert wallet.total_earned == Money.of("72")

    def test_available_sale(self):
        wallet = _wallet()
        wallet.credit_sale(Money.of("72"), available=True)
        assert wallet.balance == Money.of("72")
        assert wallet.total_earned == Money.of("72")

    def test_settle_moves_pending_to_balance(self):
        wallet = _wallet(pending="72")
        wallet.settle(Money.of("72"))
        assert wallet.pending_balance == Money.zero()
        assert wallet.balance == Money.of("72")

    def test_void_pending_keeps_total_earned(self):
        wallet = _wallet()
        wallet.credit_sale(Money.of("18"), available=False)
        wallet.void_pending(Money.of("18"))
        assert wallet.pending_balance == Money.zero()
        assert wallet.total_earned == Money.of("18")


class TestWithdrawals:

    def test_hold_parks_amount_in_pending(self):
        wallet = _wallet(balance="100")
        wallet.hold_withdrawal(Money.of("100"))
        assert wallet.balance == Money.zero()
        assert wallet.pending_balance == Money.of("100")

    def test_pending_funds_cannot_be_withdrawn(self):
        wallet = _wallet(balance="10", pending="500")
        with pytest.raises(InsufficientBalance, match="pending funds cannot be withdrawn"):
            wallet.hold_withdrawal(Money.of("11"))
        assert wallet.balance == Money.of("10")

    def test_zero_withdrawal_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            _wallet(balance="10").hold_withdrawal(Money.zero())

    def test_complete(self):
        wallet = _wallet(balance="100")
        wallet.hold_withdrawal(Money.of("40"))
        wallet.complete_withdrawal(Money.of("40"))
        assert wallet.balance == Money.of("60")
        assert wallet.pending_balance == Money.zero()
        assert wallet.total_withdrawn == Money.of("40")

    def test_reject_restores_balance(self):
        wallet = _wallet(balance="100")
        wallet.hold_withdrawal(Money.of("100"))
        wallet.reject_withdrawal(Money.of("100"))
        assert wallet.balance == Money.of("100")
        assert wallet.pending_balance == Money.zero()
        assert wallet.total_withdrawn == Money.zero()


class TestTransaction:

    def test_withdrawal_magnitude_is_positive(self):
        tx = WalletTransaction(
            id=1, wallet_id=1, type=TransactionType.WITHDRAWAL, amount=Decimal("-100.00")
        )
        assert tx.magnitude == Money.of("100")

    def test_leaves_pending_once(self):
        tx = WalletTransaction(id=1, wallet_id=1, type=TransactionType.SALE, amount=Decimal("72"))
        tx.complete()
        assert tx.status == TransactionStatus.COMPLETED
        with pytest.raises(InvalidStateTransition, match="already COMPLETED"):
            tx.cancel()


class TestWithdrawalResolution:

    def _withdrawal(self) -> Withdrawal:
        return Withdrawal(id=7, wallet_id=1, amount=Money.of("100"), requested_at=NOW)

    def test_approve(self):
        withdrawal = self._withdrawal()
        withdrawal.resolve(WithdrawalStatus.COMPLETED, None, NOW)
        assert withdrawal.status == WithdrawalStatus.COMPLETED
        assert withdrawal.processed_at == NOW

    def test_reject_requires_reason(self):
        withdrawal = self._withdrawal()
        with pytest.raises(ValidationError, match="rejection reason"):
            withdrawal.resolve(WithdrawalStatus.REJECTED, "  ", NOW)
        assert withdrawal.status == WithdrawalStatus.PENDING

    def test_reject_with_reason(self):
        withdrawal = self._withdrawal()
        withdrawal.resolve(WithdrawalStatus.REJECTED, " IBAN invalid ", NOW)
        assert withdrawal.processor_note == "IBAN invalid"

    def test_cannot_resolve_to_pending(self):
        with pytest.raises(ValidationError):
            self._withdrawal().resolve(WithdrawalStatus.PENDING, None, NOW)

    def test_second_resolution_rejected(self):
        withdrawal = self._withdrawal()
        withdrawal.resolve(WithdrawalStatus.COMPLETED, None, NOW)
        with pytest.raises(AlreadyProcessed):
            withdrawal.resolve(WithdrawalStatus.REJECTED, "late", NOW)
