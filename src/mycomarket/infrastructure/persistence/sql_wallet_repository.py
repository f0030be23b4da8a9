"""SQLAlchemy-backed implementations of the wallet ledger repositories."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from mycomarket.domain.model.value_objects import Money
from mycomarket.domain.model.wallet import (
    TransactionStatus,
    TransactionType,
    Wallet,
    WalletTransaction,
)
from mycomarket.domain.model.withdrawal import Withdrawal, WithdrawalStatus
from mycomarket.domain.repository.wallet_repository import (
    WalletRepository,
    WalletTransactionRepository,
    WithdrawalRepository,
)
from mycomarket.infrastructure.persistence.orm import (
    TransactionRow,
    WalletRow,
    WithdrawalRow,
    from_cents,
    to_cents,
    to_utc,
)


class SqlWalletRepository(WalletRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, wallet_id: int, for_update: bool = False) -> Wallet | None:
        row = self._session.get(
            WalletRow,
            wallet_id,
            populate_existing=True,
            with_for_update=True if for_update else None,
        )
        return self._to_domain(row) if row is not None else None

    def get_by_producer(self, producer_id: str, for_update: bool = False) -> Wallet | None:
        stmt = select(WalletRow).where(WalletRow.producer_id == producer_id)
        if for_update:
            stmt = stmt.with_for_update()
        row = self._session.scalars(stmt.execution_options(populate_existing=True)).first()
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Wallet]:
        rows = self._session.scalars(
            select(WalletRow).order_by(WalletRow.id).execution_options(populate_existing=True)
        )
        return [self._to_domain(row) for row in rows]

    def save(self, wallet: Wallet) -> None:
        if wallet.id is None:
            row = WalletRow()
            self._session.add(row)
        else:
            row = self._session.get(WalletRow, wallet.id)
        row.producer_id = wallet.producer_id
        row.balance_cents = to_cents(wallet.balance)
        row.pending_balance_cents = to_cents(wallet.pending_balance)
        row.total_earned_cents = to_cents(wallet.total_earned)
        row.total_withdrawn_cents = to_cents(wallet.total_withdrawn)
        self._session.flush()
        wallet.id = row.id

    @staticmethod
    def _to_domain(row: WalletRow) -> Wallet:
        return Wallet(
            id=row.id,
            producer_id=row.producer_id,
            balance=Money(from_cents(row.balance_cents)),
            pending_balance=Money(from_cents(row.pending_balance_cents)),
            total_earned=Money(from_cents(row.total_earned_cents)),
            total_withdrawn=Money(from_cents(row.total_withdrawn_cents)),
        )


class SqlWalletTransactionRepository(WalletTransactionRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_sale(self, wallet_id: int, order_id: int) -> WalletTransaction | None:
        return self._first(
            select(TransactionRow).where(
                TransactionRow.wallet_id == wallet_id,
                TransactionRow.order_id == order_id,
                TransactionRow.type == TransactionType.SALE.value,
            )
        )

    def find_by_withdrawal(self, withdrawal_id: int) -> WalletTransaction | None:
        return self._first(
            select(TransactionRow).where(TransactionRow.withdrawal_id == withdrawal_id)
        )

    def list_by_order(
        self,
        order_id: int,
        type: TransactionType,
        status: TransactionStatus | None = None,
    ) -> list[WalletTransaction]:
        stmt = select(TransactionRow).where(
            TransactionRow.order_id == order_id,
            TransactionRow.type == type.value,
        )
        if status is not None:
            stmt = stmt.where(TransactionRow.status == status.value)
        return self._all(stmt.order_by(TransactionRow.id))

    def list_recent(self, wallet_id: int, limit: int) -> list[WalletTransaction]:
        return self._all(
            select(TransactionRow)
            .where(TransactionRow.wallet_id == wallet_id)
            .order_by(TransactionRow.created_at.desc(), TransactionRow.id.desc())
            .limit(limit)
        )

    def save(self, transaction: WalletTransaction) -> None:
        if transaction.id is None:
            row = TransactionRow()
            self._session.add(row)
        else:
            row = self._session.get(TransactionRow, transaction.id)
        row.wallet_id = transaction.wallet_id
        row.type = transaction.type.value
        row.amount_cents = to_cents(transaction.amount)
        row.status = transaction.status.value
        row.order_id = transaction.order_id
        row.withdrawal_id = transaction.withdrawal_id
        row.description = transaction.description
        row.metadata_ = transaction.metadata
        row.created_at = to_utc(transaction.created_at)
        self._session.flush()
        transaction.id = row.id

    # --- Internal helpers -----------------------------------------------------

    def _first(self, stmt) -> WalletTransaction | None:
        row = self._session.scalars(stmt.execution_options(populate_existing=True)).first()
        return self._to_domain(row) if row is not None else None

    def _all(self, stmt) -> list[WalletTransaction]:
        rows = self._session.scalars(stmt.execution_options(populate_existing=True))
        return [self._to_domain(row) for row in rows]

    @staticmethod
    def _to_domain(row: TransactionRow) -> WalletTransaction:
        return WalletTransaction(
            id=row.id,
            wallet_id=row.wallet_id,
            type=TransactionType(row.type),
            amount=from_cents(row.amount_cents),
            status=TransactionStatus(row.status),
            order_id=row.order_id,
            withdrawal_id=row.withdrawal_id,
            description=row.description,
            metadata=row.metadata_,
            created_at=to_utc(row.created_at),
        )


class SqlWithdrawalRepository(WithdrawalRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, withdrawal_id: int) -> Withdrawal | None:
        row = self._session.get(WithdrawalRow, withdrawal_id, populate_existing=True)
        return self._to_domain(row) if row is not None else None

    def list_recent(self, wallet_id: int, limit: int) -> list[Withdrawal]:
        return self._all(
            select(WithdrawalRow)
            .where(WithdrawalRow.wallet_id == wallet_id)
            .order_by(WithdrawalRow.requested_at.desc(), WithdrawalRow.id.desc())
            .limit(limit)
        )

    def list_pending(self) -> list[Withdrawal]:
        return self._all(
            select(WithdrawalRow)
            .where(WithdrawalRow.status == WithdrawalStatus.PENDING.value)
            .order_by(WithdrawalRow.requested_at, WithdrawalRow.id)
        )

    def save(self, withdrawal: Withdrawal) -> None:
        if withdrawal.id is None:
            row = WithdrawalRow()
            self._session.add(row)
        else:
            row = self._session.get(WithdrawalRow, withdrawal.id)
        row.wallet_id = withdrawal.wallet_id
        row.amount_cents = to_cents(withdrawal.amount)
        row.status = withdrawal.status.value
        row.bank_details = withdrawal.bank_details
        row.requested_at = to_utc(withdrawal.requested_at)
        row.processed_at = to_utc(withdrawal.processed_at)
        row.processor_note = withdrawal.processor_note
        self._session.flush()
        withdrawal.id = row.id

    def compare_and_set_status(self, withdrawal: Withdrawal, expected: WithdrawalStatus) -> bool:
        result = self._session.execute(
            update(WithdrawalRow)
            .where(
                WithdrawalRow.id == withdrawal.id,
                WithdrawalRow.status == expected.value,
            )
            .values(
                status=withdrawal.status.value,
                processed_at=to_utc(withdrawal.processed_at),
                processor_note=withdrawal.processor_note,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # --- Internal helpers -----------------------------------------------------

    def _all(self, stmt) -> list[Withdrawal]:
        rows = self._session.scalars(stmt.execution_options(populate_existing=True))
        return [self._to_domain(row) for row in rows]

    @staticmethod
    def _to_domain(row: WithdrawalRow) -> Withdrawal:
        return Withdrawal(
            id=row.id,
            wallet_id=row.wallet_id,
            amount=Money(from_cents(row.amount_cents)),
            status=WithdrawalStatus(row.status),
            bank_details=row.bank_details,
            requested_at=to_utc(row.requested_at),
            processed_at=to_utc(row.processed_at),
            processor_note=row.processor_note,
        )
