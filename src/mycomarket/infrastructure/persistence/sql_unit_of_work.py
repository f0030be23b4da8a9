"""SQLAlchemy Unit of Work: one Session, one transaction per ``with`` block.

Lock timeouts, deadlocks, serialization failures and unique-key races
reported by the database are re-raised as ``ConcurrencyConflict`` so the
application layer can retry the whole operation.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from mycomarket.domain.exceptions import ConcurrencyConflict
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.infrastructure.persistence.sql_booking_repository import SqlBookingRepository
from mycomarket.infrastructure.persistence.sql_catalog import SqlProductCatalog
from mycomarket.infrastructure.persistence.sql_delivery_slot_repository import (
    SqlDeliverySlotRepository,
)
from mycomarket.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from mycomarket.infrastructure.persistence.sql_stock_repository import SqlStockRepository
from mycomarket.infrastructure.persistence.sql_wallet_repository import (
    SqlWalletRepository,
    SqlWalletTransactionRepository,
    SqlWithdrawalRepository,
)

logger = logging.getLogger(__name__)

_CONFLICT_MARKERS = ("lock", "deadlock", "serializ", "could not obtain")


def is_conflict(err: DBAPIError) -> bool:
    if isinstance(err, IntegrityError):
        return True
    if isinstance(err, OperationalError):
        message = str(err.orig).lower()
        return any(marker in message for marker in _CONFLICT_MARKERS)
    return False


class SqlUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError("Unit of work is not open")
        return self._session

    def __enter__(self) -> SqlUnitOfWork:
        if self._session is not None:
            raise RuntimeError("Unit of work is already open")
        session = self._session_factory()
        self._session = session
        self.catalog = SqlProductCatalog(session)
        self.stock = SqlStockRepository(session)
        self.slots = SqlDeliverySlotRepository(session)
        self.bookings = SqlBookingRepository(session)
        self.orders = SqlOrderRepository(session)
        self.wallets = SqlWalletRepository(session)
        self.transactions = SqlWalletTransactionRepository(session)
        self.withdrawals = SqlWithdrawalRepository(session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        session = self.session
        try:
            super().__exit__(exc_type, exc, tb)
        except DBAPIError as err:
            session.rollback()
            if is_conflict(err):
                logger.warning("Commit rejected by a concurrent writer: %s", err.orig)
                raise ConcurrencyConflict(f"Concurrent update detected: {err.orig}") from err
            raise
        finally:
            session.close()
            self._session = None

        if isinstance(exc, DBAPIError) and is_conflict(exc):
            logger.warning("Statement rejected by a concurrent writer: %s", exc.orig)
            raise ConcurrencyConflict(f"Concurrent update detected: {exc.orig}") from exc

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
