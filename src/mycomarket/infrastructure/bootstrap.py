"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from mycomarket.application.notifications import Notifier
from mycomarket.application.sweep_expired_bookings import SweepExpiredBookingsHandler
from mycomarket.domain.model.order import OrderStatus
from mycomarket.domain.service.wallet_ledger import LedgerPolicy
from mycomarket.infrastructure.config import get_settings
from mycomarket.infrastructure.notifications.logging_notifier import LoggingNotifier
from mycomarket.infrastructure.persistence.orm import Base
from mycomarket.infrastructure.persistence.sql_unit_of_work import SqlUnitOfWork


@lru_cache
def engine() -> Engine:
    settings = get_settings()
    return create_engine(settings.database_url, echo=settings.sql_echo)


@lru_cache
def session_factory() -> sessionmaker[Session]:
    return sessionmaker(bind=engine(), expire_on_commit=False)


def init_db() -> None:
    """Create every table that does not exist yet."""
    Base.metadata.create_all(engine())


def unit_of_work() -> SqlUnitOfWork:
    return SqlUnitOfWork(session_factory())


def ledger_policy() -> LedgerPolicy:
    settings = get_settings()
    return LedgerPolicy(
        commission_percentage=Decimal(settings.platform_fee_percentage),
        finalized_status=OrderStatus(settings.finalized_order_status),
    )


def notifier() -> Notifier:
    return LoggingNotifier()


def retry_attempts() -> int:
    return get_settings().conflict_retry_attempts


def sweep_handler() -> SweepExpiredBookingsHandler:
    return SweepExpiredBookingsHandler(
        unit_of_work(),
        batch_size=get_settings().sweep_batch_size,
        retry_attempts=retry_attempts(),
    )
