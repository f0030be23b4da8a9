"""Fixtures backed by a throwaway SQLite database, one file per test."""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from mycomarket.infrastructure.persistence.orm import Base
from mycomarket.infrastructure.persistence.sql_unit_of_work import SqlUnitOfWork


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'mycomarket.db'}")
    Base.metadata.create_all(engine)
    try:
        yield sessionmaker(bind=engine, expire_on_commit=False)
    finally:
        engine.dispose()


@pytest.fixture
def uow(session_factory):
    return SqlUnitOfWork(session_factory)
