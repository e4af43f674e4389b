from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from sysrolesync.adapters.sqlalchemy import start_mappers
from sysrolesync.adapters.sqlalchemy.migrations import upgrade_head
from sysrolesync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyRoleSyncUnitOfWork,
    shutdown,
    startup,
)
from sysrolesync.config.sync import ConnectionDescriptor

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyRoleSyncUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyRoleSyncUnitOfWork:
        return SqlAlchemyRoleSyncUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def external_db_path(tmp_path: Path) -> Path:
    """SQLite file standing in for the external database, holding a ``sysroles`` table."""

    path = tmp_path / "external.db"
    engine = create_engine(f"sqlite+pysqlite:///{path}", future=True)
    try:
        with engine.begin() as connection:
            connection.execute(text("CREATE TABLE sysroles (UserID VARCHAR(100), Role VARCHAR(100))"))
    finally:
        engine.dispose()
    return path


@pytest.fixture
def external_descriptor(external_db_path: Path) -> ConnectionDescriptor:
    return ConnectionDescriptor(driver="sqlite+pysqlite", database=str(external_db_path))
