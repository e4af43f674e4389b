"""Session lifecycle for the target role store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from sysrolesync.adapters.sqlalchemy.mappings import start_mappers
from sysrolesync.adapters.sqlalchemy.migrations import upgrade_head
from sysrolesync.adapters.sqlalchemy.repositories import (
    SqlAlchemyAssignmentStore,
    SqlAlchemyContextRepository,
    SqlAlchemyRoleCatalog,
    SqlAlchemyUserCatalog,
)
from sysrolesync.config.storage import get_database_uri
from sysrolesync.domain.ports.unit_of_work import RoleSyncRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when the target store is used before ``startup()`` or twice without ``force``."""


# one engine per process; the CLI configures it once, tests reset it
_engine: Engine | None = None
_sessions: sessionmaker[Session] | None = None


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the target store, mapping the model and migrating the schema to head."""

    global _engine, _sessions
    if _sessions is not None and not force:
        raise StartupError("Target store already initialised. Pass force=True to rebind.")

    bound = engine or create_engine(database_uri or get_database_uri(), future=True)
    start_mappers()
    upgrade_head(engine=bound)
    _engine = bound
    _sessions = sessionmaker(bind=bound, expire_on_commit=False)


def is_started() -> bool:
    return _sessions is not None


def shutdown() -> None:
    """Dispose the bound engine (primarily for tests)."""

    global _engine, _sessions
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _sessions = None


class SqlAlchemyRoleSyncUnitOfWork:
    """One session over the role, user, context and assignment tables.

    The engine commits after every grant or revoke, so the session is reused for
    many short transactions rather than one long one.
    """

    def __init__(self) -> None:
        if _sessions is None:
            raise StartupError(
                "Target store not initialised. Call "
                "sysrolesync.adapters.sqlalchemy.unit_of_work.startup() first."
            )
        self._factory = _sessions
        self._session: Session | None = None
        self._repositories: RoleSyncRepositories | None = None

    def __enter__(self) -> SqlAlchemyRoleSyncUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work already entered")
        session = self._factory()
        self._session = session
        self._repositories = RoleSyncRepositories(
            roles=SqlAlchemyRoleCatalog(session),
            users=SqlAlchemyUserCatalog(session),
            contexts=SqlAlchemyContextRepository(session),
            assignments=SqlAlchemyAssignmentStore(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        if exc_type is not None:
            session.rollback()
        session.close()
        self._session = None
        self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work used outside its with-block")
        return self._session

    @property
    def repositories(self) -> RoleSyncRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work used outside its with-block")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from sysrolesync.domain.ports.unit_of_work import RoleSyncUnitOfWork

    _uow_check: RoleSyncUnitOfWork = SqlAlchemyRoleSyncUnitOfWork()
