"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from sysrolesync.adapters.external import build_external_source
from sysrolesync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyRoleSyncUnitOfWork,
    is_started,
    startup,
)
from sysrolesync.domain.ports.unit_of_work import RoleSyncUnitOfWork
from sysrolesync.domain.reconciliation import ReconciliationEngine

if TYPE_CHECKING:
    from sysrolesync.config.sync import SyncConfig
    from sysrolesync.domain.model import Role
    from sysrolesync.domain.ports.external import ExternalRecord, ExternalSource, TableProbe
    from sysrolesync.domain.reconciliation import SyncResult, SyncTrace

UnitOfWorkFactory = Callable[[], RoleSyncUnitOfWork]


log = getLogger(__name__)


@dataclass(slots=True)
class SourceCheck:
    """What ``check_external_source`` found in the remote table."""

    probe: TableProbe
    user_value: str | None = None
    records: list[ExternalRecord] = field(default_factory=list["ExternalRecord"])


@dataclass(frozen=True, slots=True)
class RoleListing:
    role: Role
    in_sync_set: bool


def _ensure_started() -> None:
    if not is_started():
        startup()


def sync_system_roles(
    config: SyncConfig,
    *,
    source: ExternalSource | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    trace: SyncTrace | None = None,
) -> SyncResult:
    """Reconcile system role assignments using the configured adapters."""

    if unit_of_work_factory is None:
        _ensure_started()
    effective_source = source or build_external_source(config)
    effective_uow = unit_of_work_factory or SqlAlchemyRoleSyncUnitOfWork
    log.info(
        "Starting system role sync: table=%s, local_user_field=%s, roles=%s, remove_action=%s",
        config.remote_table,
        config.local_user_field,
        sorted(config.sync_role_ids),
        config.remove_action,
    )

    engine = ReconciliationEngine(source=effective_source, unit_of_work_factory=effective_uow)
    if trace is not None:
        engine.trace = trace
    result = engine.sync(config)

    log.info(f"Finished system role sync: {result.summary()}")
    return result


def check_external_source(
    config: SyncConfig,
    *,
    source: ExternalSource | None = None,
    user_value: str | None = None,
) -> SourceCheck:
    """Connect to the external source and look at the remote table.

    With ``user_value`` the rows whose user column equals that value are
    fetched as well, through the escaped query builder.
    """

    effective_source = source or build_external_source(config)
    with effective_source.connect(config.connection) as connection:
        check = SourceCheck(probe=connection.probe(config.remote_table), user_value=user_value)
        if user_value is not None:
            conditions = {config.user_field: user_value}
            check.records = list(connection.rows(config.remote_table, conditions=conditions))
    log.info(
        "Checked %s: columns=%s, has_rows=%s",
        check.probe.table,
        ", ".join(check.probe.columns),
        check.probe.has_rows,
    )
    return check


def list_roles(
    config: SyncConfig | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[RoleListing]:
    """Return the target roles, flagging those in the configured sync role set."""

    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyRoleSyncUnitOfWork
    sync_role_ids = config.sync_role_ids if config is not None else frozenset[int]()
    with effective_uow() as uow:
        roles = uow.repositories.roles.list_roles()
    return [RoleListing(role=role, in_sync_set=role.id in sync_role_ids) for role in roles]
