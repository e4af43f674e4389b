"""Reconcile system role assignments against the external source.

One pass:
1) check the settings are complete
2) connect to the external source and check it holds enough records
3) snapshot current assignments for the sync role set into an index
4) stream external rows; claim assignments that still exist, grant the rest
5) revoke whatever the stream never claimed (unless the remove action is KEEP)

Grants and revokes are committed one at a time, so an interrupted run leaves
a partial but resumable state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sysrolesync.domain.model import AssignmentKey, MutationOutcome, RemoveAction
from sysrolesync.domain.ports.external import ExternalConnectError, ExternalReadError

from .index import CurrentAssignmentIndex
from .outcomes import SkipReason, SyncResult, SyncStatus
from .rows import InvalidRowError, RowLayout, describe_record
from .trace import LoggingTrace, SyncTrace

if TYPE_CHECKING:
    from collections.abc import Callable

    from sysrolesync.config.sync import SyncConfig
    from sysrolesync.domain.model import LocalUserField, UserMatch
    from sysrolesync.domain.ports.external import (
        ExternalConnection,
        ExternalRecord,
        ExternalSource,
    )
    from sysrolesync.domain.ports.unit_of_work import RoleSyncUnitOfWork

log = logging.getLogger(__name__)


@dataclass(slots=True)
class _SyncRun:
    """State owned by a single pass and dropped when it ends."""

    config: SyncConfig
    local_user_field: LocalUserField
    layout: RowLayout
    uow: RoleSyncUnitOfWork
    context_id: int
    index: CurrentAssignmentIndex
    result: SyncResult
    role_ids: dict[str, int | None] = field(default_factory=dict["str", "int | None"])
    user_matches: dict[str, UserMatch | None] = field(
        default_factory=dict["str", "UserMatch | None"]
    )


@dataclass(slots=True)
class ReconciliationEngine:
    """Run a full sync pass from external rows to granted/revoked assignments."""

    source: ExternalSource
    unit_of_work_factory: Callable[[], RoleSyncUnitOfWork]
    trace: SyncTrace = field(default_factory=LoggingTrace)

    def sync(self, config: SyncConfig) -> SyncResult:
        result = SyncResult()
        try:
            self._run(config, result)
        finally:
            self.trace.finished()
        return result

    def _run(self, config: SyncConfig, result: SyncResult) -> None:
        missing = config.missing_settings()
        if missing or config.local_user_field is None:
            self.trace.output(f"Sync config not complete, missing: {', '.join(missing)}")
            result.status = SyncStatus.CONFIG_INCOMPLETE
            return

        self.trace.output("Starting system role synchronisation...")
        try:
            connection = self.source.connect(config.connection)
        except ExternalConnectError as exc:
            self.trace.output(f"Error while communicating with external database: {exc}")
            result.status = SyncStatus.CONNECT_FAILURE
            return

        with connection:
            if not self._has_enough_records(connection, config, result):
                result.status = SyncStatus.INSUFFICIENT_RECORDS
                return

            with self.unit_of_work_factory() as uow:
                run = self._snapshot(config, config.local_user_field, uow, result)

                self.trace.output("Starting database sync")
                try:
                    for record in connection.rows(config.remote_table):
                        self._process_record(record, run)
                except ExternalReadError as exc:
                    self.trace.output(
                        f"Error reading external table {config.remote_table}, "
                        f"skipping removal phase: {exc}"
                    )
                    result.status = SyncStatus.READ_FAILURE
                    uow.commit()
                    return

                self._remove_unclaimed(run)
                uow.commit()

        result.status = SyncStatus.SUCCESS
        self.trace.output(f"System role synchronisation finished: {result.summary()}")

    def _has_enough_records(
        self,
        connection: ExternalConnection,
        config: SyncConfig,
        result: SyncResult,
    ) -> bool:
        """Guard against wiping assignments when the external table is empty or broken."""

        if config.min_records <= 0:
            return True
        try:
            count = connection.count(config.remote_table)
        except ExternalReadError as exc:
            log.warning("Counting records in %s failed: %s", config.remote_table, exc)
            count = 0
        result.records_counted = count
        if count > config.min_records:
            return True
        self.trace.output(
            f"Failed to sync because the external db returned {count} records "
            f"and the minimum required is {config.min_records}"
        )
        return False

    def _snapshot(
        self,
        config: SyncConfig,
        local_user_field: LocalUserField,
        uow: RoleSyncUnitOfWork,
        result: SyncResult,
    ) -> _SyncRun:
        self.trace.output("Indexing current role assignments")
        repositories = uow.repositories
        context_id = repositories.contexts.system_context_id()
        keys = repositories.assignments.list_assignments(context_id, config.sync_role_ids)
        index = CurrentAssignmentIndex.from_keys(keys)
        self.trace.output(f"Indexed {len(index)} current role assignments", 1)
        return _SyncRun(
            config=config,
            local_user_field=local_user_field,
            layout=RowLayout.from_config(config),
            uow=uow,
            context_id=context_id,
            index=index,
            result=result,
        )

    def _process_record(self, record: ExternalRecord, run: _SyncRun) -> None:
        result = run.result
        try:
            row = run.layout.read(record)
        except InvalidRowError as exc:
            self._skip(
                run,
                SkipReason.INVALID_ROW,
                f"error: invalid external record, {exc}: {describe_record(record)}",
            )
            return

        role_id = self._resolve_role(row.role_shortname, run)
        if role_id is None:
            self._skip(
                run,
                SkipReason.UNKNOWN_ROLE,
                f"error: skipping '{row.description}' due to unknown role shortname "
                f"'{row.role_shortname}'",
            )
            return
        if role_id not in run.config.sync_role_ids:
            self._skip(
                run,
                SkipReason.UNKNOWN_ROLE,
                f"error: skipping '{row.description}' because role '{row.role_shortname}' "
                "is not in the sync role set",
            )
            return

        match = self._resolve_user(row.user_value, run)
        if match is None:
            self._skip(
                run,
                SkipReason.UNKNOWN_USER,
                f"error: skipping '{row.description}' due to unknown user "
                f"{run.local_user_field} '{row.user_value}'",
            )
            return
        if match.ambiguous:
            result.ambiguous_users += 1
            self.trace.output(
                f"warning: {run.local_user_field} '{row.user_value}' matches "
                f"{match.candidates} users, using lowest id {match.user_id}",
                1,
            )

        key = AssignmentKey(user_id=match.user_id, role_id=role_id)
        if run.index.claim(key):
            result.unchanged += 1
            self.trace.output(f"Skipping: system role already assigned: {row.description}", 1)
            return

        outcome = run.uow.repositories.assignments.grant(role_id, match.user_id, run.context_id)
        run.uow.commit()
        if outcome is MutationOutcome.APPLIED:
            result.granted += 1
            self.trace.output(f"Assigning system role: {row.description}", 1)
        else:
            result.unchanged += 1
            self.trace.output(f"Skipping: system role already assigned: {row.description}", 1)

    def _remove_unclaimed(self, run: _SyncRun) -> None:
        if not run.index:
            return
        if run.config.remove_action is RemoveAction.KEEP:
            self.trace.output(f"Keeping {len(run.index)} system roles missing from external table")
            return

        self.trace.output("Unassigning removed system roles")
        assignments = run.uow.repositories.assignments
        for key in run.index:
            outcome = assignments.revoke(key.role_id, key.user_id, run.context_id)
            run.uow.commit()
            if outcome is MutationOutcome.APPLIED:
                run.result.revoked += 1
                self.trace.output(f"Unassigning: {key}", 1)
            else:
                self.trace.output(f"Already unassigned: {key}", 1)

    def _resolve_role(self, shortname: str, run: _SyncRun) -> int | None:
        if shortname not in run.role_ids:
            run.role_ids[shortname] = run.uow.repositories.roles.resolve_role(shortname)
        return run.role_ids[shortname]

    def _resolve_user(self, value: str, run: _SyncRun) -> UserMatch | None:
        if value not in run.user_matches:
            run.user_matches[value] = run.uow.repositories.users.resolve_user(
                run.local_user_field, value
            )
        return run.user_matches[value]

    def _skip(self, run: _SyncRun, reason: SkipReason, message: str) -> None:
        run.result.skip(reason)
        self.trace.output(message, 1)
