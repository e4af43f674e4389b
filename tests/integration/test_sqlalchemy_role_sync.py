from __future__ import annotations

from typing import TYPE_CHECKING

from sysrolesync.adapters.sqlalchemy.unit_of_work import SqlAlchemyRoleSyncUnitOfWork
from sysrolesync.app import sync_system_roles
from sysrolesync.domain.model import AssignmentKey, LocalUser, LocalUserField, RemoveAction, Role
from sysrolesync.domain.reconciliation import SkipReason, SyncStatus
from tests.helpers.role_sync import RecordingTrace, make_config, write_external_rows

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from sysrolesync.config.sync import ConnectionDescriptor


def _seed_target(factory: Callable[[], SqlAlchemyRoleSyncUnitOfWork]) -> dict[str, int]:
    """Create roles and users; return ids keyed by role shortname and username."""

    roles = [Role(shortname="manager"), Role(shortname="editor"), Role(shortname="viewer")]
    users = [
        LocalUser(username="alice", idnumber="A1"),
        LocalUser(username="bob", idnumber="B2"),
        LocalUser(username="carol", idnumber="C3"),
    ]
    with factory() as uow:
        for role in roles:
            uow.repositories.roles.add(role)
        for user in users:
            uow.repositories.users.add(user)
        uow.commit()
    ids = {role.shortname: role.id for role in roles}
    ids.update({user.username: user.id for user in users})
    return {name: value for name, value in ids.items() if value is not None}


def _current(
    factory: Callable[[], SqlAlchemyRoleSyncUnitOfWork],
    role_ids: set[int],
) -> set[AssignmentKey]:
    with factory() as uow:
        context_id = uow.repositories.contexts.system_context_id()
        keys = set(uow.repositories.assignments.list_assignments(context_id, role_ids))
        uow.commit()
    return keys


def test_sync_against_sqlite_external_table(
    sqlite_unit_of_work: Callable[[], SqlAlchemyRoleSyncUnitOfWork],
    external_db_path: Path,
    external_descriptor: ConnectionDescriptor,
) -> None:
    ids = _seed_target(sqlite_unit_of_work)
    sync_roles = {ids["editor"], ids["viewer"]}
    config = make_config(
        connection=external_descriptor,
        user_field="UserID",
        role_field="Role",
        sync_role_ids=frozenset(sync_roles),
        local_user_field=LocalUserField.IDNUMBER,
        min_records=1,
    )
    write_external_rows(
        external_db_path,
        [("A1", "editor"), ("B2", "viewer"), ("ZZ", "editor"), ("C3", "manager")],
    )

    first = sync_system_roles(config, unit_of_work_factory=sqlite_unit_of_work)

    assert first.status is SyncStatus.SUCCESS
    assert first.granted == 2
    assert first.skips[SkipReason.UNKNOWN_USER] == 1
    assert first.skips[SkipReason.UNKNOWN_ROLE] == 1
    assert _current(sqlite_unit_of_work, sync_roles) == {
        AssignmentKey(user_id=ids["alice"], role_id=ids["editor"]),
        AssignmentKey(user_id=ids["bob"], role_id=ids["viewer"]),
    }

    trace = RecordingTrace()
    second = sync_system_roles(config, unit_of_work_factory=sqlite_unit_of_work, trace=trace)

    assert (second.granted, second.revoked, second.unchanged) == (0, 0, 2)
    assert trace.finished_calls == 1

    write_external_rows(external_db_path, [("A1", "editor"), ("C3", "viewer")])
    kept = sync_system_roles(
        make_config(
            connection=external_descriptor,
            user_field="UserID",
            role_field="Role",
            sync_role_ids=frozenset(sync_roles),
            remove_action=RemoveAction.KEEP,
        ),
        unit_of_work_factory=sqlite_unit_of_work,
    )
    assert (kept.granted, kept.revoked) == (1, 0)

    third = sync_system_roles(config, unit_of_work_factory=sqlite_unit_of_work)

    assert (third.granted, third.revoked, third.unchanged) == (0, 1, 2)
    assert _current(sqlite_unit_of_work, sync_roles) == {
        AssignmentKey(user_id=ids["alice"], role_id=ids["editor"]),
        AssignmentKey(user_id=ids["carol"], role_id=ids["viewer"]),
    }


def test_empty_external_table_never_revokes(
    sqlite_unit_of_work: Callable[[], SqlAlchemyRoleSyncUnitOfWork],
    external_db_path: Path,
    external_descriptor: ConnectionDescriptor,
) -> None:
    ids = _seed_target(sqlite_unit_of_work)
    sync_roles = {ids["editor"]}
    config = make_config(
        connection=external_descriptor,
        user_field="UserID",
        role_field="Role",
        sync_role_ids=frozenset(sync_roles),
        min_records=1,
    )
    write_external_rows(external_db_path, [("A1", "editor"), ("B2", "editor")])
    sync_system_roles(config, unit_of_work_factory=sqlite_unit_of_work)

    write_external_rows(external_db_path, [])
    result = sync_system_roles(config, unit_of_work_factory=sqlite_unit_of_work)

    assert result.status is SyncStatus.INSUFFICIENT_RECORDS
    assert len(_current(sqlite_unit_of_work, sync_roles)) == 2
