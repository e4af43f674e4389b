"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, cast

from sqlalchemy import select

from sysrolesync.adapters.sqlalchemy.mappings import (
    context_table,
    role_assignment_table,
    role_table,
    user_table,
)
from sysrolesync.domain.model import (
    AssignmentKey,
    Context,
    ContextLevel,
    LocalUserField,
    MutationOutcome,
    Role,
    RoleAssignment,
    UserMatch,
)

if TYPE_CHECKING:
    from collections.abc import Collection

    from sqlalchemy.orm import Session

    from sysrolesync.domain.model import LocalUser

log = logging.getLogger(__name__)


class SqlAlchemyRoleCatalog:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Role) -> None:
        self.session.add(entity)

    def resolve_role(self, shortname: str) -> int | None:
        stmt = (
            select(role_table.c.id)
            .where(role_table.c.shortname == shortname)
            .order_by(role_table.c.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_roles(self) -> list[Role]:
        stmt = select(Role).order_by(role_table.c.id)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyUserCatalog:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: LocalUser) -> None:
        self.session.add(entity)

    def resolve_user(self, field: LocalUserField, value: str) -> UserMatch | None:
        lookup: object = value
        if field is LocalUserField.ID:
            try:
                lookup = int(value)
            except ValueError:
                return None
        column = user_table.c[field.value]
        stmt = select(user_table.c.id).where(column == lookup).order_by(user_table.c.id)
        user_ids = list(self.session.execute(stmt).scalars())
        if not user_ids:
            return None
        return UserMatch(user_id=user_ids[0], candidates=len(user_ids))


class SqlAlchemyContextRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def system_context_id(self) -> int:
        """Return the system context id, creating the context on first use."""

        stmt = (
            select(context_table.c.id)
            .where(context_table.c.context_level == ContextLevel.SYSTEM)
            .where(context_table.c.instance_id == 0)
        )
        existing = self.session.execute(stmt).scalar_one_or_none()
        if existing is not None:
            return existing

        context = Context(context_level=ContextLevel.SYSTEM, instance_id=0)
        self.session.add(context)
        self.session.flush()
        log.info("Created system context %s", context.id)
        return cast("int", context.id)


class SqlAlchemyAssignmentStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_assignments(
        self,
        context_id: int,
        role_ids: Collection[int],
    ) -> list[AssignmentKey]:
        if not role_ids:
            return []
        stmt = (
            select(role_assignment_table.c.user_id, role_assignment_table.c.role_id)
            .where(role_assignment_table.c.context_id == context_id)
            .where(role_assignment_table.c.role_id.in_(sorted(role_ids)))
        )
        return [
            AssignmentKey(user_id=user_id, role_id=role_id)
            for user_id, role_id in self.session.execute(stmt)
        ]

    def grant(self, role_id: int, user_id: int, context_id: int) -> MutationOutcome:
        if self._find(role_id, user_id, context_id) is not None:
            return MutationOutcome.ALREADY_EXISTS
        assignment = RoleAssignment(
            role_id=role_id,
            user_id=user_id,
            context_id=context_id,
            assigned_at=datetime.now(tz=UTC),
        )
        self.session.add(assignment)
        self.session.flush()
        return MutationOutcome.APPLIED

    def revoke(self, role_id: int, user_id: int, context_id: int) -> MutationOutcome:
        assignment = self._find(role_id, user_id, context_id)
        if assignment is None:
            return MutationOutcome.NOT_FOUND
        self.session.delete(assignment)
        self.session.flush()
        return MutationOutcome.APPLIED

    def _find(self, role_id: int, user_id: int, context_id: int) -> RoleAssignment | None:
        stmt = (
            select(RoleAssignment)
            .where(role_assignment_table.c.role_id == role_id)
            .where(role_assignment_table.c.user_id == user_id)
            .where(role_assignment_table.c.context_id == context_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()


if TYPE_CHECKING:
    from sysrolesync.domain.ports.persistence import (
        AssignmentStore,
        ContextRepository,
        RoleCatalog,
        UserCatalog,
    )

    _session_stub = cast("Session", object())
    _role_check: RoleCatalog = SqlAlchemyRoleCatalog(_session_stub)
    _user_check: UserCatalog = SqlAlchemyUserCatalog(_session_stub)
    _context_check: ContextRepository = SqlAlchemyContextRepository(_session_stub)
    _assignment_check: AssignmentStore = SqlAlchemyAssignmentStore(_session_stub)
