"""Ports for the target system's role, user and assignment tables."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from sysrolesync.domain.model import (
        AssignmentKey,
        LocalUser,
        LocalUserField,
        MutationOutcome,
        Role,
        UserMatch,
    )


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class RoleCatalog(Repository["Role"], Protocol):
    """Read access to the target system's roles."""

    def resolve_role(self, shortname: str) -> int | None: ...

    def list_roles(self) -> Sequence[Role]: ...


@runtime_checkable
class UserCatalog(Repository["LocalUser"], Protocol):
    """Read access to the target system's users."""

    def resolve_user(self, field: LocalUserField, value: str) -> UserMatch | None:
        """Return the lowest matching user id, with the number of candidates."""
        ...


@runtime_checkable
class ContextRepository(Protocol):
    def system_context_id(self) -> int: ...


@runtime_checkable
class AssignmentStore(Protocol):
    """Role assignments within one context scope."""

    def list_assignments(
        self,
        context_id: int,
        role_ids: Collection[int],
    ) -> Sequence[AssignmentKey]: ...

    def grant(self, role_id: int, user_id: int, context_id: int) -> MutationOutcome: ...

    def revoke(self, role_id: int, user_id: int, context_id: int) -> MutationOutcome: ...
