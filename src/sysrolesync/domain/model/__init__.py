"""Public domain model surface."""

from __future__ import annotations

from sysrolesync.domain.model.assignments import (
    AssignmentKey,
    Context,
    LocalUser,
    Role,
    RoleAssignment,
    UserMatch,
)
from sysrolesync.domain.model.enums import (
    ContextLevel,
    LocalUserField,
    MutationOutcome,
    RemoveAction,
)

__all__ = [
    "AssignmentKey",
    "Context",
    "ContextLevel",
    "LocalUser",
    "LocalUserField",
    "MutationOutcome",
    "RemoveAction",
    "Role",
    "RoleAssignment",
    "UserMatch",
]
