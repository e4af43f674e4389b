"""Target-system entities touched by the role sync.

Roles, users and contexts are owned by the target system; the sync only reads
them. Role assignments are the one aggregate the sync creates and deletes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sysrolesync.domain.model.enums import ContextLevel

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True, order=True)
class AssignmentKey:
    """One (user, role) pair within the fixed context scope."""

    user_id: int
    role_id: int

    def __str__(self) -> str:
        return f"{self.user_id} => {self.role_id}"


@dataclass(frozen=True, slots=True)
class UserMatch:
    """Outcome of a user lookup; ``candidates`` > 1 flags an ambiguous match."""

    user_id: int
    candidates: int = 1

    @property
    def ambiguous(self) -> bool:
        return self.candidates > 1


@dataclass(eq=False, kw_only=True)
class Role:
    shortname: str
    name: str = ""
    id: int | None = None


@dataclass(eq=False, kw_only=True)
class LocalUser:
    username: str
    email: str | None = None
    idnumber: str | None = None
    id: int | None = None


@dataclass(eq=False, kw_only=True)
class Context:
    context_level: int = ContextLevel.SYSTEM
    instance_id: int = 0
    id: int | None = None


@dataclass(eq=False, kw_only=True)
class RoleAssignment:
    role_id: int
    user_id: int
    context_id: int
    assigned_at: datetime | None = None
    id: int | None = None

    @property
    def key(self) -> AssignmentKey:
        return AssignmentKey(user_id=self.user_id, role_id=self.role_id)
