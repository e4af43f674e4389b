"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import IntEnum, StrEnum


class LocalUserField(StrEnum):
    """Local user attribute matched against the external user column."""

    ID = "id"
    USERNAME = "username"
    EMAIL = "email"
    IDNUMBER = "idnumber"


class RemoveAction(StrEnum):
    """What happens to assignments that disappeared from the external source."""

    REMOVE = "remove"
    KEEP = "keep"


class ContextLevel(IntEnum):
    SYSTEM = 10


class MutationOutcome(StrEnum):
    APPLIED = "applied"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
