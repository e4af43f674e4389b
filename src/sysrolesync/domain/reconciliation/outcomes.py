"""Run status and counters reported by a sync pass."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum


class SyncStatus(StrEnum):
    SUCCESS = "success"
    CONFIG_INCOMPLETE = "config_incomplete"
    CONNECT_FAILURE = "connect_failure"
    INSUFFICIENT_RECORDS = "insufficient_records"
    READ_FAILURE = "read_failure"

    @property
    def exit_code(self) -> int:
        if self is SyncStatus.SUCCESS:
            return 0
        if self is SyncStatus.READ_FAILURE:
            return 4
        return 1

    @property
    def mutated(self) -> bool:
        """Whether grants or revokes may have been issued in this status."""

        return self in {SyncStatus.SUCCESS, SyncStatus.READ_FAILURE}


class SkipReason(StrEnum):
    INVALID_ROW = "invalid_row"
    UNKNOWN_ROLE = "unknown_role"
    UNKNOWN_USER = "unknown_user"


@dataclass(slots=True)
class SyncResult:
    """Outcome of one sync pass."""

    status: SyncStatus = SyncStatus.SUCCESS
    granted: int = 0
    revoked: int = 0
    unchanged: int = 0
    ambiguous_users: int = 0
    records_counted: int | None = None
    skips: Counter[SkipReason] = field(default_factory=Counter["SkipReason"])

    @property
    def skipped(self) -> int:
        return sum(self.skips.values())

    @property
    def exit_code(self) -> int:
        return self.status.exit_code

    def skip(self, reason: SkipReason) -> None:
        self.skips[reason] += 1

    def summary(self) -> str:
        details = ", ".join(f"{reason}={count}" for reason, count in sorted(self.skips.items()))
        text = (
            f"status={self.status}, granted={self.granted}, revoked={self.revoked}, "
            f"unchanged={self.unchanged}, skipped={self.skipped}"
        )
        if details:
            text += f" ({details})"
        if self.ambiguous_users:
            text += f", ambiguous_users={self.ambiguous_users}"
        return text
