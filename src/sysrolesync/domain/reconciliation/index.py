"""In-memory index of the assignments present before a sync pass."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sysrolesync.domain.model import AssignmentKey

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


class CurrentAssignmentIndex:
    """Assignments not yet re-confirmed by the external source.

    Built once per run from the snapshot. Streaming claims entries (removing
    them); whatever is left afterwards is what the removal phase revokes.
    """

    def __init__(self) -> None:
        self._roles_by_user: dict[int, set[int]] = {}

    @classmethod
    def from_keys(cls, keys: Iterable[AssignmentKey]) -> CurrentAssignmentIndex:
        index = cls()
        for key in keys:
            index.add(key)
        return index

    def add(self, key: AssignmentKey) -> None:
        self._roles_by_user.setdefault(key.user_id, set()).add(key.role_id)

    def claim(self, key: AssignmentKey) -> bool:
        """Remove ``key`` if present; return whether it was."""

        roles = self._roles_by_user.get(key.user_id)
        if roles is None or key.role_id not in roles:
            return False
        roles.discard(key.role_id)
        if not roles:
            del self._roles_by_user[key.user_id]
        return True

    def __iter__(self) -> Iterator[AssignmentKey]:
        for user_id in sorted(self._roles_by_user):
            for role_id in sorted(self._roles_by_user[user_id]):
                yield AssignmentKey(user_id=user_id, role_id=role_id)

    def __len__(self) -> int:
        return sum(len(roles) for roles in self._roles_by_user.values())

    def __bool__(self) -> bool:
        return bool(self._roles_by_user)
