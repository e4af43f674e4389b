"""Reconciliation core for syncing system role assignments.

Flow of one pass:
1) snapshot current assignments into a ``CurrentAssignmentIndex``
2) normalise external records through a ``RowLayout``
3) resolve role and user, claim or grant
4) revoke unclaimed assignments when the remove action allows it
"""

from __future__ import annotations

from .engine import ReconciliationEngine
from .index import CurrentAssignmentIndex
from .outcomes import SkipReason, SyncResult, SyncStatus
from .rows import ExternalRow, InvalidRowError, MissingFieldError, RowLayout, decode_value
from .trace import LoggingTrace, SyncTrace

__all__ = [
    "CurrentAssignmentIndex",
    "ExternalRow",
    "InvalidRowError",
    "LoggingTrace",
    "MissingFieldError",
    "ReconciliationEngine",
    "RowLayout",
    "SkipReason",
    "SyncResult",
    "SyncStatus",
    "SyncTrace",
    "decode_value",
]
