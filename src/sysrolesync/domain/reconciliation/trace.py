"""Progress trace sinks for sync runs."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable


@runtime_checkable
class SyncTrace(Protocol):
    """Ordered progress lines: depth 0 is the run summary, deeper lines are per-row detail."""

    def output(self, message: str, depth: int = 0) -> None: ...

    def finished(self) -> None: ...


class LoggingTrace:
    """Route trace lines to a standard logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("sysrolesync.sync")

    def output(self, message: str, depth: int = 0) -> None:
        if depth <= 0:
            self.logger.info(message)
        else:
            self.logger.debug("%s%s", "  " * depth, message)

    def finished(self) -> None:
        self.logger.debug("Trace finished")
