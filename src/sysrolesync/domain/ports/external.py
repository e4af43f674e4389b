"""Ports for reading the external source of desired role assignments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from types import TracebackType

    from sysrolesync.config.sync import ConnectionDescriptor


class ExternalSourceError(RuntimeError):
    """Base class for failures talking to the external source."""


class ExternalConnectError(ExternalSourceError):
    """Raised when the external source cannot be reached or set up."""


class ExternalReadError(ExternalSourceError):
    """Raised when a query against a reachable external source fails."""


class QueryBuildError(ExternalSourceError):
    """Raised when a value cannot be safely interpolated into an ad-hoc query."""


type ExternalRecord = Mapping[str, object]


@dataclass(frozen=True, slots=True)
class TableProbe:
    """What a quick look at the remote table revealed."""

    table: str
    columns: tuple[str, ...]
    has_rows: bool


@runtime_checkable
class ExternalConnection(Protocol):
    """An open, read-only connection. Closing it is always safe."""

    def count(self, table: str) -> int: ...

    def rows(
        self,
        table: str,
        *,
        conditions: Mapping[str, str] | None = None,
    ) -> Iterator[ExternalRecord]:
        """Stream records lazily; the iterator is finite and cannot be restarted."""
        ...

    def probe(self, table: str) -> TableProbe: ...

    def close(self) -> None: ...

    def __enter__(self) -> ExternalConnection: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool | None: ...


@runtime_checkable
class ExternalSource(Protocol):
    """Opens connections to the external source."""

    def connect(self, descriptor: ConnectionDescriptor) -> ExternalConnection: ...


__all__ = [
    "ExternalConnectError",
    "ExternalConnection",
    "ExternalReadError",
    "ExternalRecord",
    "ExternalSource",
    "ExternalSourceError",
    "QueryBuildError",
    "TableProbe",
]
