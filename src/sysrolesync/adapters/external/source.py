"""SQLAlchemy-backed connector for the external assignments table."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from sqlalchemy import URL, create_engine, make_url, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from sysrolesync.domain.ports.external import (
    ExternalConnectError,
    ExternalReadError,
    TableProbe,
)

from .sql import build_count_sql, build_select_sql

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping
    from types import TracebackType

    from sqlalchemy.engine import Connection, Engine
    from sqlalchemy.sql.elements import TextClause

    from sysrolesync.config.sync import ConnectionDescriptor, SyncConfig
    from sysrolesync.domain.ports.external import ExternalRecord

    EngineFactory = Callable[..., Engine]

log = logging.getLogger(__name__)


def _statement(sql: str) -> TextClause:
    # literal values may contain colons, which text() would read as bind params
    return text(sql.replace(":", "\\:"))


def build_external_url(descriptor: ConnectionDescriptor) -> URL:
    """Build the SQLAlchemy URL for ``descriptor``."""

    if descriptor.url.strip():
        return make_url(descriptor.url.strip())

    host = descriptor.host.strip() or None
    port: int | None = None
    if host is not None and ":" in host:
        name, _, maybe_port = host.rpartition(":")
        if maybe_port.isdigit():
            host, port = name, int(maybe_port)
    return URL.create(
        descriptor.driver.strip(),
        username=descriptor.user or None,
        password=descriptor.password or None,
        host=host,
        port=port,
        database=descriptor.database or None,
    )


class SqlAlchemyExternalConnection:
    """Read-only connection to the external database."""

    def __init__(
        self,
        engine: Engine,
        connection: Connection,
        *,
        encoding: str = "utf-8",
        sybase_quoting: bool = False,
    ) -> None:
        self._engine = engine
        self._connection: Connection | None = connection
        self.encoding = encoding
        self.sybase_quoting = sybase_quoting

    def __enter__(self) -> SqlAlchemyExternalConnection:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        self.close()
        return False

    @property
    def connection(self) -> Connection:
        if self._connection is None:
            raise ExternalReadError("External connection is closed")
        return self._connection

    @property
    def closed(self) -> bool:
        return self._connection is None

    def close(self) -> None:
        if self._connection is None:
            return
        try:
            self._connection.close()
        finally:
            self._connection = None
            self._engine.dispose()
            log.debug("Closed external connection")

    def execute_setup(self, sql: str) -> None:
        self.connection.execute(_statement(sql))

    def count(self, table: str) -> int:
        try:
            value = self.connection.execute(_statement(build_count_sql(table))).scalar()
        except SQLAlchemyError as exc:
            raise ExternalReadError(f"Cannot count records in {table}: {exc}") from exc
        return int(value or 0)

    def rows(
        self,
        table: str,
        *,
        conditions: Mapping[str, str] | None = None,
    ) -> Iterator[ExternalRecord]:
        sql = build_select_sql(
            table,
            conditions=conditions,
            encoding=self.encoding,
            sybase_quoting=self.sybase_quoting,
        )
        statement = _statement(sql).execution_options(stream_results=True)
        try:
            result = self.connection.execute(statement)
            for row in result.mappings():
                yield dict(row)
        except SQLAlchemyError as exc:
            raise ExternalReadError(f"Cannot read external table {table}: {exc}") from exc

    def probe(self, table: str) -> TableProbe:
        try:
            result = self.connection.execute(_statement(build_select_sql(table)))
            columns = tuple(result.keys())
            first = result.first()
        except SQLAlchemyError as exc:
            raise ExternalReadError(f"Cannot read external table {table}: {exc}") from exc
        return TableProbe(table=table, columns=columns, has_rows=first is not None)


class SqlAlchemyExternalSource:
    """Open ``SqlAlchemyExternalConnection`` instances for a connection descriptor."""

    def __init__(
        self,
        *,
        encoding: str = "utf-8",
        sybase_quoting: bool = False,
        engine_factory: EngineFactory = create_engine,
    ) -> None:
        self.encoding = encoding
        self.sybase_quoting = sybase_quoting
        self._engine_factory = engine_factory

    def connect(self, descriptor: ConnectionDescriptor) -> SqlAlchemyExternalConnection:
        try:
            url = build_external_url(descriptor)
            engine = self._engine_factory(url, echo=descriptor.debug, poolclass=NullPool)
        except (SQLAlchemyError, ImportError) as exc:
            # ImportError: the DBAPI driver for this dialect is not installed
            raise ExternalConnectError(f"Cannot set up external database engine: {exc}") from exc

        display_url = url.render_as_string(hide_password=True)
        try:
            connection = engine.connect()
        except SQLAlchemyError as exc:
            engine.dispose()
            raise ExternalConnectError(f"Cannot connect to {display_url}: {exc}") from exc

        external = SqlAlchemyExternalConnection(
            engine,
            connection,
            encoding=self.encoding,
            sybase_quoting=self.sybase_quoting,
        )
        if descriptor.setup_sql:
            try:
                external.execute_setup(descriptor.setup_sql)
            except SQLAlchemyError as exc:
                external.close()
                raise ExternalConnectError(
                    f"Setup statement failed on {display_url}: {exc}"
                ) from exc

        log.debug("Connected to external database %s", display_url)
        return external


def build_external_source(config: SyncConfig) -> SqlAlchemyExternalSource:
    return SqlAlchemyExternalSource(
        encoding=config.db_encoding,
        sybase_quoting=config.sybase_quoting,
    )


if TYPE_CHECKING:
    from sysrolesync.domain.ports.external import ExternalConnection, ExternalSource

    _connection_check: type[ExternalConnection] = SqlAlchemyExternalConnection
    _source_check: ExternalSource = SqlAlchemyExternalSource()
