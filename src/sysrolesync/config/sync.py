"""Settings for one system role sync run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from sysrolesync.domain.model.enums import LocalUserField, RemoveAction

from .errors import ConfigurationError

DEFAULT_DB_ENCODING: Final[str] = "utf-8"
DEFAULT_MIN_RECORDS: Final[int] = 1


@dataclass(frozen=True, slots=True)
class ConnectionDescriptor:
    """How to reach the external database.

    ``url`` takes precedence over the individual parts when set. ``driver`` is a
    SQLAlchemy dialect name such as ``postgresql+psycopg`` or ``mssql+pyodbc``.
    """

    driver: str = ""
    host: str = ""
    user: str = ""
    password: str = field(default="", repr=False)
    database: str = ""
    setup_sql: str = ""
    url: str = field(default="", repr=False)
    debug: bool = False

    @property
    def is_complete(self) -> bool:
        if self.url.strip():
            return True
        driver = self.driver.strip()
        if not driver:
            return False
        # file-based sqlite has no host
        return bool(self.host.strip()) or driver.startswith("sqlite")


@dataclass(frozen=True, slots=True)
class SyncConfig:
    connection: ConnectionDescriptor
    remote_table: str
    user_field: str
    role_field: str
    local_user_field: LocalUserField | None = LocalUserField.IDNUMBER
    sync_role_ids: frozenset[int] = frozenset()
    remove_action: RemoveAction = RemoveAction.REMOVE
    min_records: int = DEFAULT_MIN_RECORDS
    db_encoding: str = DEFAULT_DB_ENCODING
    sybase_quoting: bool = False

    def __post_init__(self) -> None:
        if self.min_records < 0:
            raise ConfigurationError("min_records must be non-negative")

    def missing_settings(self) -> tuple[str, ...]:
        """Return the names of settings that must be filled in before a run."""

        missing: list[str] = []
        if not self.connection.is_complete:
            missing.append("connection")
        if not self.remote_table.strip():
            missing.append("remote_table")
        if self.local_user_field is None:
            missing.append("local_user_field")
        if not self.user_field.strip():
            missing.append("user_field")
        if not self.role_field.strip():
            missing.append("role_field")
        if not self.sync_role_ids:
            missing.append("sync_role_ids")
        return tuple(missing)

    @property
    def is_complete(self) -> bool:
        return not self.missing_settings()
