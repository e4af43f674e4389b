"""Settings file loader.

The settings file is TOML. Keys follow the names administrators already know
from the plugin settings form (``dbtype``, ``remotetable``, ...) and
may sit at the top level or inside a ``[sysrolesync]`` table.
"""

from __future__ import annotations

import codecs
import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sysrolesync.domain.model.enums import LocalUserField, RemoveAction

from .errors import ConfigurationError, MissingConfigurationError
from .sync import DEFAULT_DB_ENCODING, DEFAULT_MIN_RECORDS, ConnectionDescriptor, SyncConfig

if TYPE_CHECKING:
    from collections.abc import Mapping

CONFIG_PATH_ENV: Final[str] = "SYSROLESYNC_CONFIG"
PASSWORD_ENV: Final[str] = "SYSROLESYNC_DBPASS"
SETTINGS_TABLE: Final[str] = "sysrolesync"

# legacy form values: 0 = remove, 1 = keep
_LEGACY_REMOVE_ACTIONS: Final[dict[str, RemoveAction]] = {
    "0": RemoveAction.REMOVE,
    "1": RemoveAction.KEEP,
}


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class SyncSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    dbtype: str = ""
    dbhost: str = ""
    dbuser: str = ""
    dbpass: str = ""
    dbname: str = ""
    dburl: str = ""
    dbencoding: str = DEFAULT_DB_ENCODING
    dbsetupsql: str = ""
    dbsybasequoting: bool = False
    debugdb: bool = False
    minrecords: int = Field(default=DEFAULT_MIN_RECORDS, ge=0)

    remotetable: str = ""
    localuserfield: LocalUserField | None = LocalUserField.IDNUMBER
    userfield: str = ""
    rolefield: str = ""
    syncroles: list[int] = Field(default_factory=list[int])
    removeaction: RemoveAction = RemoveAction.REMOVE

    _normalize_localuserfield = field_validator("localuserfield", mode="before")(_blank_to_none)

    @field_validator("syncroles", mode="before")
    @classmethod
    def _split_syncroles(cls, value: object) -> object:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("removeaction", mode="before")
    @classmethod
    def _accept_legacy_removeaction(cls, value: object) -> object:
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            value = str(value)
        if isinstance(value, str):
            normalized = value.strip().lower()
            return _LEGACY_REMOVE_ACTIONS.get(normalized, normalized)
        return value

    @field_validator("dbencoding")
    @classmethod
    def _check_encoding(cls, value: str) -> str:
        normalized = value.strip().lower() or DEFAULT_DB_ENCODING
        try:
            codecs.lookup(normalized)
        except LookupError as exc:
            raise ValueError(f"Unknown database encoding: {value}") from exc
        return normalized

    def to_config(self) -> SyncConfig:
        return SyncConfig(
            connection=ConnectionDescriptor(
                driver=self.dbtype.strip(),
                host=self.dbhost.strip(),
                user=self.dbuser.strip(),
                password=self.dbpass,
                database=self.dbname.strip(),
                setup_sql=self.dbsetupsql.strip(),
                url=self.dburl.strip(),
                debug=self.debugdb,
            ),
            remote_table=self.remotetable.strip(),
            user_field=self.userfield.strip().lower(),
            role_field=self.rolefield.strip().lower(),
            local_user_field=self.localuserfield,
            sync_role_ids=frozenset(self.syncroles),
            remove_action=self.removeaction,
            min_records=self.minrecords,
            db_encoding=self.dbencoding,
            sybase_quoting=self.dbsybasequoting,
        )


def parse_sync_settings(document: Mapping[str, object]) -> SyncConfig:
    """Validate a settings mapping and turn it into a ``SyncConfig``."""

    section = document.get(SETTINGS_TABLE, document)
    if not isinstance(section, dict):
        raise ConfigurationError(f"[{SETTINGS_TABLE}] must be a table")
    values: dict[str, object] = dict(section)  # pyright: ignore[reportUnknownArgumentType]
    password = os.getenv(PASSWORD_ENV)
    if password:
        values["dbpass"] = password
    try:
        settings = SyncSettings.model_validate(values)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid sync settings: {exc}") from exc
    return settings.to_config()


def load_sync_config(path: Path | None = None) -> SyncConfig:
    """Load sync settings from ``path`` or the file named by ``SYSROLESYNC_CONFIG``."""

    if path is None:
        env_path = os.getenv(CONFIG_PATH_ENV, "").strip()
        if not env_path:
            raise MissingConfigurationError(
                f"No settings file given; pass --config or set {CONFIG_PATH_ENV}"
            )
        path = Path(env_path)
    try:
        with path.expanduser().open("rb") as handle:
            document = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise MissingConfigurationError(f"Settings file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Settings file {path} is not valid TOML: {exc}") from exc
    return parse_sync_settings(document)
