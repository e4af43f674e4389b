"""Normalisation of external records into typed rows.

A ``RowLayout`` is resolved once per run from the configured column names and
then applied to every record: column names are lower-cased, values decoded
from the source encoding and the user/role values trimmed.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sysrolesync.config.sync import SyncConfig


class InvalidRowError(ValueError):
    """Raised when an external record cannot be turned into a usable row."""


class MissingFieldError(InvalidRowError):
    """Raised when a configured column is absent from an external record."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"missing field '{field_name}'")
        self.field_name = field_name


def decode_value(value: object, encoding: str, *, strict: bool = True) -> str:
    """Return ``value`` as text, decoding raw bytes from ``encoding``.

    With ``strict=False`` undecodable bytes are replaced instead of rejected.
    """

    if value is None:
        return ""
    if isinstance(value, bytes | bytearray | memoryview):
        try:
            return bytes(value).decode(encoding or "utf-8", "strict" if strict else "replace")
        except UnicodeDecodeError as exc:
            raise InvalidRowError(f"value is not valid {encoding}") from exc
    if isinstance(value, str):
        return value
    return str(value)


def describe_record(record: Mapping[str, object]) -> str:
    """Render a raw record for trace output."""

    return json.dumps(dict(record), default=str, ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class ExternalRow:
    user_value: str
    role_shortname: str
    fields: Mapping[str, str]

    @property
    def description(self) -> str:
        return f"{self.user_value} => {self.role_shortname}"


@dataclass(frozen=True, slots=True)
class RowLayout:
    user_field: str
    role_field: str
    encoding: str = "utf-8"

    @classmethod
    def from_config(cls, config: SyncConfig) -> RowLayout:
        return cls(
            user_field=config.user_field.strip().lower(),
            role_field=config.role_field.strip().lower(),
            encoding=config.db_encoding,
        )

    def read(self, record: Mapping[str, object]) -> ExternalRow:
        raw = {str(key).lower(): value for key, value in record.items()}
        user_value = decode_value(self._require(raw, self.user_field), self.encoding).strip()
        role_shortname = decode_value(self._require(raw, self.role_field), self.encoding).strip()
        if not user_value or not role_shortname:
            raise InvalidRowError("missing mandatory fields")
        # other columns are only traced, never a reason to drop the row
        fields = {
            name: decode_value(value, self.encoding, strict=False) for name, value in raw.items()
        }
        return ExternalRow(user_value=user_value, role_shortname=role_shortname, fields=fields)

    @staticmethod
    def _require(fields: Mapping[str, object], name: str) -> object:
        try:
            return fields[name]
        except KeyError:
            raise MissingFieldError(name) from None
