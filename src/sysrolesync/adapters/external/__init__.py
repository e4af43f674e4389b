"""External database connector."""

from __future__ import annotations

from .source import (
    SqlAlchemyExternalConnection,
    SqlAlchemyExternalSource,
    build_external_source,
    build_external_url,
)
from .sql import build_count_sql, build_select_sql, encode_value, escape_value

__all__ = [
    "SqlAlchemyExternalConnection",
    "SqlAlchemyExternalSource",
    "build_count_sql",
    "build_external_source",
    "build_external_url",
    "build_select_sql",
    "encode_value",
    "escape_value",
]
