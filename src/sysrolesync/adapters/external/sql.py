"""Ad-hoc SQL for the external database.

Values interpolated here come from trusted configuration (column names and
values chosen by an administrator), never from external rows. They are still
escaped and checked against the source charset so the query stays well formed.
"""

from __future__ import annotations

import codecs
from typing import TYPE_CHECKING

from sysrolesync.domain.ports.external import QueryBuildError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


def escape_value(text: str, *, sybase_quoting: bool = False) -> str:
    """Escape a literal for use inside single quotes."""

    if sybase_quoting:
        text = text.replace("\\", "\\\\")
        for char, replacement in (("'", "\\'"), ('"', '\\"'), ("\0", "\\0")):
            text = text.replace(char, replacement)
        return text
    return text.replace("'", "''")


def is_utf8(encoding: str) -> bool:
    return codecs.lookup(encoding or "utf-8").name == "utf-8"


def encode_value(text: str, encoding: str) -> str:
    """Return ``text`` if it can be represented in the source ``encoding``.

    The query string itself stays text: converting it to the source charset is
    the DBAPI driver's job, configured through the connection URL (for example
    ``?charset=latin1`` for MySQL drivers). This only rejects values the source
    could never store, so they fail here instead of matching nothing.
    """

    if is_utf8(encoding):
        return text
    try:
        return text.encode(encoding).decode(encoding)
    except UnicodeEncodeError as exc:
        raise QueryBuildError(f"Value {text!r} cannot be represented in {encoding}") from exc


def build_select_sql(
    table: str,
    *,
    conditions: Mapping[str, str] | None = None,
    fields: Sequence[str] = (),
    distinct: bool = False,
    sort: str | None = None,
    encoding: str = "utf-8",
    sybase_quoting: bool = False,
) -> str:
    columns = ",".join(fields) if fields else "*"
    where = [
        f"{key} = '{encode_value(escape_value(value, sybase_quoting=sybase_quoting), encoding)}'"
        for key, value in (conditions or {}).items()
    ]
    parts = ["SELECT"]
    if distinct:
        parts.append("DISTINCT")
    parts.extend((columns, "FROM", table))
    if where:
        parts.extend(("WHERE", " AND ".join(where)))
    if sort:
        parts.extend(("ORDER BY", sort))
    return " ".join(parts)


def build_count_sql(table: str) -> str:
    return f"SELECT count(*) FROM {table}"
