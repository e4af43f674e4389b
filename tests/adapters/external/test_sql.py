from __future__ import annotations

import pytest

from sysrolesync.adapters.external import (
    build_count_sql,
    build_select_sql,
    encode_value,
    escape_value,
)
from sysrolesync.adapters.external.sql import is_utf8
from sysrolesync.domain.ports.external import QueryBuildError


def test_escape_doubles_single_quotes() -> None:
    assert escape_value("o'brien") == "o''brien"
    assert escape_value('say "hi" \\') == 'say "hi" \\'


def test_sybase_quoting_uses_backslashes() -> None:
    assert escape_value("o'brien", sybase_quoting=True) == "o\\'brien"
    assert escape_value('a"b\\c\0', sybase_quoting=True) == 'a\\"b\\\\c\\0'


def test_encode_value_checks_source_charset() -> None:
    assert encode_value("Müller", "latin-1") == "Müller"
    assert encode_value("東京", "utf-8") == "東京"
    with pytest.raises(QueryBuildError):
        encode_value("東京", "latin-1")


@pytest.mark.parametrize(
    ("encoding", "expected"),
    [("utf-8", True), ("UTF8", True), ("", True), ("latin-1", False), ("cp1252", False)],
)
def test_is_utf8_normalises_codec_aliases(encoding: str, expected: bool) -> None:
    assert is_utf8(encoding) is expected


def test_select_without_conditions() -> None:
    assert build_select_sql("sysroles") == "SELECT * FROM sysroles"


def test_select_with_conditions_fields_and_sort() -> None:
    sql = build_select_sql(
        "sysroles",
        conditions={"userid": "o'brien", "role": "editor"},
        fields=("userid", "role"),
        distinct=True,
        sort="userid",
    )

    assert sql == (
        "SELECT DISTINCT userid,role FROM sysroles "
        "WHERE userid = 'o''brien' AND role = 'editor' ORDER BY userid"
    )


def test_count_sql() -> None:
    assert build_count_sql("sysroles") == "SELECT count(*) FROM sysroles"
