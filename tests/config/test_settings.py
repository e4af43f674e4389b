from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from sysrolesync.config import (
    ConfigurationError,
    MissingConfigurationError,
    load_sync_config,
    parse_sync_settings,
)
from sysrolesync.domain.model import LocalUserField, RemoveAction

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _clear_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SYSROLESYNC_DBPASS", raising=False)
    monkeypatch.delenv("SYSROLESYNC_CONFIG", raising=False)


SETTINGS_TOML = """
[sysrolesync]
dbtype = "postgresql+psycopg"
dbhost = "db.example.org"
dbuser = "sync"
dbpass = "from-file"
dbname = "hr"
remotetable = "sysroles"
userfield = " UserID "
rolefield = "Role"
localuserfield = "username"
syncroles = [3, 4]
removeaction = "keep"
minrecords = 10
"""


def test_defaults_follow_the_settings_form() -> None:
    config = parse_sync_settings({})

    assert config.local_user_field is LocalUserField.IDNUMBER
    assert config.remove_action is RemoveAction.REMOVE
    assert config.min_records == 1
    assert config.db_encoding == "utf-8"
    assert config.sybase_quoting is False
    assert not config.is_complete
    assert "sync_role_ids" in config.missing_settings()


def test_load_sync_config_from_file(tmp_path: Path) -> None:
    path = tmp_path / "settings.toml"
    path.write_text(SETTINGS_TOML)

    config = load_sync_config(path)

    assert config.is_complete
    assert config.connection.driver == "postgresql+psycopg"
    assert config.connection.password == "from-file"
    assert config.user_field == "userid"
    assert config.role_field == "role"
    assert config.local_user_field is LocalUserField.USERNAME
    assert config.sync_role_ids == frozenset({3, 4})
    assert config.remove_action is RemoveAction.KEEP
    assert config.min_records == 10
    assert "from-file" not in repr(config)


def test_config_path_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "settings.toml"
    path.write_text(SETTINGS_TOML)
    monkeypatch.setenv("SYSROLESYNC_CONFIG", str(path))
    monkeypatch.setenv("SYSROLESYNC_DBPASS", "from-env")

    config = load_sync_config()

    assert config.connection.password == "from-env"


def test_top_level_keys_and_legacy_values() -> None:
    config = parse_sync_settings(
        {
            "syncroles": "3, 4,,5",
            "removeaction": 1,
            "localuserfield": " ",
            "dbencoding": "Latin-1",
            "dbsybasequoting": True,
        }
    )

    assert config.sync_role_ids == frozenset({3, 4, 5})
    assert config.remove_action is RemoveAction.KEEP
    assert config.local_user_field is None
    assert config.db_encoding == "latin-1"
    assert config.sybase_quoting is True
    assert parse_sync_settings({"removeaction": "0"}).remove_action is RemoveAction.REMOVE


@pytest.mark.parametrize(
    "document",
    [
        {"minrecords": -1},
        {"dbencoding": "no-such-codec"},
        {"localuserfield": "nickname"},
        {"removeaction": "archive"},
        {"syncroles": "editor"},
        {"sysrolesync": "not a table"},
    ],
)
def test_invalid_settings_raise_configuration_error(document: dict[str, object]) -> None:
    with pytest.raises(ConfigurationError):
        parse_sync_settings(document)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(MissingConfigurationError):
        load_sync_config(tmp_path / "absent.toml")


def test_missing_path_and_env() -> None:
    with pytest.raises(MissingConfigurationError):
        load_sync_config()


def test_invalid_toml(tmp_path: Path) -> None:
    path = tmp_path / "settings.toml"
    path.write_text("remotetable = ")

    with pytest.raises(ConfigurationError, match="not valid TOML"):
        load_sync_config(path)
