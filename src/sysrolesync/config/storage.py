"""Where the target role store lives when ``DATABASE_URI`` is not set."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final

DATABASE_URI_ENV: Final[str] = "DATABASE_URI"
DATA_DIR_ENV: Final[str] = "SYSROLESYNC_DATA_DIR"
DEFAULT_DB_FILENAME: Final[str] = "sysrolesync.db"


def get_data_dir(*, create: bool = True) -> Path:
    """Return ``$SYSROLESYNC_DATA_DIR`` or ``$XDG_DATA_HOME/sysrolesync``."""

    override = os.getenv(DATA_DIR_ENV)
    if override:
        data_dir = Path(override)
    else:
        xdg = os.getenv("XDG_DATA_HOME")
        data_dir = (Path(xdg) if xdg else Path.home() / ".local" / "share") / "sysrolesync"
    data_dir = data_dir.expanduser().resolve()
    if create:
        data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_database_uri() -> str:
    """Target store URI: ``$DATABASE_URI``, else a SQLite file in the data dir."""

    return os.getenv(DATABASE_URI_ENV) or (
        f"sqlite+pysqlite:///{get_data_dir() / DEFAULT_DB_FILENAME}"
    )
