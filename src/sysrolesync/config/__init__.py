"""Application configuration helpers."""

from __future__ import annotations

from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .settings import SyncSettings, load_sync_config, parse_sync_settings
from .storage import get_data_dir, get_database_uri
from .sync import ConnectionDescriptor, SyncConfig

__all__ = [
    "ConfigurationError",
    "ConnectionDescriptor",
    "MissingConfigurationError",
    "SyncConfig",
    "SyncSettings",
    "configure_logging",
    "get_data_dir",
    "get_database_uri",
    "load_sync_config",
    "parse_sync_settings",
]
