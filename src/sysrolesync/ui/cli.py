from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from sysrolesync.adapters.sqlalchemy.unit_of_work import startup
from sysrolesync.app import check_external_source, list_roles, sync_system_roles
from sysrolesync.config import ConfigurationError, configure_logging, load_sync_config
from sysrolesync.domain.ports.external import (
    ExternalConnectError,
    ExternalReadError,
    QueryBuildError,
)
from sysrolesync.domain.reconciliation import SyncStatus

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from sysrolesync.config.sync import SyncConfig

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Synchronise system role assignments from an external database"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to the TOML settings file (defaults to $SYSROLESYNC_CONFIG)",
    )
    parser.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy URI of the target role store (defaults to $DATABASE_URI)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every per-row decision",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sync", help="Grant and revoke system roles from the external table")

    check = subparsers.add_parser("check", help="Test the external database settings")
    check.add_argument(
        "--user",
        type=str,
        help="Also list the external rows whose user field equals this value",
    )

    subparsers.add_parser("roles", help="List target roles and mark the synced ones")

    return parser.parse_args(list(argv))


def _run_sync(config: SyncConfig) -> int:
    result = sync_system_roles(config)
    if result.status is not SyncStatus.SUCCESS:
        log.error("System role sync did not complete: %s", result.status)
        if not result.status.mutated:
            log.info("No role assignments were changed")
    return result.exit_code


def _run_check(config: SyncConfig, user_value: str | None) -> int:
    if not config.connection.is_complete or not config.remote_table.strip():
        log.error("External database settings are not complete")
        return 1
    if user_value is not None and not config.user_field.strip():
        raise ValueError("--user requires the userfield setting")

    try:
        check = check_external_source(config, user_value=user_value)
    except ExternalConnectError:
        log.exception("Cannot connect to the external database")
        return 1
    except ExternalReadError:
        log.exception("Cannot read external table %s", config.remote_table)
        return 4

    if not check.probe.has_rows:
        log.warning("External table %s is empty", check.probe.table)
    log.info("Table %s columns: %s", check.probe.table, ", ".join(check.probe.columns))
    if user_value is not None:
        log.info("%s rows where %s = %r", len(check.records), config.user_field, user_value)
        for record in check.records:
            log.info("  %s", dict(record))
    return 0


def _run_roles(config: SyncConfig | None) -> int:
    for listing in list_roles(config):
        marker = "*" if listing.in_sync_set else " "
        log.info("%s %s %s %s", marker, listing.role.id, listing.role.shortname, listing.role.name)
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    config: SyncConfig | None = None
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            configure_logging(verbose=True)
        if parsed_args.command != "roles" or parsed_args.config is not None:
            config = load_sync_config(parsed_args.config)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.database_uri:
            startup(database_uri=parsed_args.database_uri, force=True)
        if parsed_args.command == "sync" and config is not None:
            exit_code = _run_sync(config)
        elif parsed_args.command == "check" and config is not None:
            exit_code = _run_check(config, parsed_args.user)
        elif parsed_args.command == "roles":
            exit_code = _run_roles(config)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except (ValueError, QueryBuildError):
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)

    sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
