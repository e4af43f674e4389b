"""Logging setup for the command line."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, verbose: bool = False) -> None:
    """Configure the root logger; ``verbose`` shows per-row sync decisions.

    Calling again replaces the earlier setup, so ``--verbose`` can switch levels
    after the defaults were installed.
    """

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        force=verbose,
    )
