from __future__ import annotations

import logging

import pytest

from sysrolesync.domain.reconciliation import LoggingTrace, SkipReason, SyncResult, SyncStatus


@pytest.mark.parametrize(
    ("status", "exit_code"),
    [
        (SyncStatus.SUCCESS, 0),
        (SyncStatus.CONFIG_INCOMPLETE, 1),
        (SyncStatus.CONNECT_FAILURE, 1),
        (SyncStatus.INSUFFICIENT_RECORDS, 1),
        (SyncStatus.READ_FAILURE, 4),
    ],
)
def test_status_exit_codes(status: SyncStatus, exit_code: int) -> None:
    assert status.exit_code == exit_code


def test_pre_mutation_aborts_are_not_mutating() -> None:
    assert not SyncStatus.CONFIG_INCOMPLETE.mutated
    assert not SyncStatus.INSUFFICIENT_RECORDS.mutated
    assert SyncStatus.READ_FAILURE.mutated


def test_summary_lists_skip_reasons() -> None:
    result = SyncResult(granted=2, revoked=1, unchanged=5)
    result.skip(SkipReason.UNKNOWN_USER)
    result.skip(SkipReason.UNKNOWN_USER)
    result.skip(SkipReason.INVALID_ROW)

    assert result.skipped == 3
    assert result.summary() == (
        "status=success, granted=2, revoked=1, unchanged=5, skipped=3 "
        "(invalid_row=1, unknown_user=2)"
    )


def test_logging_trace_levels(caplog: pytest.LogCaptureFixture) -> None:
    trace = LoggingTrace(logging.getLogger("tests.trace"))

    with caplog.at_level(logging.DEBUG, logger="tests.trace"):
        trace.output("summary line")
        trace.output("row detail", 1)

    levels = [(record.levelno, record.getMessage()) for record in caplog.records]
    assert (logging.INFO, "summary line") in levels
    assert (logging.DEBUG, "  row detail") in levels
