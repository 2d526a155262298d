"""Unit tests for statement observability logging."""

from __future__ import annotations

import datetime as dt

import pytest

from chronodesk.errors import RenderError
from chronodesk.statements.observability import (
    StatementEventLogger,
    StatementEventType,
)
from tests.helpers.femtologging_capture import capture_logs

_LOGGER_NAME = "chronodesk.statements.observability"


class TestStatementEventLogger:
    """Tests for ``StatementEventLogger`` structured log events."""

    @pytest.fixture
    def event_logger(self) -> StatementEventLogger:
        """Return a fresh statement event logger."""
        return StatementEventLogger()

    def test_tenant_started_emits_info(
        self, event_logger: StatementEventLogger
    ) -> None:
        """Start events carry the window and worker count."""
        with capture_logs(_LOGGER_NAME) as capture:
            event_logger.log_tenant_started(
                tenant_slug="acme",
                start=dt.date(2024, 2, 20),
                end=dt.date(2024, 3, 19),
                worker_count=3,
            )
            capture.wait_for_count(1)
            record = capture.records[0]
            assert record.level == "INFO"
            assert StatementEventType.TENANT_STARTED in record.message
            assert "start=2024-02-20" in record.message
            assert "end=2024-03-19" in record.message
            assert "workers=3" in record.message

    def test_tenant_skipped_emits_warning(
        self, event_logger: StatementEventLogger
    ) -> None:
        """Skipped tenants are logged as warnings with the reason."""
        with capture_logs(_LOGGER_NAME) as capture:
            event_logger.log_tenant_skipped(
                tenant_slug="acme", reason="workers unavailable"
            )
            capture.wait_for_count(1)
            record = capture.records[0]
            assert record.level in {"WARN", "WARNING"}
            assert StatementEventType.TENANT_SKIPPED in record.message
            assert "reason=workers unavailable" in record.message

    def test_worker_skipped_without_error_is_info(
        self, event_logger: StatementEventLogger
    ) -> None:
        """Expected skips such as empty periods are not errors."""
        with capture_logs(_LOGGER_NAME) as capture:
            event_logger.log_worker_skipped(
                tenant_slug="acme", worker_id="w-1", reason="no time entries"
            )
            capture.wait_for_count(1)
            record = capture.records[0]
            assert record.level == "INFO"
            assert "worker=w-1" in record.message

    def test_worker_skipped_with_error_is_error(
        self, event_logger: StatementEventLogger
    ) -> None:
        """Failures carry the error type, message and exception."""
        error = RenderError("undefined variable")
        with capture_logs(_LOGGER_NAME) as capture:
            event_logger.log_worker_skipped(
                tenant_slug="acme",
                worker_id="w-1",
                reason="render failed",
                error=error,
            )
            capture.wait_for_count(1)
            record = capture.records[0]
            assert record.level == "ERROR"
            assert StatementEventType.WORKER_SKIPPED in record.message
            assert "error_type=RenderError" in record.message
            assert "undefined variable" in record.message
            assert record.exc_info is not None

    def test_run_completed_reports_counts(
        self, event_logger: StatementEventLogger
    ) -> None:
        """Completion events summarise the run."""
        with capture_logs(_LOGGER_NAME) as capture:
            event_logger.log_run_completed(
                mode="scheduled", uploaded=4, skipped=1, skipped_tenants=0
            )
            capture.wait_for_count(1)
            message = capture.records[0].message
            assert "mode=scheduled" in message
            assert "uploaded=4" in message
            assert "skipped=1" in message
            assert "skipped_tenants=0" in message
