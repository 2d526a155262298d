"""Emit structured observability events for statement runs.

This module defines event identifiers and a logger wrapper used by
``StatementService`` and ``DispatchStateUpdater`` to report what happened
to every tenant and worker of a run.

Usage
-----
>>> event_logger = StatementEventLogger()
>>> event_logger.log_tenant_started(
...     tenant_slug="acme",
...     start=dt.date(2024, 2, 15),
...     end=dt.date(2024, 3, 19),
...     worker_count=3,
... )

"""

from __future__ import annotations

import enum
import typing as typ

from chronodesk.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    import datetime as dt

logger = get_logger(__name__)


class StatementEventType(enum.StrEnum):
    """Structured log event types for statement runs."""

    TENANT_STARTED = "statements.tenant.started"
    TENANT_SKIPPED = "statements.tenant.skipped"
    WORKER_UPLOADED = "statements.worker.uploaded"
    WORKER_SKIPPED = "statements.worker.skipped"
    STATE_UPDATED = "statements.state.updated"
    STATE_FAILED = "statements.state.failed"
    RUN_COMPLETED = "statements.run.completed"


class StatementEventLogger:
    """Emit structured statement events via femtologging."""

    def log_tenant_started(
        self,
        *,
        tenant_slug: str,
        start: dt.date,
        end: dt.date,
        worker_count: int,
    ) -> None:
        """Log that a tenant's workers are about to be processed.

        Parameters
        ----------
        tenant_slug
            Slug of the tenant.
        start
            First covered day.
        end
            Last covered day.
        worker_count
            Number of workers that will be processed.

        """
        log_info(
            logger,
            "[%s] tenant=%s start=%s end=%s workers=%d",
            StatementEventType.TENANT_STARTED,
            tenant_slug,
            start.isoformat(),
            end.isoformat(),
            worker_count,
        )

    def log_tenant_skipped(
        self,
        *,
        tenant_slug: str,
        reason: str,
        error: BaseException | None = None,
    ) -> None:
        """Log that a whole tenant was skipped."""
        log_warning(
            logger,
            "[%s] tenant=%s reason=%s error_type=%s",
            StatementEventType.TENANT_SKIPPED,
            tenant_slug,
            reason,
            type(error).__name__ if error is not None else None,
            exc_info=error,
        )

    def log_worker_uploaded(
        self,
        *,
        tenant_slug: str,
        worker_id: str,
        artifact_name: str,
    ) -> None:
        """Log a successfully uploaded statement."""
        log_info(
            logger,
            "[%s] tenant=%s worker=%s artifact=%s",
            StatementEventType.WORKER_UPLOADED,
            tenant_slug,
            worker_id,
            artifact_name,
        )

    def log_worker_skipped(
        self,
        *,
        tenant_slug: str,
        worker_id: str,
        reason: str,
        error: BaseException | None = None,
    ) -> None:
        """Log a worker whose statement was not produced.

        Skips caused by an error are logged at ERROR with the exception
        attached; skips without an error (e.g. no time entries) at INFO.

        """
        if error is None:
            log_info(
                logger,
                "[%s] tenant=%s worker=%s reason=%s",
                StatementEventType.WORKER_SKIPPED,
                tenant_slug,
                worker_id,
                reason,
            )
            return
        log_error(
            logger,
            "[%s] tenant=%s worker=%s reason=%s error_type=%s error_message=%s",
            StatementEventType.WORKER_SKIPPED,
            tenant_slug,
            worker_id,
            reason,
            type(error).__name__,
            str(error),
            exc_info=error,
        )

    def log_state_updated(self, *, tenant_slug: str, day: int) -> None:
        """Log a persisted dispatch marker."""
        log_info(
            logger,
            "[%s] tenant=%s last_dispatched_day=%d",
            StatementEventType.STATE_UPDATED,
            tenant_slug,
            day,
        )

    def log_state_failed(
        self,
        *,
        tenant_slug: str,
        day: int,
        error: BaseException,
    ) -> None:
        """Log a dispatch marker that could not be persisted."""
        log_error(
            logger,
            "[%s] tenant=%s last_dispatched_day=%d error_message=%s",
            StatementEventType.STATE_FAILED,
            tenant_slug,
            day,
            str(error),
            exc_info=error,
        )

    def log_run_completed(
        self,
        *,
        mode: str,
        uploaded: int,
        skipped: int,
        skipped_tenants: int,
    ) -> None:
        """Log the end-of-run counts."""
        log_info(
            logger,
            "[%s] mode=%s uploaded=%d skipped=%d skipped_tenants=%d",
            StatementEventType.RUN_COMPLETED,
            mode,
            uploaded,
            skipped,
            skipped_tenants,
        )


__all__ = ["StatementEventLogger", "StatementEventType"]
