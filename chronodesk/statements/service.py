"""Statement service orchestrating scheduled and on-demand runs.

This module provides the StatementService class which drives a run from
the tenant registry down to individual uploads: selecting due tenants,
taking this unit's chunk, resolving each tenant's window, rendering and
rasterizing one statement per worker, naming and uploading it, and
finally recording the dispatch marker.

Usage
-----
>>> from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
>>> from chronodesk.statements import (
...     ChunkSpec,
...     JinjaStatementRenderer,
...     StatementService,
...     StatementServiceDependencies,
...     WeasyPrintRasterizer,
... )
>>> from chronodesk.storage import create_object_store
>>> from chronodesk.tenants import SqlStatementDataSource
>>>
>>> engine = create_async_engine("sqlite+aiosqlite:///chronodesk.db")
>>> session_factory = async_sessionmaker(engine, expire_on_commit=False)
>>> dependencies = StatementServiceDependencies(
...     data_source=SqlStatementDataSource(session_factory),
...     store=create_object_store(),
...     renderer=JinjaStatementRenderer(assets.template_source),
...     rasterizer=WeasyPrintRasterizer(),
... )
>>> service = StatementService(dependencies, assets=assets, tz=tz)
>>> summary = await service.run_scheduled(today, ChunkSpec())

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from chronodesk.common.calendar import period_label
from chronodesk.common.slug import validate_tenant_slug
from chronodesk.errors import (
    ConfigurationError,
    DataFetchError,
    IntervalParseError,
    RasterizeError,
    RenderError,
    UploadError,
)
from chronodesk.logging import get_logger, log_warning
from chronodesk.statements.chunking import select_chunk
from chronodesk.statements.dispatch_state import DispatchStateUpdater
from chronodesk.statements.intervals import accumulate
from chronodesk.statements.markup import StatementDocument, build_context
from chronodesk.statements.outcomes import (
    NO_TIME_ENTRIES,
    RunMode,
    RunSummary,
    StateUpdate,
    TenantSkip,
    WorkerOutcome,
)
from chronodesk.statements.revisions import RevisionNamer, bulk_name
from chronodesk.statements.selection import select_due_tenants
from chronodesk.statements.window import StatementWindow, resolve_window
from chronodesk.storage.protocol import PDF_CONTENT_TYPE

logger = get_logger(__name__)

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from chronodesk.errors import ChronodeskError
    from chronodesk.statements.chunking import ChunkSpec
    from chronodesk.statements.config import StatementAssets
    from chronodesk.statements.observability import StatementEventLogger
    from chronodesk.statements.render import PdfRasterizer, StatementRenderer
    from chronodesk.storage.protocol import ObjectStore
    from chronodesk.tenants.models import TenantInfo, WorkerInfo
    from chronodesk.tenants.protocol import StatementDataSource

# Most specific classes first; the first match names the skip reason.
_SKIP_REASONS: tuple[tuple[type[ChronodeskError], str], ...] = (
    (IntervalParseError, "invalid duration"),
    (DataFetchError, "time entries unavailable"),
    (RenderError, "render failed"),
    (RasterizeError, "rasterize failed"),
    (UploadError, "upload failed"),
)


def _skip_reason(error: ChronodeskError) -> str:
    for error_type, reason in _SKIP_REASONS:
        if isinstance(error, error_type):
            return reason
    return "failed"  # pragma: no cover - every caught type is listed


@dc.dataclass(frozen=True, slots=True)
class StatementServiceDependencies:
    """Core dependencies for StatementService.

    Attributes
    ----------
    data_source
        Tenant registry, workers and time entries.
    store
        Destination for rendered statements.
    renderer
        Template renderer producing HTML.
    rasterizer
        Converter from HTML to PDF bytes.

    """

    data_source: StatementDataSource
    store: ObjectStore
    renderer: StatementRenderer
    rasterizer: PdfRasterizer


@dc.dataclass(frozen=True, slots=True)
class _Naming:
    """How the statements of one tenant pass are named and filtered."""

    revisioned: bool
    skip_empty: bool


_SCHEDULED_NAMING = _Naming(revisioned=False, skip_empty=False)
_ON_DEMAND_NAMING = _Naming(revisioned=True, skip_empty=True)


class StatementService:
    """Orchestrates statement generation for one execution unit.

    Everything inside a unit runs sequentially: one tenant, one worker and
    one artifact at a time. Failures are contained to the smallest unit
    they affect; only configuration errors and a failed registry read
    abort a run.

    """

    def __init__(
        self,
        dependencies: StatementServiceDependencies,
        *,
        assets: StatementAssets,
        tz: dt.tzinfo,
        event_logger: StatementEventLogger | None = None,
    ) -> None:
        """Configure the service.

        Parameters
        ----------
        dependencies
            Data source, object store, renderer and rasterizer.
        assets
            Template and logo loaded at start-up.
        tz
            Zone used to render clock times on statements.
        event_logger
            Optional structured event logger for run lifecycle events.

        """
        self._data_source = dependencies.data_source
        self._store = dependencies.store
        self._renderer = dependencies.renderer
        self._rasterizer = dependencies.rasterizer
        self._assets = assets
        self._tz = tz
        self._event_logger = event_logger
        self._namer = RevisionNamer(dependencies.store)
        self._state_updater = DispatchStateUpdater(
            dependencies.data_source, event_logger
        )

    def _log_to_event_logger(
        self,
        event_method_name: str,
        **kwargs: typ.Any,  # noqa: ANN401
    ) -> None:
        """Delegate to an event logger method if the logger is configured."""
        if self._event_logger is None:
            return
        method = getattr(self._event_logger, event_method_name)
        method(**kwargs)

    async def run_scheduled(self, today: dt.date, chunk: ChunkSpec) -> RunSummary:
        """Produce bulk statements for this unit's share of today's tenants.

        Parameters
        ----------
        today
            Date the cycle runs for; selects due tenants and labels the
            period.
        chunk
            Slice of the due-tenant list assigned to this unit.

        Returns
        -------
        RunSummary
            Per-worker outcomes, skipped tenants and dispatch marker writes.

        Raises
        ------
        DataFetchError
            If the tenant registry cannot be read.

        """
        tenants = await self._data_source.list_tenants()
        assigned = select_chunk(select_due_tenants(tenants, today), chunk)
        summary = RunSummary(mode=RunMode.SCHEDULED, today=today.isoformat())

        for tenant in assigned:
            await self._run_scheduled_tenant(tenant, today, summary)

        self._log_completed(summary)
        return summary

    async def _run_scheduled_tenant(
        self,
        tenant: TenantInfo,
        today: dt.date,
        summary: RunSummary,
    ) -> None:
        try:
            window = resolve_window(
                today,
                dispatch_day=tenant.dispatch_day,
                last_dispatched_day=tenant.last_dispatched_day,
            )
        except ValueError as exc:
            self._skip_tenant(summary, tenant, "invalid window", exc)
            return

        try:
            workers = await self._data_source.get_workers(tenant)
        except DataFetchError as exc:
            self._skip_tenant(summary, tenant, "workers unavailable", exc)
            return

        await self._produce_for_workers(
            tenant,
            workers,
            window,
            period_date=today,
            created_on=today,
            naming=_SCHEDULED_NAMING,
            summary=summary,
        )

        succeeded = await self._state_updater.commit(tenant, today.day)
        summary.state_updates.append(
            StateUpdate(tenant_slug=tenant.slug, day=today.day, succeeded=succeeded)
        )

    async def run_on_demand(  # noqa: PLR0913
        self,
        tenant_slug: str,
        worker_ids: cabc.Sequence[str],
        start: dt.date,
        end: dt.date,
        today: dt.date,
    ) -> RunSummary:
        """Produce revisioned statements for selected workers of one tenant.

        Parameters
        ----------
        tenant_slug
            Tenant to report on.
        worker_ids
            Workers to include; ids unknown to the tenant are logged and
            ignored.
        start, end
            Inclusive date range to cover. The period label is taken from
            ``start``.
        today
            Creation date printed on the statements.

        Raises
        ------
        ConfigurationError
            If the range is inverted, the slug is invalid or unknown, or
            none of ``worker_ids`` belongs to the tenant.
        DataFetchError
            If the tenant or its workers cannot be read.

        """
        if start > end:
            raise ConfigurationError.inverted_range(start, end)
        try:
            slug = validate_tenant_slug(tenant_slug)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        tenant = await self._data_source.get_tenant(slug)
        if tenant is None:
            raise ConfigurationError.unknown_tenant(slug)

        workers = await self._data_source.get_workers(tenant)
        selected = self._select_workers(tenant, workers, worker_ids)

        summary = RunSummary(mode=RunMode.ON_DEMAND, today=today.isoformat())
        await self._produce_for_workers(
            tenant,
            selected,
            StatementWindow(start=start, end=end),
            period_date=start,
            created_on=today,
            naming=_ON_DEMAND_NAMING,
            summary=summary,
        )
        self._log_completed(summary)
        return summary

    def _select_workers(
        self,
        tenant: TenantInfo,
        workers: cabc.Sequence[WorkerInfo],
        worker_ids: cabc.Sequence[str],
    ) -> list[WorkerInfo]:
        """Return the requested workers in request order, deduplicated."""
        by_id = {worker.id: worker for worker in workers}
        selected: list[WorkerInfo] = []
        seen: set[str] = set()
        for worker_id in worker_ids:
            if worker_id in seen:
                continue
            seen.add(worker_id)
            worker = by_id.get(worker_id)
            if worker is None:
                log_warning(
                    logger,
                    "Ignoring unknown worker id %s for tenant %s",
                    worker_id,
                    tenant.slug,
                )
                continue
            selected.append(worker)
        if not selected:
            raise ConfigurationError.no_matching_workers(tenant.slug)
        return selected

    async def _produce_for_workers(  # noqa: PLR0913
        self,
        tenant: TenantInfo,
        workers: cabc.Sequence[WorkerInfo],
        window: StatementWindow,
        *,
        period_date: dt.date,
        created_on: dt.date,
        naming: _Naming,
        summary: RunSummary,
    ) -> None:
        self._log_to_event_logger(
            "log_tenant_started",
            tenant_slug=tenant.slug,
            start=window.start,
            end=window.end,
            worker_count=len(workers),
        )
        for worker in workers:
            outcome = await self._produce_statement(
                tenant,
                worker,
                window,
                period_date=period_date,
                created_on=created_on,
                naming=naming,
            )
            summary.outcomes.append(outcome)

    async def _produce_statement(  # noqa: PLR0913
        self,
        tenant: TenantInfo,
        worker: WorkerInfo,
        window: StatementWindow,
        *,
        period_date: dt.date,
        created_on: dt.date,
        naming: _Naming,
    ) -> WorkerOutcome:
        """Render, name and upload one worker's statement."""
        try:
            entries = await self._data_source.get_time_entries(
                tenant, worker.id, window.start, window.end
            )
            if naming.skip_empty and not entries:
                return self._skip_worker(tenant, worker, NO_TIME_ENTRIES)

            document = StatementDocument(
                tenant=tenant,
                worker=worker,
                entries=entries,
                totals=accumulate(entries),
                period_date=period_date,
                created_on=created_on,
            )
            context = build_context(
                document, logo_data_uri=self._assets.logo_data_uri, tz=self._tz
            )
            pdf = await self._rasterizer.rasterize(self._renderer.render(context))
            name = await self._artifact_name(tenant, worker, period_date, naming)
            await self._store.upload(
                name,
                pdf,
                content_type=PDF_CONTENT_TYPE,
                upsert=not naming.revisioned,
            )
        except (DataFetchError, RenderError, RasterizeError, UploadError) as exc:
            return self._skip_worker(tenant, worker, _skip_reason(exc), exc)

        self._log_to_event_logger(
            "log_worker_uploaded",
            tenant_slug=tenant.slug,
            worker_id=worker.id,
            artifact_name=name,
        )
        return WorkerOutcome.uploaded(
            tenant_slug=tenant.slug, worker_id=worker.id, artifact_name=name
        )

    async def _artifact_name(
        self,
        tenant: TenantInfo,
        worker: WorkerInfo,
        period_date: dt.date,
        naming: _Naming,
    ) -> str:
        period = period_label(period_date)
        if naming.revisioned:
            return await self._namer.allocate(tenant.slug, worker.name, period)
        return bulk_name(tenant.slug, worker.name, period)

    def _skip_worker(
        self,
        tenant: TenantInfo,
        worker: WorkerInfo,
        reason: str,
        error: BaseException | None = None,
    ) -> WorkerOutcome:
        self._log_to_event_logger(
            "log_worker_skipped",
            tenant_slug=tenant.slug,
            worker_id=worker.id,
            reason=reason,
            error=error,
        )
        return WorkerOutcome.skipped(
            tenant_slug=tenant.slug, worker_id=worker.id, reason=reason, error=error
        )

    def _skip_tenant(
        self,
        summary: RunSummary,
        tenant: TenantInfo,
        reason: str,
        error: BaseException,
    ) -> None:
        self._log_to_event_logger(
            "log_tenant_skipped", tenant_slug=tenant.slug, reason=reason, error=error
        )
        summary.skipped_tenants.append(
            TenantSkip(
                tenant_slug=tenant.slug,
                reason=reason,
                error_type=type(error).__name__,
            )
        )

    def _log_completed(self, summary: RunSummary) -> None:
        self._log_to_event_logger(
            "log_run_completed",
            mode=summary.mode,
            uploaded=summary.uploaded_count,
            skipped=summary.skipped_count,
            skipped_tenants=len(summary.skipped_tenants),
        )


__all__ = ["StatementService", "StatementServiceDependencies"]
