"""StatementDataSource protocol for tenant-scoped reads and dispatch writes."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt

    from chronodesk.tenants.models import TenantInfo, TimeEntryInfo, WorkerInfo


@typ.runtime_checkable
class StatementDataSource(typ.Protocol):
    """Port through which the pipeline reads tenants, workers and time entries.

    Implementations raise :class:`chronodesk.errors.DataFetchError` for read
    failures and :class:`chronodesk.errors.StateUpdateError` when the
    dispatch marker cannot be written.

    """

    async def list_tenants(self) -> list[TenantInfo]:
        """Return the full tenant registry in a stable, reproducible order."""
        ...

    async def get_tenant(self, slug: str) -> TenantInfo | None:
        """Return the tenant registered under ``slug``, if any."""
        ...

    async def get_workers(self, tenant: TenantInfo) -> list[WorkerInfo]:
        """Return the tenant's workers in a stable order."""
        ...

    async def get_time_entries(
        self,
        tenant: TenantInfo,
        worker_id: str,
        start_date: dt.date,
        end_date: dt.date,
    ) -> list[TimeEntryInfo]:
        """Return the worker's entries within ``[start_date, end_date]``.

        Entries are ordered ascending by date.
        """
        ...

    async def set_last_dispatched(self, tenant_id: str, day: int) -> None:
        """Persist ``day`` as the tenant's last dispatched day-of-month.

        Writing the same value twice must leave the same persisted state as
        writing it once.
        """
        ...
