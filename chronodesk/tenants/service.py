"""SQLAlchemy-backed data source for the statement pipeline.

The data source is the only component that touches the tenant database.
Query failures are translated into the pipeline's error taxonomy so the
driver can decide which unit of work to skip.
"""

from __future__ import annotations

import typing as typ

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from chronodesk.common.time import utcnow
from chronodesk.errors import DataFetchError, StateUpdateError
from chronodesk.tenants.models import TenantInfo, TimeEntryInfo, WorkerInfo
from chronodesk.tenants.storage import Tenant, TimeEntry, Worker

if typ.TYPE_CHECKING:
    import datetime as dt

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

type SessionFactory = async_sessionmaker[AsyncSession]


def _to_tenant_info(tenant: Tenant) -> TenantInfo:
    return TenantInfo(
        id=tenant.id,
        slug=tenant.slug,
        display_name=tenant.display_name,
        contact_email=tenant.contact_email,
        dispatch_day=tenant.dispatch_day,
        last_dispatched_day=tenant.last_dispatched_day,
        status=tenant.status,
    )


class SqlStatementDataSource:
    """Read tenants, workers and time entries from a relational database.

    Parameters
    ----------
    session_factory:
        Async session factory bound to the tenant database.

    """

    def __init__(self, session_factory: SessionFactory) -> None:
        """Configure the data source with a session factory."""
        self._session_factory = session_factory

    async def list_tenants(self) -> list[TenantInfo]:
        """Return every tenant ordered by slug.

        The slug order is what lets co-running chunk workers agree on the
        same due-tenant sequence.
        """
        try:
            async with self._session_factory() as session:
                tenants = await session.scalars(select(Tenant).order_by(Tenant.slug))
                return [_to_tenant_info(tenant) for tenant in tenants]
        except SQLAlchemyError as exc:
            raise DataFetchError("list_tenants", str(exc)) from exc

    async def get_tenant(self, slug: str) -> TenantInfo | None:
        """Return the tenant registered under ``slug``, or ``None``."""
        try:
            async with self._session_factory() as session:
                tenant = await session.scalar(select(Tenant).where(Tenant.slug == slug))
        except SQLAlchemyError as exc:
            raise DataFetchError("get_tenant", str(exc)) from exc
        return None if tenant is None else _to_tenant_info(tenant)

    async def get_workers(self, tenant: TenantInfo) -> list[WorkerInfo]:
        """Return the tenant's workers ordered by name, then id."""
        stmt = (
            select(Worker)
            .where(Worker.tenant_id == tenant.id)
            .order_by(Worker.name, Worker.id)
        )
        try:
            async with self._session_factory() as session:
                workers = await session.scalars(stmt)
                return [
                    WorkerInfo(
                        id=worker.id,
                        name=worker.name,
                        id_number=worker.id_number,
                        vacation_balance=worker.vacation_balance,
                    )
                    for worker in workers
                ]
        except SQLAlchemyError as exc:
            raise DataFetchError("get_workers", str(exc)) from exc

    async def get_time_entries(
        self,
        tenant: TenantInfo,
        worker_id: str,
        start_date: dt.date,
        end_date: dt.date,
    ) -> list[TimeEntryInfo]:
        """Return the worker's entries within the inclusive date range."""
        stmt = (
            select(TimeEntry)
            .where(
                TimeEntry.tenant_id == tenant.id,
                TimeEntry.worker_id == worker_id,
                TimeEntry.entry_date >= start_date,
                TimeEntry.entry_date <= end_date,
            )
            .order_by(TimeEntry.entry_date, TimeEntry.id)
        )
        try:
            async with self._session_factory() as session:
                entries = await session.scalars(stmt)
                return [
                    TimeEntryInfo(
                        entry_date=entry.entry_date,
                        status=entry.status,
                        started_at=entry.started_at,
                        ended_at=entry.ended_at,
                        net_duration=entry.net_duration,
                        overtime_duration=entry.overtime_duration,
                        break_duration=entry.break_duration,
                    )
                    for entry in entries
                ]
        except SQLAlchemyError as exc:
            raise DataFetchError("get_time_entries", str(exc)) from exc

    async def set_last_dispatched(self, tenant_id: str, day: int) -> None:
        """Write ``day`` as the tenant's dispatch marker.

        Rows already holding ``day`` are left untouched, ``updated_at``
        included, so repeating the call changes nothing.

        Raises
        ------
        StateUpdateError
            If the tenant does not exist or the write fails.

        """
        stmt = (
            update(Tenant)
            .where(
                Tenant.id == tenant_id,
                Tenant.last_dispatched_day.is_distinct_from(day),
            )
            .values(last_dispatched_day=day, updated_at=utcnow())
        )
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(stmt)
                found = result.rowcount > 0
                if not found:
                    existing = await session.scalar(
                        select(Tenant.id).where(Tenant.id == tenant_id)
                    )
                    found = existing is not None
        except SQLAlchemyError as exc:
            raise StateUpdateError(tenant_id, str(exc)) from exc
        if not found:
            raise StateUpdateError(tenant_id, "tenant not found")
