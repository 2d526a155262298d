"""Unit tests for the SQLAlchemy statement data source."""

from __future__ import annotations

import asyncio
import datetime as dt
import typing as typ

import pytest
from sqlalchemy import select

from chronodesk.errors import DataFetchError, StateUpdateError
from chronodesk.tenants import SqlStatementDataSource, StatementDataSource, Tenant
from tests.helpers.seed import SeedWorker, seed_tenant

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

type SessionFactory = async_sessionmaker[AsyncSession]


@pytest.mark.asyncio
async def test_satisfies_protocol(session_factory: SessionFactory) -> None:
    """The adapter implements the data source port."""
    assert isinstance(SqlStatementDataSource(session_factory), StatementDataSource)


@pytest.mark.asyncio
async def test_list_tenants_is_ordered_by_slug(
    session_factory: SessionFactory,
) -> None:
    """Registry order is stable so chunk workers agree on it."""
    for slug in ("zeta", "alpha", "mid"):
        await seed_tenant(session_factory, slug)

    tenants = await SqlStatementDataSource(session_factory).list_tenants()

    assert [tenant.slug for tenant in tenants] == ["alpha", "mid", "zeta"]
    assert tenants[0].display_name == "Alpha GmbH"
    assert tenants[0].is_active


@pytest.mark.asyncio
async def test_get_tenant(session_factory: SessionFactory) -> None:
    """Tenants are looked up by slug."""
    await seed_tenant(session_factory, "acme", dispatch_day=5, last_dispatched_day=5)
    data_source = SqlStatementDataSource(session_factory)

    tenant = await data_source.get_tenant("acme")

    assert tenant is not None
    assert (tenant.dispatch_day, tenant.last_dispatched_day) == (5, 5)
    assert await data_source.get_tenant("nobody") is None


@pytest.mark.asyncio
async def test_get_workers_is_scoped_and_ordered(
    session_factory: SessionFactory,
) -> None:
    """Only the tenant's own workers are returned, ordered by name."""
    await seed_tenant(
        session_factory,
        "acme",
        workers=[
            SeedWorker(id="w-2", name="Zoe", vacation_balance=3.5),
            SeedWorker(id="w-1", name="Anna", id_number="P-1"),
        ],
    )
    await seed_tenant(
        session_factory, "bau", workers=[SeedWorker(id="w-3", name="Bert")]
    )
    data_source = SqlStatementDataSource(session_factory)
    tenant = await data_source.get_tenant("acme")
    assert tenant is not None

    workers = await data_source.get_workers(tenant)

    assert [(w.id, w.name) for w in workers] == [("w-1", "Anna"), ("w-2", "Zoe")]
    assert workers[0].id_number == "P-1"
    assert workers[1].vacation_balance == pytest.approx(3.5)


@pytest.mark.asyncio
async def test_get_time_entries_filters_range_and_tenant(
    session_factory: SessionFactory,
) -> None:
    """Entries are limited to the inclusive range and the tenant's scope."""
    days = tuple(dt.date(2024, 3, day) for day in (1, 10, 19, 20))
    await seed_tenant(
        session_factory,
        "acme",
        workers=[SeedWorker(id="w-1", name="Anna", entry_days=days)],
    )
    await seed_tenant(session_factory, "bau")
    data_source = SqlStatementDataSource(session_factory)
    acme = await data_source.get_tenant("acme")
    bau = await data_source.get_tenant("bau")
    assert acme is not None
    assert bau is not None

    entries = await data_source.get_time_entries(
        acme, "w-1", dt.date(2024, 3, 1), dt.date(2024, 3, 19)
    )
    foreign = await data_source.get_time_entries(
        bau, "w-1", dt.date(2024, 3, 1), dt.date(2024, 3, 19)
    )

    assert [entry.entry_date for entry in entries] == list(days[:3])
    assert entries[0].net_duration == "08:00:00"
    assert entries[0].started_at == dt.datetime(2024, 3, 1, 7, 0, tzinfo=dt.UTC)
    assert foreign == []


@pytest.mark.asyncio
async def test_set_last_dispatched_is_idempotent(
    session_factory: SessionFactory,
) -> None:
    """Writing the same marker twice leaves the row as one write left it."""
    tenant_id = await seed_tenant(session_factory, "acme")
    data_source = SqlStatementDataSource(session_factory)

    async def read_row() -> tuple[int | None, dt.datetime]:
        async with session_factory() as session:
            row = (
                await session.execute(
                    select(Tenant.last_dispatched_day, Tenant.updated_at).where(
                        Tenant.id == tenant_id
                    )
                )
            ).one()
        return row.last_dispatched_day, row.updated_at

    await data_source.set_last_dispatched(tenant_id, 20)
    after_first = await read_row()
    await asyncio.sleep(0.01)
    await data_source.set_last_dispatched(tenant_id, 20)

    assert after_first[0] == 20
    assert await read_row() == after_first


@pytest.mark.asyncio
async def test_set_last_dispatched_changes_marker(
    session_factory: SessionFactory,
) -> None:
    """A different day overwrites the previous marker."""
    tenant_id = await seed_tenant(session_factory, "acme", last_dispatched_day=20)
    data_source = SqlStatementDataSource(session_factory)

    await data_source.set_last_dispatched(tenant_id, 31)

    async with session_factory() as session:
        stored = await session.scalar(
            select(Tenant.last_dispatched_day).where(Tenant.id == tenant_id)
        )
    assert stored == 31


@pytest.mark.asyncio
async def test_set_last_dispatched_unknown_tenant(
    session_factory: SessionFactory,
) -> None:
    """Markers for missing tenants are reported as state errors."""
    with pytest.raises(StateUpdateError, match="tenant not found"):
        await SqlStatementDataSource(session_factory).set_last_dispatched("nope", 1)


@pytest.mark.asyncio
async def test_database_errors_become_data_fetch_errors(
    session_factory: SessionFactory,
) -> None:
    """A broken database surfaces as DataFetchError."""
    async with session_factory() as session, session.begin():
        await session.run_sync(
            lambda sync_session: Tenant.__table__.drop(sync_session.connection())
        )

    with pytest.raises(DataFetchError, match="list_tenants"):
        await SqlStatementDataSource(session_factory).list_tenants()
