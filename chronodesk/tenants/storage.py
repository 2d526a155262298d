"""Persistence models for tenants, their workers and time entries.

Models keep to portable SQLAlchemy types so the same code works with SQLite
in tests and PostgreSQL in production. Every row below the tenant carries a
``tenant_id`` so one tenant's data is never read under another's scope.
"""

from __future__ import annotations

import datetime as dt
import enum
import typing as typ
import uuid

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

from chronodesk.common.time import utcnow

if typ.TYPE_CHECKING:
    from sqlalchemy.engine import Dialect
    from sqlalchemy.ext.asyncio import AsyncEngine


class TenantStatus(enum.StrEnum):
    """Lifecycle state of a tenant account."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Base(DeclarativeBase):
    """Base declarative class for tenant persistence."""


class UTCDateTime(TypeDecorator[dt.datetime]):
    """DateTime wrapper that round-trips UTC tzinfo even on SQLite."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(
        self, value: dt.datetime | None, dialect: Dialect
    ) -> dt.datetime | None:
        """Force bound datetime values to UTC with tzinfo."""
        if value is None:
            return None
        if value.tzinfo is None:
            msg = "time entry timestamps must be timezone-aware"
            raise ValueError(msg)
        return value.astimezone(dt.UTC)

    def process_result_value(
        self, value: dt.datetime | None, dialect: Dialect
    ) -> dt.datetime | None:
        """Ensure result datetimes are UTC and timezone aware."""
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=dt.UTC)
        return value.astimezone(dt.UTC)


class Tenant(Base):
    """Customer company whose workers receive monthly statements."""

    __tablename__ = "tenants"
    __table_args__ = (
        UniqueConstraint("slug", name="uq_tenants_slug"),
        CheckConstraint(
            "dispatch_day BETWEEN 1 AND 31", name="ck_tenants_dispatch_day"
        ),
        CheckConstraint(
            "last_dispatched_day IS NULL OR last_dispatched_day BETWEEN 1 AND 31",
            name="ck_tenants_last_dispatched_day",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    slug: Mapped[str] = mapped_column(String(64))
    display_name: Mapped[str] = mapped_column(String(255))
    contact_email: Mapped[str | None] = mapped_column(String(320), default=None)
    dispatch_day: Mapped[int] = mapped_column(Integer)
    last_dispatched_day: Mapped[int | None] = mapped_column(Integer, default=None)
    status: Mapped[str] = mapped_column(String(16), default=TenantStatus.ACTIVE.value)
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime(), default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(
        UTCDateTime(), default=utcnow, onupdate=utcnow
    )

    workers: Mapped[list[Worker]] = relationship(
        back_populates="tenant", cascade="all, delete-orphan"
    )


class Worker(Base):
    """Employee of a tenant."""

    __tablename__ = "workers"
    __table_args__ = (Index("ix_workers_tenant", "tenant_id"),)

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    tenant_id: Mapped[str] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255))
    id_number: Mapped[str | None] = mapped_column(String(64), default=None)
    vacation_balance: Mapped[float | None] = mapped_column(Float, default=None)

    tenant: Mapped[Tenant] = relationship(back_populates="workers")
    time_entries: Mapped[list[TimeEntry]] = relationship(
        back_populates="worker", cascade="all, delete-orphan"
    )


class TimeEntry(Base):
    """One tracked working day of a worker.

    Durations are stored as interval text (``[-]H:M:S``) exactly as the time
    tracking front end records them; parsing happens in the statement
    pipeline.
    """

    __tablename__ = "time_entries"
    __table_args__ = (
        Index("ix_time_entries_scope_date", "tenant_id", "worker_id", "entry_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tenant_id: Mapped[str] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    worker_id: Mapped[str] = mapped_column(
        ForeignKey("workers.id", ondelete="CASCADE"), nullable=False
    )
    entry_date: Mapped[dt.date] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(64))
    started_at: Mapped[dt.datetime | None] = mapped_column(UTCDateTime(), default=None)
    ended_at: Mapped[dt.datetime | None] = mapped_column(UTCDateTime(), default=None)
    net_duration: Mapped[str | None] = mapped_column(String(32), default=None)
    overtime_duration: Mapped[str | None] = mapped_column(String(32), default=None)
    break_duration: Mapped[str | None] = mapped_column(String(32), default=None)

    worker: Mapped[Worker] = relationship(back_populates="time_entries")


async def init_tenant_storage(engine: AsyncEngine) -> None:
    """Create all tenant tables if they are absent."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
