"""Tenant registry, workers and time entries.

Public API
----------
SqlStatementDataSource
    SQLAlchemy adapter for the ``StatementDataSource`` protocol.
StatementDataSource
    Protocol (port) the statement pipeline reads through.
TenantInfo, WorkerInfo, TimeEntryInfo
    Immutable read models.
Tenant, Worker, TimeEntry
    ORM models.
init_tenant_storage
    Create the tenant tables.
"""

from __future__ import annotations

from .models import TenantInfo, TimeEntryInfo, WorkerInfo
from .protocol import StatementDataSource
from .service import SqlStatementDataSource
from .storage import (
    Base,
    Tenant,
    TenantStatus,
    TimeEntry,
    Worker,
    init_tenant_storage,
)

__all__ = [
    "Base",
    "SqlStatementDataSource",
    "StatementDataSource",
    "Tenant",
    "TenantInfo",
    "TenantStatus",
    "TimeEntry",
    "TimeEntryInfo",
    "Worker",
    "WorkerInfo",
    "init_tenant_storage",
]
