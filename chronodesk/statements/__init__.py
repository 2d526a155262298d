"""Statement generation: windows, naming, chunking and the run driver.

Public API
----------
StatementService, StatementServiceDependencies
    Drive scheduled and on-demand runs.
build_statement_service
    Assemble a service from environment configuration.
resolve_window, StatementWindow
    Covered date range of a scheduled cycle.
RevisionNamer, next_revision, bulk_name
    Artifact naming.
ChunkSpec, select_chunk
    Disjoint execution shards.
parse_signed_interval, format_signed, accumulate
    Duration arithmetic.

The Dramatiq actors live in :mod:`chronodesk.statements.actor` and are not
imported here, so importing this package never touches broker state.
"""

from __future__ import annotations

from .chunking import ChunkSpec, select_chunk
from .config import DatabaseConfig, StatementAssets, StatementConfig, load_assets
from .dispatch_state import DispatchStateUpdater
from .factory import build_statement_service
from .intervals import IntervalTotals, accumulate, format_signed, parse_signed_interval
from .observability import StatementEventLogger, StatementEventType
from .outcomes import (
    NO_TIME_ENTRIES,
    OutcomeKind,
    RunMode,
    RunSummary,
    StateUpdate,
    TenantSkip,
    WorkerOutcome,
)
from .render import (
    JinjaStatementRenderer,
    PdfRasterizer,
    StatementRenderer,
    WeasyPrintRasterizer,
)
from .revisions import (
    RevisionNamer,
    bulk_name,
    next_revision,
    revision_prefix,
    revisioned_name,
)
from .selection import select_due_tenants
from .service import StatementService, StatementServiceDependencies
from .window import StatementWindow, resolve_window

__all__ = [
    "NO_TIME_ENTRIES",
    "ChunkSpec",
    "DatabaseConfig",
    "DispatchStateUpdater",
    "IntervalTotals",
    "JinjaStatementRenderer",
    "OutcomeKind",
    "PdfRasterizer",
    "RevisionNamer",
    "RunMode",
    "RunSummary",
    "StateUpdate",
    "StatementAssets",
    "StatementConfig",
    "StatementEventLogger",
    "StatementEventType",
    "StatementRenderer",
    "StatementService",
    "StatementServiceDependencies",
    "StatementWindow",
    "TenantSkip",
    "WeasyPrintRasterizer",
    "WorkerOutcome",
    "accumulate",
    "build_statement_service",
    "bulk_name",
    "format_signed",
    "load_assets",
    "next_revision",
    "parse_signed_interval",
    "resolve_window",
    "revision_prefix",
    "revisioned_name",
    "select_chunk",
    "select_due_tenants",
]
