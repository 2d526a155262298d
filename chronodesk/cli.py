"""Command-line entry point for statement runs and dispatch reminders.

Subcommands
-----------
``on-demand TENANT WORKER_IDS START END``
    Revisioned statements for selected workers over an explicit range.
``scheduled [--chunk-size N] [--chunk-index I] [--today DATE]``
    Bulk statements for this unit's chunk of today's due tenants.
``remind [--today DATE]``
    Reminder emails to tenants whose dispatch day is today.

Every subcommand accepts ``--summary-out PATH`` to write its summary as
JSON. The exit code is 0 when the run completed, even if some workers were
skipped, and 1 on configuration errors or unexpected failures.
"""

from __future__ import annotations

import argparse
import asyncio
import datetime as dt
import os
import typing as typ
from pathlib import Path

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from chronodesk.common.closing import aclose_if_supported
from chronodesk.common.time import load_timezone, local_today
from chronodesk.errors import ConfigurationError
from chronodesk.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_exception,
    log_info,
    log_warning,
)
from chronodesk.notify.config import EmailConfig
from chronodesk.notify.reminders import ReminderService
from chronodesk.notify.transport import create_email_transport
from chronodesk.statements.chunking import ChunkSpec
from chronodesk.statements.config import DatabaseConfig, StatementConfig
from chronodesk.statements.factory import build_statement_service
from chronodesk.storage.factory import create_object_store
from chronodesk.tenants.service import SqlStatementDataSource

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from chronodesk.notify.reminders import ReminderSummary
    from chronodesk.statements.outcomes import RunSummary

type SessionFactory = async_sessionmaker[AsyncSession]

logger = get_logger(__name__)


def _iso_date(value: str) -> dt.date:
    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        msg = f"expected an ISO date (YYYY-MM-DD), got {value!r}"
        raise argparse.ArgumentTypeError(msg) from exc


def _worker_ids(value: str) -> list[str]:
    ids = [part.strip() for part in value.split(",") if part.strip()]
    if not ids:
        msg = "expected at least one comma-separated worker id"
        raise argparse.ArgumentTypeError(msg)
    return ids


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the ``chronodesk`` command."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--summary-out",
        type=Path,
        default=None,
        help="Optional path to write the run summary as JSON",
    )
    common.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy URL of the tenant database "
        "(default: CHRONODESK_DATABASE_URL)",
    )

    parser = argparse.ArgumentParser(prog="chronodesk", description=__doc__)
    subparsers = parser.add_subparsers(dest="command", required=True)

    on_demand = subparsers.add_parser(
        "on-demand", parents=[common], help="Revisioned statements for chosen workers"
    )
    on_demand.add_argument("tenant", help="Tenant slug")
    on_demand.add_argument(
        "worker_ids", type=_worker_ids, help="Comma-separated worker ids"
    )
    on_demand.add_argument("start", type=_iso_date, help="First covered day")
    on_demand.add_argument("end", type=_iso_date, help="Last covered day")

    scheduled = subparsers.add_parser(
        "scheduled", parents=[common], help="Bulk statements for due tenants"
    )
    scheduled.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Tenants per chunk (default: CHRONODESK_CHUNK_SIZE or unbounded)",
    )
    scheduled.add_argument(
        "--chunk-index",
        type=int,
        default=None,
        help="Zero-based chunk index (default: CHRONODESK_CHUNK_INDEX or 0)",
    )
    scheduled.add_argument(
        "--today", type=_iso_date, default=None, help="Override the run date"
    )

    remind = subparsers.add_parser(
        "remind", parents=[common], help="Email dispatch-day reminders"
    )
    remind.add_argument(
        "--today", type=_iso_date, default=None, help="Override the run date"
    )
    return parser


async def _with_session_factory[T](
    database_url: str,
    async_fn: typ.Callable[[SessionFactory], typ.Awaitable[T]],
) -> T:
    engine = create_async_engine(database_url)
    try:
        return await async_fn(async_sessionmaker(engine, expire_on_commit=False))
    finally:
        await engine.dispose()


async def _execute(
    args: argparse.Namespace,
    database_url: str,
    config: StatementConfig,
) -> RunSummary | ReminderSummary:
    today: dt.date = getattr(args, "today", None) or local_today(
        load_timezone(config.timezone)
    )

    if args.command == "remind":
        return await _remind(database_url, today)

    chunk = (
        ChunkSpec.from_env(size=args.chunk_size, index=args.chunk_index)
        if args.command == "scheduled"
        else None
    )
    store = create_object_store()

    async def run(session_factory: SessionFactory) -> RunSummary:
        service = build_statement_service(session_factory, config=config, store=store)
        if chunk is not None:
            return await service.run_scheduled(today, chunk)
        return await service.run_on_demand(
            args.tenant, args.worker_ids, args.start, args.end, today
        )

    try:
        return await _with_session_factory(database_url, run)
    finally:
        await aclose_if_supported(store)


async def _remind(database_url: str, today: dt.date) -> ReminderSummary:
    transport = create_email_transport(EmailConfig.from_env())

    async def remind(session_factory: SessionFactory) -> ReminderSummary:
        service = ReminderService(SqlStatementDataSource(session_factory), transport)
        return await service.send_reminders(today)

    try:
        return await _with_session_factory(database_url, remind)
    finally:
        await aclose_if_supported(transport)


def _configure_logging_from_env() -> None:
    raw_level = os.environ.get("CHRONODESK_LOG_LEVEL", "INFO")
    normalized, invalid = configure_logging(raw_level)
    if invalid:
        log_warning(
            logger,
            "Invalid CHRONODESK_LOG_LEVEL %r, falling back to %s",
            raw_level,
            normalized,
        )


def main(argv: list[str] | None = None) -> int:
    """Run one ``chronodesk`` subcommand.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 when the run completed, 1 on configuration errors or
        unexpected failures.

    """
    args = build_parser().parse_args(argv)
    _configure_logging_from_env()

    try:
        database_url = args.database_url or DatabaseConfig.from_env().url
        config = StatementConfig.from_env()
        summary = asyncio.run(_execute(args, database_url, config))
        if args.summary_out is not None:
            args.summary_out.write_bytes(summary.to_json())
    except ConfigurationError as exc:
        log_error(logger, "Configuration error: %s", exc)
        return 1
    except Exception as exc:  # noqa: BLE001 - every failure maps to exit code 1
        log_exception(logger, f"chronodesk {args.command} failed: {exc}", exc)
        return 1

    log_info(logger, "chronodesk %s completed", args.command)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
