"""Dramatiq actors for queued statement runs.

Each scheduled unit is one message; fanning a day's run out over several
workers means enqueuing one message per chunk index with the same chunk
size.

Usage
-----
>>> for index in range(4):
...     generate_scheduled_statements_job.send(
...         database_url="postgresql+asyncpg://...",
...         chunk_size=25,
...         chunk_index=index,
...     )
>>> send_dispatch_reminders_job.send(database_url="postgresql+asyncpg://...")

The actors bind to the broker named by ``CHRONODESK_BROKER_URL`` when this
module is imported: ``redis://`` and ``amqp://`` URLs select the Redis and
RabbitMQ brokers, ``stub://`` an in-process StubBroker for local runs and
tests.

"""

from __future__ import annotations

import asyncio
import datetime as dt
import os
import typing as typ
from urllib.parse import urlsplit

import dramatiq
import msgspec
from dramatiq.brokers.stub import StubBroker
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from chronodesk.common.closing import aclose_if_supported
from chronodesk.common.time import load_timezone, local_today
from chronodesk.errors import ConfigurationError
from chronodesk.notify.config import EmailConfig
from chronodesk.notify.reminders import ReminderService
from chronodesk.notify.transport import create_email_transport
from chronodesk.statements.chunking import ChunkSpec
from chronodesk.statements.config import StatementConfig
from chronodesk.statements.factory import build_statement_service
from chronodesk.storage.factory import create_object_store
from chronodesk.tenants.service import SqlStatementDataSource

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

type SessionFactory = async_sessionmaker[AsyncSession]

BROKER_URL_ENV = "CHRONODESK_BROKER_URL"


def build_broker(url: str | None) -> dramatiq.Broker:
    """Return the Dramatiq broker addressed by ``url``.

    Raises
    ------
    ConfigurationError
        If ``url`` is unset or uses a scheme no broker understands.

    """
    if not url:
        raise ConfigurationError.missing_env(BROKER_URL_ENV)
    scheme = urlsplit(url).scheme.lower()
    if scheme == "stub":
        return StubBroker()
    if scheme in {"redis", "rediss"}:
        from dramatiq.brokers.redis import RedisBroker

        return RedisBroker(url=url)
    if scheme in {"amqp", "amqps"}:
        from dramatiq.brokers.rabbitmq import RabbitmqBroker

        return RabbitmqBroker(url=url)
    raise ConfigurationError.invalid_env(
        BROKER_URL_ENV, url, "a redis://, amqp:// or stub:// URL"
    )


# dramatiq.actor binds to the global broker at decoration time.
dramatiq.set_broker(build_broker(os.environ.get(BROKER_URL_ENV)))


def _parse_today_iso(today_iso: str | None, config: StatementConfig) -> dt.date:
    """Parse ``today_iso`` or fall back to today in the configured zone.

    Raises
    ------
    ValueError
        If ``today_iso`` is not an ISO ``YYYY-MM-DD`` date.

    """
    if today_iso is None:
        return local_today(load_timezone(config.timezone))
    return dt.date.fromisoformat(today_iso)


async def _with_session_factory[T](
    database_url: str,
    async_fn: typ.Callable[[SessionFactory], typ.Awaitable[T]],
) -> T:
    """Run ``async_fn`` with a session factory whose engine is disposed after."""
    engine = create_async_engine(database_url)
    try:
        return await async_fn(async_sessionmaker(engine, expire_on_commit=False))
    finally:
        await engine.dispose()


async def _run_scheduled_async(
    database_url: str,
    chunk: ChunkSpec,
    today: dt.date,
    config: StatementConfig,
) -> dict[str, typ.Any]:
    store = create_object_store()

    async def execute(session_factory: SessionFactory) -> dict[str, typ.Any]:
        service = build_statement_service(session_factory, config=config, store=store)
        summary = await service.run_scheduled(today, chunk)
        return msgspec.to_builtins(summary)

    try:
        return await _with_session_factory(database_url, execute)
    finally:
        await aclose_if_supported(store)


async def _send_reminders_async(
    database_url: str,
    today: dt.date,
) -> dict[str, typ.Any]:
    transport = create_email_transport(EmailConfig.from_env())

    async def execute(session_factory: SessionFactory) -> dict[str, typ.Any]:
        service = ReminderService(SqlStatementDataSource(session_factory), transport)
        summary = await service.send_reminders(today)
        return msgspec.to_builtins(summary)

    try:
        return await _with_session_factory(database_url, execute)
    finally:
        await aclose_if_supported(transport)


@dramatiq.actor
def generate_scheduled_statements_job(
    database_url: str,
    chunk_size: int | None = None,
    chunk_index: int | None = None,
    today_iso: str | None = None,
) -> dict[str, typ.Any]:
    """Dramatiq actor producing bulk statements for one chunk.

    Parameters
    ----------
    database_url
        SQLAlchemy URL of the tenant database.
    chunk_size
        Tenants per chunk; falls back to ``CHRONODESK_CHUNK_SIZE``.
    chunk_index
        Zero-based chunk index; falls back to ``CHRONODESK_CHUNK_INDEX``.
    today_iso
        Optional ``YYYY-MM-DD`` run date; defaults to today in the
        configured timezone.

    Returns
    -------
    dict[str, Any]
        The run summary as JSON-compatible builtins.

    Raises
    ------
    ConfigurationError
        If chunk, template, storage or timezone settings are invalid.
    DataFetchError
        If the tenant registry cannot be read.

    """
    config = StatementConfig.from_env()
    chunk = ChunkSpec.from_env(size=chunk_size, index=chunk_index)
    today = _parse_today_iso(today_iso, config)
    return asyncio.run(_run_scheduled_async(database_url, chunk, today, config))


@dramatiq.actor
def send_dispatch_reminders_job(
    database_url: str,
    today_iso: str | None = None,
) -> dict[str, typ.Any]:
    """Dramatiq actor emailing dispatch-day reminders.

    Parameters
    ----------
    database_url
        SQLAlchemy URL of the tenant database.
    today_iso
        Optional ``YYYY-MM-DD`` run date; defaults to today in the
        configured timezone.

    Returns
    -------
    dict[str, Any]
        The reminder summary as JSON-compatible builtins.

    """
    config = StatementConfig.from_env()
    today = _parse_today_iso(today_iso, config)
    return asyncio.run(_send_reminders_async(database_url, today))


__all__ = [
    "BROKER_URL_ENV",
    "build_broker",
    "generate_scheduled_statements_job",
    "send_dispatch_reminders_job",
]
