"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import datetime as dt
import os
import typing as typ

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from chronodesk.statements.config import DEFAULT_TEMPLATE_PATH, StatementAssets
from chronodesk.tenants import init_tenant_storage

if typ.TYPE_CHECKING:
    from pathlib import Path

# The actor module binds to its broker on import, before any fixture runs.
os.environ.setdefault("CHRONODESK_BROKER_URL", "stub://")

_CHRONODESK_ENV_VARS = (
    "CHRONODESK_DATABASE_URL",
    "CHRONODESK_LOG_LEVEL",
    "CHRONODESK_TIMEZONE",
    "CHRONODESK_TEMPLATE_PATH",
    "CHRONODESK_LOGO_PATH",
    "CHRONODESK_CHUNK_SIZE",
    "CHRONODESK_CHUNK_INDEX",
    "CHRONODESK_STORAGE_BACKEND",
    "CHRONODESK_STORAGE_PATH",
    "CHRONODESK_STORAGE_URL",
    "CHRONODESK_STORAGE_KEY",
    "CHRONODESK_STORAGE_BUCKET",
    "CHRONODESK_SENDGRID_API_KEY",
    "CHRONODESK_MAIL_FROM",
)


@pytest.fixture(autouse=True)
def _clean_chronodesk_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of every test."""
    for name in _CHRONODESK_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest_asyncio.fixture
async def session_factory(
    tmp_path: Path,
) -> typ.AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Yield a fresh async session factory backed by sqlite."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'chronodesk.db'}")
    await init_tenant_storage(engine)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    try:
        yield factory
    finally:
        await engine.dispose()


@pytest.fixture
def berlin() -> dt.tzinfo:
    """Return the default statement timezone."""
    from zoneinfo import ZoneInfo

    return ZoneInfo("Europe/Berlin")


@pytest.fixture
def default_assets() -> StatementAssets:
    """Return the packaged template without a logo."""
    return StatementAssets(
        template_source=DEFAULT_TEMPLATE_PATH.read_text(encoding="utf-8")
    )
