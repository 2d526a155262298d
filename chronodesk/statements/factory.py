"""Factory for building a StatementService from environment configuration.

Usage
-----
Build a service for the CLI or a queue worker::

    from chronodesk.statements.factory import build_statement_service

    service = build_statement_service(session_factory)

"""

from __future__ import annotations

import typing as typ

from chronodesk.common.time import load_timezone
from chronodesk.statements.config import StatementConfig, load_assets
from chronodesk.statements.observability import StatementEventLogger
from chronodesk.statements.render import JinjaStatementRenderer, WeasyPrintRasterizer
from chronodesk.statements.service import (
    StatementService,
    StatementServiceDependencies,
)
from chronodesk.storage.factory import create_object_store
from chronodesk.tenants.service import SqlStatementDataSource

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from chronodesk.statements.render import PdfRasterizer
    from chronodesk.storage.protocol import ObjectStore

__all__ = ["build_statement_service"]


def build_statement_service(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    config: StatementConfig | None = None,
    store: ObjectStore | None = None,
    rasterizer: PdfRasterizer | None = None,
) -> StatementService:
    """Build a ``StatementService`` from environment configuration.

    Loads the template and logo once, compiles the template, and wires the
    SQL data source, the configured object store and the WeasyPrint
    rasterizer into a service with structured event logging.

    Parameters
    ----------
    session_factory
        Async session factory bound to the tenant database.
    config
        Statement configuration; read from the environment when omitted.
    store
        Object store override; built from ``StorageConfig.from_env()``
        when omitted.
    rasterizer
        PDF rasterizer override; WeasyPrint when omitted.

    Raises
    ------
    ConfigurationError
        If the template, logo, timezone or storage settings are invalid.

    """
    resolved = config or StatementConfig.from_env()
    assets = load_assets(resolved)
    dependencies = StatementServiceDependencies(
        data_source=SqlStatementDataSource(session_factory),
        store=store or create_object_store(),
        renderer=JinjaStatementRenderer(assets.template_source),
        rasterizer=rasterizer or WeasyPrintRasterizer(),
    )
    return StatementService(
        dependencies,
        assets=assets,
        tz=load_timezone(resolved.timezone),
        event_logger=StatementEventLogger(),
    )
