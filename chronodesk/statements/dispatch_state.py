"""Persist the per-tenant dispatch marker after a scheduled cycle."""

from __future__ import annotations

import typing as typ

from chronodesk.errors import StateUpdateError

if typ.TYPE_CHECKING:
    from chronodesk.statements.observability import StatementEventLogger
    from chronodesk.tenants.models import TenantInfo
    from chronodesk.tenants.protocol import StatementDataSource


class DispatchStateUpdater:
    """Write ``last_dispatched_day`` for tenants whose cycle ran.

    A failed write is logged and reported, never raised: statements that
    were already uploaded stay where they are, and the next cycle simply
    covers a longer window.
    """

    def __init__(
        self,
        data_source: StatementDataSource,
        event_logger: StatementEventLogger | None = None,
    ) -> None:
        """Configure the updater with its data source and optional event logger."""
        self._data_source = data_source
        self._event_logger = event_logger

    async def commit(self, tenant: TenantInfo, day: int) -> bool:
        """Persist ``day`` as the tenant's last dispatched day.

        Returns
        -------
        bool
            ``True`` when the marker was written, ``False`` when the data
            source raised :class:`StateUpdateError`.

        """
        try:
            await self._data_source.set_last_dispatched(tenant.id, day)
        except StateUpdateError as exc:
            if self._event_logger is not None:
                self._event_logger.log_state_failed(
                    tenant_slug=tenant.slug, day=day, error=exc
                )
            return False
        if self._event_logger is not None:
            self._event_logger.log_state_updated(tenant_slug=tenant.slug, day=day)
        return True


__all__ = ["DispatchStateUpdater"]
