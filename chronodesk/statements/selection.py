"""Select the tenants whose dispatch day is today."""

from __future__ import annotations

import typing as typ

from chronodesk.common.calendar import clamp_day_to_month

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from chronodesk.tenants.models import TenantInfo


def is_due(tenant: TenantInfo, today: dt.date) -> bool:
    """Return whether ``tenant`` is dispatched on ``today``.

    A ``dispatch_day`` the current month does not have is clamped to the
    month's last day, the same policy the window resolver applies, so a
    tenant dispatched on the 31st runs on April 30th and every month gets
    exactly one cycle.

    Examples
    --------
    >>> import datetime as dt
    >>> from chronodesk.tenants.models import TenantInfo
    >>> tenant = TenantInfo("t-1", "acme", "Acme", None, 31, None)
    >>> is_due(tenant, dt.date(2024, 4, 30))
    True

    """
    return clamp_day_to_month(today.year, today.month, tenant.dispatch_day) == today.day


def select_due_tenants(
    tenants: cabc.Iterable[TenantInfo],
    today: dt.date,
    *,
    active_only: bool = False,
) -> list[TenantInfo]:
    """Return the tenants due on ``today``, preserving registry order.

    Parameters
    ----------
    tenants
        Full tenant registry.
    today
        Reference date.
    active_only
        Drop tenants whose status is not ``active``.

    """
    return [
        tenant
        for tenant in tenants
        if is_due(tenant, today) and (not active_only or tenant.is_active)
    ]


__all__ = ["is_due", "select_due_tenants"]
