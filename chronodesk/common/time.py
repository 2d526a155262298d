"""Common time utilities."""

from __future__ import annotations

import datetime as dt
import zoneinfo

from chronodesk.errors import ConfigurationError


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp suitable for DB defaults."""
    return dt.datetime.now(dt.UTC)


def load_timezone(name: str) -> zoneinfo.ZoneInfo:
    """Return the IANA zone called ``name``.

    Raises
    ------
    ConfigurationError
        If the zone database has no entry for ``name``.

    """
    try:
        return zoneinfo.ZoneInfo(name)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError) as exc:
        msg = f"Unknown timezone: {name!r}"
        raise ConfigurationError(msg) from exc


def local_today(tz: dt.tzinfo, *, now: dt.datetime | None = None) -> dt.date:
    """Return the calendar date in ``tz`` at ``now`` (defaults to the clock)."""
    moment = now or utcnow()
    return moment.astimezone(tz).date()
