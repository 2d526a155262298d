"""Signed duration parsing, formatting and accumulation.

Time entries store their durations as interval text such as ``"08:15:00"``
or ``"-00:30:00"``. Values are rounded to whole minutes when parsed and
floored to whole minutes when formatted, so totals never show seconds.

Examples
--------
>>> format_signed(parse_signed_interval("-01:30:00"))
'-01:30'
>>> parse_signed_interval("00:00:30")
60000

"""

from __future__ import annotations

import dataclasses as dc
import decimal
import typing as typ

from chronodesk.errors import IntervalParseError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from chronodesk.tenants.models import TimeEntryInfo

_MS_PER_MINUTE = 60_000
_SECONDS_PER_MINUTE = decimal.Decimal(60)
_PART_WEIGHTS = (3600, 60, 1)


@dc.dataclass(frozen=True, slots=True)
class IntervalTotals:
    """Summed net and overtime durations of one statement, in milliseconds."""

    net_ms: int = 0
    overtime_ms: int = 0


def _parse_part(part: str, text: str) -> decimal.Decimal:
    stripped = part.strip()
    if not stripped:
        return decimal.Decimal(0)
    try:
        value = decimal.Decimal(stripped)
    except decimal.InvalidOperation as exc:
        raise IntervalParseError(text) from exc
    if not value.is_finite() or value < 0:
        raise IntervalParseError(text)
    return value


def parse_signed_interval(text: str | None) -> int:
    """Parse ``[-]H:M:S`` interval text into signed milliseconds.

    Missing trailing parts default to zero and seconds may be fractional.
    The absolute value is rounded to the nearest minute, halves away from
    zero, before the sign is reapplied.

    Parameters
    ----------
    text
        Interval text; ``None`` or blank text counts as zero.

    Returns
    -------
    int
        Duration in milliseconds, always a whole number of minutes.

    Raises
    ------
    IntervalParseError
        If a part is not a non-negative number or there are more than
        three parts.

    """
    if text is None or not text.strip():
        return 0

    body = text.strip()
    negative = body.startswith("-")
    if negative:
        body = body[1:]

    parts = body.split(":")
    if len(parts) > len(_PART_WEIGHTS):
        raise IntervalParseError(text)

    seconds = sum(
        (
            _parse_part(part, text) * weight
            for part, weight in zip(parts, _PART_WEIGHTS, strict=False)
        ),
        decimal.Decimal(0),
    )
    minutes = int(
        (seconds / _SECONDS_PER_MINUTE).quantize(
            decimal.Decimal(1), rounding=decimal.ROUND_HALF_UP
        )
    )
    ms = minutes * _MS_PER_MINUTE
    return -ms if negative else ms


def format_signed(ms: int) -> str:
    """Render signed milliseconds as ``[-]HH:MM``, flooring to whole minutes.

    Examples
    --------
    >>> format_signed(90 * 60_000 + 59_999)
    '01:30'
    >>> format_signed(-5 * 60_000)
    '-00:05'
    >>> format_signed(125 * 60 * 60_000)
    '125:00'

    """
    sign = "-" if ms < 0 else ""
    total_minutes = abs(ms) // _MS_PER_MINUTE
    hours, minutes = divmod(total_minutes, 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def accumulate(entries: cabc.Iterable[TimeEntryInfo]) -> IntervalTotals:
    """Sum the net and overtime durations of ``entries`` in order.

    Raises
    ------
    IntervalParseError
        If any entry carries malformed duration text.

    """
    net_ms = 0
    overtime_ms = 0
    for entry in entries:
        net_ms += parse_signed_interval(entry.net_duration)
        overtime_ms += parse_signed_interval(entry.overtime_duration)
    return IntervalTotals(net_ms=net_ms, overtime_ms=overtime_ms)


__all__ = [
    "IntervalTotals",
    "accumulate",
    "format_signed",
    "parse_signed_interval",
]
