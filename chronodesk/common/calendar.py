"""Calendar arithmetic with an explicit day-of-month policy.

Statement windows are anchored on a day-of-month ("the 31st") that not every
month has. Rather than inheriting whatever a date library happens to do,
this module pins the behaviour down: a day that does not exist in the
target month is clamped to that month's last day.

Examples
--------
>>> import datetime as dt
>>> shift_months(dt.date(2024, 3, 31), -1)
datetime.date(2024, 2, 29)
>>> with_day(dt.date(2024, 4, 10), 31)
datetime.date(2024, 4, 30)

"""

from __future__ import annotations

import calendar
import datetime as dt

MONTH_NAMES_DE: tuple[str, ...] = (
    "Januar",
    "Februar",
    "März",
    "April",
    "Mai",
    "Juni",
    "Juli",
    "August",
    "September",
    "Oktober",
    "November",
    "Dezember",
)

MIN_DAY = 1
MAX_DAY = 31


def days_in_month(year: int, month: int) -> int:
    """Return the number of days in ``month`` of ``year``."""
    return calendar.monthrange(year, month)[1]


def clamp_day_to_month(year: int, month: int, day: int) -> int:
    """Clamp ``day`` into the valid day range of ``month`` in ``year``.

    Raises
    ------
    ValueError
        If ``day`` is outside 1..31, which no month can satisfy.

    """
    if not MIN_DAY <= day <= MAX_DAY:
        msg = f"day-of-month must be between {MIN_DAY} and {MAX_DAY}, got {day}"
        raise ValueError(msg)
    return min(day, days_in_month(year, month))


def with_day(value: dt.date, day: int) -> dt.date:
    """Return ``value`` moved to ``day`` within the same month, clamped."""
    return value.replace(day=clamp_day_to_month(value.year, value.month, day))


def shift_months(value: dt.date, months: int) -> dt.date:
    """Shift ``value`` by whole calendar months, keeping the day where possible.

    The day-of-month is clamped when the target month is shorter, so
    ``2024-03-31`` shifted by ``-1`` lands on ``2024-02-29``.
    """
    index = value.year * 12 + (value.month - 1) + months
    year, month_zero = divmod(index, 12)
    month = month_zero + 1
    return dt.date(year, month, clamp_day_to_month(year, month, value.day))


def month_name_de(month: int) -> str:
    """Return the German name of ``month`` (1-12)."""
    return MONTH_NAMES_DE[month - 1]


def period_label(value: dt.date) -> str:
    """Return the ``<Monat>-<YYYY>`` label used in artifact names."""
    return f"{month_name_de(value.month)}-{value.year:04d}"
