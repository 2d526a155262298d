"""Statement window computation for scheduled dispatch cycles.

A tenant is dispatched once a month on its ``dispatch_day``. Each cycle
covers the inclusive date range from where the previous cycle stopped up
to yesterday. The previous stop point is the persisted
``last_dispatched_day``; on the first run it is inferred from
``dispatch_day``.

Examples
--------
>>> import datetime as dt
>>> resolve_window(dt.date(2024, 3, 20), dispatch_day=20, last_dispatched_day=15)
StatementWindow(start=datetime.date(2024, 2, 15), end=datetime.date(2024, 3, 19))
>>> resolve_window(dt.date(2024, 3, 20), dispatch_day=20, last_dispatched_day=None)
StatementWindow(start=datetime.date(2024, 2, 21), end=datetime.date(2024, 3, 19))

"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt

from chronodesk.common.calendar import shift_months, with_day

_ONE_DAY = dt.timedelta(days=1)


@dc.dataclass(frozen=True, slots=True)
class StatementWindow:
    """Date range covered by one statement.

    Attributes
    ----------
    start
        First covered day (inclusive).
    end
        Last covered day (inclusive).

    """

    start: dt.date
    end: dt.date

    def __post_init__(self) -> None:
        """Reject windows that end before they start."""
        if self.start > self.end:
            msg = (
                f"window start must not be after window end, got "
                f"start={self.start.isoformat()}, end={self.end.isoformat()}"
            )
            raise ValueError(msg)

    @property
    def days(self) -> int:
        """Number of days covered, both ends included."""
        return (self.end - self.start).days + 1


def resolve_window(
    today: dt.date,
    *,
    dispatch_day: int,
    last_dispatched_day: int | None,
) -> StatementWindow:
    """Compute the window a cycle triggered on ``today`` must cover.

    The window ends yesterday. It starts one calendar month back from
    ``today``, on ``last_dispatched_day`` when a previous cycle was
    recorded, otherwise on the day after ``dispatch_day``. Days that do
    not exist in the target month are clamped to its last day.

    Parameters
    ----------
    today
        Date on which the cycle runs.
    dispatch_day
        The tenant's configured day-of-month (1..31).
    last_dispatched_day
        Day-of-month of the previous cycle, or ``None`` on the first run.

    Returns
    -------
    StatementWindow
        Inclusive covered range.

    Raises
    ------
    ValueError
        If a day-of-month is outside 1..31 or the resolved start falls
        after the end, e.g. a first run triggered on a day other than
        ``dispatch_day`` early in the month.

    """
    end = today - _ONE_DAY
    month_back = shift_months(today, -1)
    if last_dispatched_day is not None:
        start = with_day(month_back, last_dispatched_day)
    else:
        start = with_day(month_back, dispatch_day) + _ONE_DAY
    return StatementWindow(start=start, end=end)


__all__ = ["StatementWindow", "resolve_window"]
