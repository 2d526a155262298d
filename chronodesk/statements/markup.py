"""Statement table rows and template context.

Every cell is escaped with ``markupsafe`` before it is joined into the row
markup, and the finished rows are handed to the template as ``Markup`` so
the autoescaping renderer inserts them verbatim.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from markupsafe import Markup

from chronodesk.common.calendar import month_name_de
from chronodesk.statements.intervals import format_signed, parse_signed_interval

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from chronodesk.statements.intervals import IntervalTotals
    from chronodesk.tenants.models import TenantInfo, TimeEntryInfo, WorkerInfo

DATE_FORMAT = "%d.%m.%Y"
CLOCK_FORMAT = "%H:%M"
HOURS_SUFFIX = " Std."


def format_hours(ms: int) -> str:
    """Render a duration as shown in statement cells, e.g. ``08:15 Std.``."""
    return format_signed(ms) + HOURS_SUFFIX


def _format_clock(moment: dt.datetime | None, tz: dt.tzinfo) -> str:
    if moment is None:
        return ""
    return moment.astimezone(tz).strftime(CLOCK_FORMAT)


def render_row(entry: TimeEntryInfo, tz: dt.tzinfo) -> Markup:
    """Return one ``<tr>`` for ``entry``.

    Raises
    ------
    IntervalParseError
        If one of the entry's duration texts is malformed.

    """
    cells = (
        entry.entry_date.strftime(DATE_FORMAT),
        entry.status,
        _format_clock(entry.started_at, tz),
        _format_clock(entry.ended_at, tz),
        format_hours(parse_signed_interval(entry.break_duration)),
        format_hours(parse_signed_interval(entry.net_duration)),
        format_hours(parse_signed_interval(entry.overtime_duration)),
    )
    inner = Markup("").join(Markup("<td>{}</td>").format(cell) for cell in cells)
    return Markup("<tr>{}</tr>").format(inner)


def render_rows(entries: cabc.Iterable[TimeEntryInfo], tz: dt.tzinfo) -> Markup:
    """Return the table body markup for ``entries`` in order."""
    return Markup("\n").join(render_row(entry, tz) for entry in entries)


@dc.dataclass(frozen=True, slots=True)
class StatementDocument:
    """Inputs for one worker's statement."""

    tenant: TenantInfo
    worker: WorkerInfo
    entries: cabc.Sequence[TimeEntryInfo]
    totals: IntervalTotals
    period_date: dt.date
    created_on: dt.date


def build_context(
    document: StatementDocument,
    *,
    logo_data_uri: str,
    tz: dt.tzinfo,
) -> dict[str, object]:
    """Assemble the template context for ``document``.

    Keys: ``logo``, ``month_name``, ``year``, ``company_name``, ``worker``
    (``name``, ``id_number``, ``vacation_balance``), ``rows_markup``,
    ``total_net_text``, ``total_overtime_text`` and ``creation_date``.
    """
    worker = document.worker
    return {
        "logo": logo_data_uri,
        "month_name": month_name_de(document.period_date.month),
        "year": f"{document.period_date.year:04d}",
        "company_name": document.tenant.display_name,
        "worker": {
            "name": worker.name,
            "id_number": worker.id_number or "",
            "vacation_balance": (
                "" if worker.vacation_balance is None else f"{worker.vacation_balance:g}"
            ),
        },
        "rows_markup": render_rows(document.entries, tz),
        "total_net_text": format_hours(document.totals.net_ms),
        "total_overtime_text": format_hours(document.totals.overtime_ms),
        "creation_date": document.created_on.strftime(DATE_FORMAT),
    }


__all__ = [
    "StatementDocument",
    "build_context",
    "format_hours",
    "render_row",
    "render_rows",
]
