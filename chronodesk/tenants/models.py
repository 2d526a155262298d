"""Read models handed from the data source to the statement pipeline.

These immutable structures decouple the pipeline from ORM sessions: once a
row has been read it can be passed around without lazy-loading surprises.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from chronodesk.tenants.storage import TenantStatus

if typ.TYPE_CHECKING:
    import datetime as dt


@dataclasses.dataclass(slots=True, frozen=True)
class TenantInfo:
    """Registry entry for one tenant company."""

    id: str
    slug: str
    display_name: str
    contact_email: str | None
    dispatch_day: int
    last_dispatched_day: int | None
    status: str = TenantStatus.ACTIVE.value

    @property
    def is_active(self) -> bool:
        """Return whether the tenant account is active."""
        return self.status == TenantStatus.ACTIVE


@dataclasses.dataclass(slots=True, frozen=True)
class WorkerInfo:
    """Worker of a tenant as shown on a statement."""

    id: str
    name: str
    id_number: str | None = None
    vacation_balance: float | None = None


@dataclasses.dataclass(slots=True, frozen=True)
class TimeEntryInfo:
    """One tracked day with its raw interval texts."""

    entry_date: dt.date
    status: str
    started_at: dt.datetime | None = None
    ended_at: dt.datetime | None = None
    net_duration: str | None = None
    overtime_duration: str | None = None
    break_duration: str | None = None
