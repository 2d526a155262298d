"""Per-worker outcomes and run summaries.

The summary types are ``msgspec`` structs so the CLI can write them to
disk as JSON without a bespoke serializer.
"""

from __future__ import annotations

import enum

import msgspec

NO_TIME_ENTRIES = "no time entries"


class RunMode(enum.StrEnum):
    """How a statement run was invoked."""

    ON_DEMAND = "on-demand"
    SCHEDULED = "scheduled"


class OutcomeKind(enum.StrEnum):
    """Tag of a :class:`WorkerOutcome`."""

    UPLOADED = "uploaded"
    SKIPPED = "skipped"


class WorkerOutcome(msgspec.Struct, frozen=True, kw_only=True):
    """What happened to one worker's statement."""

    kind: OutcomeKind
    tenant_slug: str
    worker_id: str
    artifact_name: str | None = None
    reason: str | None = None
    error_type: str | None = None

    @classmethod
    def uploaded(
        cls, *, tenant_slug: str, worker_id: str, artifact_name: str
    ) -> WorkerOutcome:
        """Return an outcome for an uploaded artifact."""
        return cls(
            kind=OutcomeKind.UPLOADED,
            tenant_slug=tenant_slug,
            worker_id=worker_id,
            artifact_name=artifact_name,
        )

    @classmethod
    def skipped(
        cls,
        *,
        tenant_slug: str,
        worker_id: str,
        reason: str,
        error: BaseException | None = None,
    ) -> WorkerOutcome:
        """Return an outcome for a worker without an uploaded artifact."""
        return cls(
            kind=OutcomeKind.SKIPPED,
            tenant_slug=tenant_slug,
            worker_id=worker_id,
            reason=reason,
            error_type=type(error).__name__ if error is not None else None,
        )


class TenantSkip(msgspec.Struct, frozen=True, kw_only=True):
    """A tenant that was not processed at all."""

    tenant_slug: str
    reason: str
    error_type: str | None = None


class StateUpdate(msgspec.Struct, frozen=True, kw_only=True):
    """Result of persisting one tenant's dispatch marker."""

    tenant_slug: str
    day: int
    succeeded: bool


class RunSummary(msgspec.Struct, kw_only=True):
    """Everything a statement run did, in processing order."""

    mode: RunMode
    today: str
    outcomes: list[WorkerOutcome] = msgspec.field(default_factory=list)
    skipped_tenants: list[TenantSkip] = msgspec.field(default_factory=list)
    state_updates: list[StateUpdate] = msgspec.field(default_factory=list)

    @property
    def uploaded_count(self) -> int:
        """Number of uploaded artifacts."""
        return sum(1 for o in self.outcomes if o.kind is OutcomeKind.UPLOADED)

    @property
    def skipped_count(self) -> int:
        """Number of workers without an uploaded artifact."""
        return sum(1 for o in self.outcomes if o.kind is OutcomeKind.SKIPPED)

    def to_json(self) -> bytes:
        """Encode the summary as JSON."""
        return msgspec.json.encode(self)


__all__ = [
    "NO_TIME_ENTRIES",
    "OutcomeKind",
    "RunMode",
    "RunSummary",
    "StateUpdate",
    "TenantSkip",
    "WorkerOutcome",
]
