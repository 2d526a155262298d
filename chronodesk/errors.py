"""Error taxonomy shared by the statement pipeline and its adapters.

Every failure the pipeline knows how to handle derives from
:class:`ChronodeskError`. The driver decides what to skip based on the
concrete class:

- :class:`ConfigurationError` aborts the run before any tenant is touched.
- :class:`DataFetchError` skips the affected worker (or tenant).
- :class:`RenderError`, :class:`RasterizeError` and :class:`UploadError`
  skip the affected artifact.
- :class:`StateUpdateError` is logged; uploaded artifacts stay in place.
- :class:`EmailDeliveryError` is logged by the reminder service.
"""

from __future__ import annotations

import datetime as dt


class ChronodeskError(Exception):
    """Base class for all chronodesk errors."""


class ConfigurationError(ChronodeskError):
    """Raised when required input or assets are missing or invalid."""

    @classmethod
    def missing_env(cls, name: str) -> ConfigurationError:
        """Return an error for a required environment variable that is unset."""
        return cls(f"{name} environment variable is required")

    @classmethod
    def invalid_env(cls, name: str, raw: str, expected: str) -> ConfigurationError:
        """Return an error for an environment variable with a bad value."""
        return cls(f"{name} must be {expected}, got: {raw!r}")

    @classmethod
    def missing_asset(cls, kind: str, path: object) -> ConfigurationError:
        """Return an error for a template or logo file that does not exist."""
        return cls(f"{kind} not found: {path}")

    @classmethod
    def unknown_tenant(cls, slug: str) -> ConfigurationError:
        """Return an error for a tenant slug absent from the registry."""
        return cls(f"Unknown tenant: {slug!r}")

    @classmethod
    def no_matching_workers(cls, slug: str) -> ConfigurationError:
        """Return an error when none of the requested worker ids exist."""
        return cls(f"No requested worker ids match a worker of tenant {slug!r}")

    @classmethod
    def inverted_range(cls, start: dt.date, end: dt.date) -> ConfigurationError:
        """Return an error for a requested date range that ends before it starts."""
        return cls(
            f"start date {start.isoformat()} is after end date {end.isoformat()}"
        )


class DataFetchError(ChronodeskError):
    """Raised when the tenant registry, workers or time entries cannot be read."""

    def __init__(self, operation: str, detail: str) -> None:
        """Initialise with the failed data-source operation and a detail message."""
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")


class IntervalParseError(DataFetchError):
    """Raised when a time entry carries duration text that is not ``[-]H:M:S``."""

    def __init__(self, text: str) -> None:
        """Initialise with the offending interval text."""
        self.text = text
        super().__init__("parse_interval", f"invalid interval text {text!r}")


class RenderError(ChronodeskError):
    """Raised when the statement template cannot be rendered."""


class RasterizeError(ChronodeskError):
    """Raised when rendered markup cannot be converted into a PDF."""


class UploadError(ChronodeskError):
    """Raised when the object store rejects a listing or an upload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def already_exists(cls, name: str) -> UploadError:
        """Return an error for a non-upsert upload of an existing name."""
        return cls(f"Object already exists: {name}", status_code=409)

    @classmethod
    def http_error(cls, operation: str, status_code: int) -> UploadError:
        """Return an error for a non-2xx storage API response."""
        return cls(
            f"Storage {operation} failed with HTTP {status_code}",
            status_code=status_code,
        )

    @classmethod
    def network_error(cls, operation: str, detail: str) -> UploadError:
        """Return an error for a transport failure talking to the store."""
        return cls(f"Storage {operation} network error: {detail}")


class StateUpdateError(ChronodeskError):
    """Raised when a tenant's dispatch marker cannot be persisted."""

    def __init__(self, tenant_id: str, detail: str) -> None:
        """Initialise with the tenant id and failure detail."""
        self.tenant_id = tenant_id
        super().__init__(
            f"Dispatch state update for tenant {tenant_id} failed: {detail}"
        )


class EmailDeliveryError(ChronodeskError):
    """Raised when the email provider rejects or cannot receive a message."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)


__all__ = [
    "ChronodeskError",
    "ConfigurationError",
    "DataFetchError",
    "EmailDeliveryError",
    "IntervalParseError",
    "RasterizeError",
    "RenderError",
    "StateUpdateError",
    "UploadError",
]
