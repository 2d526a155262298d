"""Configuration for the statement object store.

Usage
-----
>>> import os
>>> os.environ["CHRONODESK_STORAGE_BACKEND"] = "filesystem"
>>> os.environ["CHRONODESK_STORAGE_PATH"] = "/var/lib/chronodesk"
>>> StorageConfig.from_env().backend
'filesystem'

"""

from __future__ import annotations

import dataclasses as dc
import enum
import os
from pathlib import Path

from chronodesk.errors import ConfigurationError

_DEFAULT_BUCKET = "reports"
_DEFAULT_LIST_LIMIT = 1000
_DEFAULT_TIMEOUT_S = 60.0


class StorageBackend(enum.StrEnum):
    """Supported object store adapters."""

    FILESYSTEM = "filesystem"
    SUPABASE = "supabase"


@dc.dataclass(frozen=True, slots=True)
class SupabaseStorageConfig:
    """Connection settings for a Supabase Storage bucket.

    Attributes
    ----------
    url
        Project base URL, e.g. ``https://xyz.supabase.co``.
    service_key
        Service-role key used for both ``Authorization`` and ``apikey``.
    bucket
        Bucket receiving the statements.
    list_limit
        Maximum number of names returned by one listing.
    timeout_s
        HTTP request timeout in seconds.

    """

    url: str
    service_key: str
    bucket: str = _DEFAULT_BUCKET
    list_limit: int = _DEFAULT_LIST_LIMIT
    timeout_s: float = _DEFAULT_TIMEOUT_S


@dc.dataclass(frozen=True, slots=True)
class StorageConfig:
    """Which object store to use and how to reach it."""

    backend: StorageBackend = StorageBackend.FILESYSTEM
    bucket: str = _DEFAULT_BUCKET
    path: Path | None = None
    supabase: SupabaseStorageConfig | None = None

    @classmethod
    def from_env(cls) -> StorageConfig:
        """Create configuration from environment variables.

        Reads ``CHRONODESK_STORAGE_BACKEND`` (``filesystem`` or ``supabase``,
        default ``filesystem``) and ``CHRONODESK_STORAGE_BUCKET`` (default
        ``reports``). The filesystem backend requires
        ``CHRONODESK_STORAGE_PATH``; the Supabase backend requires
        ``CHRONODESK_STORAGE_URL`` and ``CHRONODESK_STORAGE_KEY``.

        Raises
        ------
        ConfigurationError
            If the backend is unknown or its required settings are missing.

        """
        raw_backend = os.environ.get("CHRONODESK_STORAGE_BACKEND", "").strip().lower()
        try:
            backend = StorageBackend(raw_backend or StorageBackend.FILESYSTEM)
        except ValueError as exc:
            raise ConfigurationError.invalid_env(
                "CHRONODESK_STORAGE_BACKEND", raw_backend, "'filesystem' or 'supabase'"
            ) from exc

        bucket = os.environ.get("CHRONODESK_STORAGE_BUCKET", "").strip()
        bucket = bucket or _DEFAULT_BUCKET

        if backend is StorageBackend.FILESYSTEM:
            raw_path = os.environ.get("CHRONODESK_STORAGE_PATH", "").strip()
            if not raw_path:
                raise ConfigurationError.missing_env("CHRONODESK_STORAGE_PATH")
            return cls(backend=backend, bucket=bucket, path=Path(raw_path))

        url = os.environ.get("CHRONODESK_STORAGE_URL", "").strip()
        if not url:
            raise ConfigurationError.missing_env("CHRONODESK_STORAGE_URL")
        key = os.environ.get("CHRONODESK_STORAGE_KEY", "").strip()
        if not key:
            raise ConfigurationError.missing_env("CHRONODESK_STORAGE_KEY")
        return cls(
            backend=backend,
            bucket=bucket,
            supabase=SupabaseStorageConfig(url=url, service_key=key, bucket=bucket),
        )
