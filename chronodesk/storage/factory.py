"""Factory for creating ObjectStore implementations from configuration."""

from __future__ import annotations

import typing as typ

from chronodesk.storage.config import StorageBackend, StorageConfig

if typ.TYPE_CHECKING:
    from chronodesk.storage.protocol import ObjectStore


def create_object_store(config: StorageConfig | None = None) -> ObjectStore:
    """Create the object store selected by ``config`` (or the environment).

    Examples
    --------
    >>> from pathlib import Path
    >>> store = create_object_store(StorageConfig(path=Path("/tmp/chronodesk")))
    >>> type(store).__name__
    'FilesystemObjectStore'

    """
    resolved = config or StorageConfig.from_env()

    if resolved.backend is StorageBackend.SUPABASE:
        from chronodesk.storage.supabase import SupabaseObjectStore

        if resolved.supabase is None:
            msg = "Supabase backend selected without Supabase settings"
            raise ValueError(msg)
        return SupabaseObjectStore(resolved.supabase)

    from chronodesk.storage.filesystem import FilesystemObjectStore

    if resolved.path is None:
        msg = "Filesystem backend selected without a storage path"
        raise ValueError(msg)
    return FilesystemObjectStore(resolved.path, bucket=resolved.bucket)
