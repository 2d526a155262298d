"""Object storage for rendered statements.

Public API
----------
ObjectStore
    Protocol (port) for listing and uploading named objects.
FilesystemObjectStore
    Local directory adapter.
SupabaseObjectStore
    Supabase Storage HTTP adapter.
StorageConfig, SupabaseStorageConfig, StorageBackend
    Environment-driven configuration.
create_object_store
    Build the configured adapter.
"""

from __future__ import annotations

from .config import StorageBackend, StorageConfig, SupabaseStorageConfig
from .factory import create_object_store
from .filesystem import FilesystemObjectStore
from .protocol import PDF_CONTENT_TYPE, ObjectStore
from .supabase import SupabaseObjectStore

__all__ = [
    "PDF_CONTENT_TYPE",
    "FilesystemObjectStore",
    "ObjectStore",
    "StorageBackend",
    "StorageConfig",
    "SupabaseObjectStore",
    "SupabaseStorageConfig",
    "create_object_store",
]
