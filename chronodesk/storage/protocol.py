"""ObjectStore protocol for name-addressed statement storage.

This module defines the port for artifact output. Adapters implement it to
write statements to a local directory or to a hosted storage bucket.

Usage
-----
Type-check a concrete adapter:

>>> from pathlib import Path
>>> from chronodesk.storage import FilesystemObjectStore, ObjectStore
>>> isinstance(FilesystemObjectStore(Path("/tmp/reports")), ObjectStore)
True

"""

from __future__ import annotations

import typing as typ

PDF_CONTENT_TYPE = "application/pdf"


@typ.runtime_checkable
class ObjectStore(typ.Protocol):
    """Protocol for listing and uploading named objects in one bucket."""

    async def list_names(self, prefix: str = "") -> list[str]:
        """Return the names of stored objects starting with ``prefix``.

        The listing is a single unpaginated request; adapters may cap it.
        """
        ...

    async def upload(
        self,
        name: str,
        content: bytes,
        *,
        content_type: str,
        upsert: bool,
    ) -> None:
        """Store ``content`` under ``name``.

        Parameters
        ----------
        name
            Object name within the bucket.
        content
            Raw bytes to store.
        content_type
            MIME type recorded with the object.
        upsert
            Replace an existing object of the same name. When ``False`` an
            existing name raises :class:`chronodesk.errors.UploadError`.

        """
        ...
