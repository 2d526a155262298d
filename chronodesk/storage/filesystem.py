r"""Filesystem adapter for the ObjectStore protocol.

Objects are plain files inside one bucket directory::

    {base_path}/{bucket}/{name}

Usage
-----
>>> import asyncio
>>> from pathlib import Path
>>> from chronodesk.storage.filesystem import FilesystemObjectStore
>>>
>>> store = FilesystemObjectStore(Path("/var/lib/chronodesk"), bucket="reports")
>>> asyncio.run(
...     store.upload(
...         "acme-Max_Muster-Mai-2024.pdf",
...         b"%PDF-1.7",
...         content_type="application/pdf",
...         upsert=True,
...     )
... )

"""

from __future__ import annotations

import asyncio
import typing as typ

from chronodesk.errors import UploadError

if typ.TYPE_CHECKING:
    from pathlib import Path


class FilesystemObjectStore:
    """Store objects as files in a local bucket directory.

    Parameters
    ----------
    base_path
        Root directory; the bucket is a subdirectory of it.
    bucket
        Bucket (subdirectory) name.

    """

    def __init__(self, base_path: Path, *, bucket: str = "reports") -> None:
        """Initialise the store with a base directory and bucket name."""
        self._bucket_dir = base_path / bucket

    @property
    def bucket_dir(self) -> Path:
        """Directory holding the bucket's objects."""
        return self._bucket_dir

    async def list_names(self, prefix: str = "") -> list[str]:
        """Return sorted file names in the bucket starting with ``prefix``."""
        return await asyncio.to_thread(self._list_names_sync, prefix)

    def _list_names_sync(self, prefix: str) -> list[str]:
        if not self._bucket_dir.is_dir():
            return []
        return sorted(
            path.name
            for path in self._bucket_dir.iterdir()
            if path.is_file() and path.name.startswith(prefix)
        )

    async def upload(
        self,
        name: str,
        content: bytes,
        *,
        content_type: str,
        upsert: bool,
    ) -> None:
        """Write ``content`` to ``{bucket}/{name}``.

        ``content_type`` is not recorded on the filesystem.

        Raises
        ------
        UploadError
            If ``name`` already exists and ``upsert`` is false, or the write
            fails.

        """
        del content_type
        if "/" in name or "\\" in name:
            msg = f"Object names must not contain path separators: {name!r}"
            raise UploadError(msg)
        try:
            await asyncio.to_thread(self._write_sync, name, content, upsert=upsert)
        except FileExistsError as exc:
            raise UploadError.already_exists(name) from exc
        except OSError as exc:
            raise UploadError(f"Writing {name} failed: {exc}") from exc

    def _write_sync(self, name: str, content: bytes, *, upsert: bool) -> None:
        self._bucket_dir.mkdir(parents=True, exist_ok=True)
        target = self._bucket_dir / name
        mode = "wb" if upsert else "xb"
        with target.open(mode) as handle:
            handle.write(content)
