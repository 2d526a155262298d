"""Artifact naming for statement PDFs.

Two naming schemes share the flat storage namespace of a bucket:

- revisioned names ``<slug>-<worker>-<period>-rev<N>.pdf`` for on-demand
  statements, where ``N`` is one more than the highest revision already
  stored for the same tenant, worker and period;
- bulk names ``<slug>-<worker>-<period>.pdf`` for scheduled statements,
  overwritten on rerun.

Revision allocation lists the bucket and then writes, so two units naming
the same artifact concurrently can pick the same revision. Uploading
revisioned names without upsert turns that into an upload failure.
"""

from __future__ import annotations

import re
import typing as typ

from chronodesk.common.slug import sanitize_worker_name

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from chronodesk.storage.protocol import ObjectStore

PDF_SUFFIX = ".pdf"
_REVISION_MARKER = "-rev"


def artifact_stem(tenant_slug: str, worker_name: str, period: str) -> str:
    """Return ``<slug>-<sanitized worker name>-<period>``.

    Examples
    --------
    >>> artifact_stem("acme", "Max Muster", "Mai-2024")
    'acme-Max_Muster-Mai-2024'

    """
    return f"{tenant_slug}-{sanitize_worker_name(worker_name)}-{period}"


def revision_prefix(tenant_slug: str, worker_name: str, period: str) -> str:
    """Return the name prefix shared by every revision of one artifact."""
    return artifact_stem(tenant_slug, worker_name, period) + _REVISION_MARKER


def next_revision(names: cabc.Iterable[str], prefix: str) -> int:
    """Return one more than the highest revision of ``prefix`` in ``names``.

    Names match when they are ``<prefix><digits>.pdf``, compared
    case-insensitively. Unrelated names are ignored.

    Examples
    --------
    >>> next_revision(
    ...     ["acme-smith-Mai-2024-rev1.pdf", "acme-smith-Mai-2024-rev3.pdf"],
    ...     "acme-smith-Mai-2024-rev",
    ... )
    4
    >>> next_revision([], "acme-smith-Mai-2024-rev")
    1

    """
    pattern = re.compile(
        rf"^{re.escape(prefix)}(\d+){re.escape(PDF_SUFFIX)}$", re.IGNORECASE
    )
    highest = 0
    for name in names:
        match = pattern.match(name)
        if match is not None:
            highest = max(highest, int(match.group(1)))
    return highest + 1


def revisioned_name(prefix: str, revision: int) -> str:
    """Return ``<prefix><revision>.pdf``."""
    if revision < 1:
        msg = f"revision must be >= 1, got {revision}"
        raise ValueError(msg)
    return f"{prefix}{revision}{PDF_SUFFIX}"


def bulk_name(tenant_slug: str, worker_name: str, period: str) -> str:
    """Return the non-revisioned name used by scheduled runs."""
    return artifact_stem(tenant_slug, worker_name, period) + PDF_SUFFIX


class RevisionNamer:
    """Allocate revisioned artifact names against a live object store."""

    def __init__(self, store: ObjectStore) -> None:
        """Bind the namer to the store whose listing decides revisions."""
        self._store = store

    async def allocate(self, tenant_slug: str, worker_name: str, period: str) -> str:
        """List the store and return the next free revisioned name.

        Call this immediately before uploading so the listing reflects
        earlier uploads of the same run.

        Raises
        ------
        UploadError
            If the store listing fails.

        """
        prefix = revision_prefix(tenant_slug, worker_name, period)
        names = await self._store.list_names()
        return revisioned_name(prefix, next_revision(names, prefix))


__all__ = [
    "PDF_SUFFIX",
    "RevisionNamer",
    "artifact_stem",
    "bulk_name",
    "next_revision",
    "revision_prefix",
    "revisioned_name",
]
