"""Tenant slug and worker name helpers used to build artifact names.

Artifact names live in a flat storage namespace, so the parts that go into
them must not contain path separators and should not contain spaces.
"""

from __future__ import annotations

import re

_SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]*$")
_SEPARATORS = re.compile(r"[\\/]")


def validate_tenant_slug(slug: str) -> str:
    """Return ``slug`` stripped, or raise if it is not a valid tenant slug.

    Tenant slugs are lower-case identifiers made of letters, digits, ``-``
    and ``_``.

    Raises
    ------
    ValueError
        If the slug is empty or contains other characters.

    Examples
    --------
    >>> validate_tenant_slug("acme")
    'acme'

    """
    candidate = slug.strip()
    if not _SLUG_PATTERN.fullmatch(candidate):
        msg = f"Invalid tenant slug: {slug!r}"
        raise ValueError(msg)
    return candidate


def sanitize_worker_name(name: str) -> str:
    """Make a worker's display name safe for use inside an artifact name.

    Each space becomes ``_`` and each path separator ``-``. Nothing is
    trimmed or collapsed: names already stored under the bucket were built
    that way, and revision numbering only continues when the prefixes
    match exactly.

    Examples
    --------
    >>> sanitize_worker_name("Max Muster")
    'Max_Muster'
    >>> sanitize_worker_name("Max  Muster ")
    'Max__Muster_'
    >>> sanitize_worker_name("A/B Team")
    'A-B_Team'

    """
    return _SEPARATORS.sub("-", name).replace(" ", "_")
