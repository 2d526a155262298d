"""Partition the due-tenant list into disjoint execution chunks.

Several statement units can run side by side, each configured with the
same chunk size and its own chunk index. Because every unit sees the
registry in the same order, their chunks never overlap and together cover
the whole list.

Usage
-----
>>> spec = ChunkSpec(size=2, index=1)
>>> select_chunk(["a", "b", "c", "d", "e"], spec)
['c', 'd']

"""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ

from chronodesk.errors import ConfigurationError

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@dc.dataclass(frozen=True, slots=True)
class ChunkSpec:
    """Which slice of the due-tenant list one unit processes.

    Attributes
    ----------
    size
        Number of tenants per chunk, or ``None`` for a single unbounded
        chunk.
    index
        Zero-based chunk index.

    """

    size: int | None = None
    index: int = 0

    def __post_init__(self) -> None:
        """Validate size and index."""
        if self.size is not None and self.size < 1:
            msg = f"chunk size must be >= 1, got {self.size}"
            raise ConfigurationError(msg)
        if self.index < 0:
            msg = f"chunk index must be >= 0, got {self.index}"
            raise ConfigurationError(msg)

    @staticmethod
    def _parse_int(env_var: str) -> int | None:
        """Read an integer env var, returning ``None`` when unset or blank."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return None
        try:
            return int(raw)
        except ValueError as exc:
            raise ConfigurationError.invalid_env(env_var, raw, "an integer") from exc

    @classmethod
    def from_env(
        cls,
        *,
        size: int | None = None,
        index: int | None = None,
    ) -> ChunkSpec:
        """Create a chunk spec from explicit values or environment variables.

        Explicit ``size`` and ``index`` win over ``CHRONODESK_CHUNK_SIZE``
        and ``CHRONODESK_CHUNK_INDEX``.

        Raises
        ------
        ConfigurationError
            If a value is not an integer, the size is below 1 or the index
            is negative.

        """
        resolved_size = size if size is not None else cls._parse_int(
            "CHRONODESK_CHUNK_SIZE"
        )
        resolved_index = index if index is not None else cls._parse_int(
            "CHRONODESK_CHUNK_INDEX"
        )
        return cls(size=resolved_size, index=resolved_index or 0)


def select_chunk[T](items: cabc.Sequence[T], spec: ChunkSpec) -> list[T]:
    """Return the contiguous slice of ``items`` assigned to ``spec``.

    The slice is ``items[index * size : index * size + size]``; an index
    past the end yields an empty list. With an unbounded size, index 0
    receives everything and other indices receive nothing.
    """
    if spec.size is None:
        return list(items) if spec.index == 0 else []
    start = spec.index * spec.size
    return list(items[start : start + spec.size])


__all__ = ["ChunkSpec", "select_chunk"]
