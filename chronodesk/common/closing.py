"""Release adapters that may own network clients."""

from __future__ import annotations


async def aclose_if_supported(resource: object) -> None:
    """Await ``resource.aclose()`` when the resource defines one.

    Object stores and email transports that talk HTTP own an
    ``httpx.AsyncClient``; filesystem and log-only adapters own nothing.
    """
    aclose = getattr(resource, "aclose", None)
    if aclose is not None:
        await aclose()
