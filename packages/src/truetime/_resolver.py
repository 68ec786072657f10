"""Waterfall resolution over an ordered list of time sources.

Sources are awaited one after another in configured order.  The first
successful result is returned immediately and later sources are never
consulted; a failing source (failed result *or* raised exception) hands
over to the next one.  When the list is exhausted the result is a
failed :class:`~truetime.ResolvedTime`; nothing is raised.

There are no retries inside a resolution and no concurrent fan-out —
deterministic ordering and no redundant network calls once a source
has answered.  Worst-case latency is the sum of the per-source
timeouts.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence

from truetime._sources import ResolvedTime, TimeSource

logger = logging.getLogger(__name__)

_Accessor = Callable[[TimeSource], Awaitable[ResolvedTime]]


async def _waterfall(sources: Sequence[TimeSource], accessor: _Accessor) -> ResolvedTime:
    for source in sources:
        name = getattr(source, "name", repr(source))
        try:
            result = await accessor(source)
        except Exception as exc:
            logger.warning(
                "Time source %s raised: %s", name, exc, extra={"source": name}
            )
            continue
        if result.succeeded:
            logger.debug("Resolved time from %s", name, extra={"source": name})
            if result.source is None:
                return ResolvedTime.ok(result.value, name)  # type: ignore[arg-type]
            return result
        logger.info("Time source %s unavailable, trying next", name, extra={"source": name})

    logger.warning("All %d time sources failed", len(sources))
    return ResolvedTime.failed()


async def resolve_utc(sources: Sequence[TimeSource]) -> ResolvedTime:
    """Resolve the current UTC time via ``fetch_utc()`` of each source."""
    return await _waterfall(sources, lambda s: s.fetch_utc())


async def resolve_local(sources: Sequence[TimeSource]) -> ResolvedTime:
    """Resolve the current local-zone time via ``fetch()`` of each source."""
    return await _waterfall(sources, lambda s: s.fetch())


class WaterfallResolver:
    """A fixed, ordered list of sources with both resolution surfaces.

    Args:
        sources: Time sources in priority order.  The list is copied;
            later changes to the caller's sequence are not seen.
    """

    def __init__(self, sources: Sequence[TimeSource]) -> None:
        self._sources = tuple(sources)

    @property
    def sources(self) -> tuple[TimeSource, ...]:
        return self._sources

    async def resolve_utc(self) -> ResolvedTime:
        return await resolve_utc(self._sources)

    async def resolve_local(self) -> ResolvedTime:
        return await resolve_local(self._sources)

    def __repr__(self) -> str:
        return f"WaterfallResolver(sources={list(self._sources)!r})"
