"""Time source port, result type and adapters.

A time source attempts to produce an absolute timestamp and may fail.
Sources are independent and stateless from the core's point of view;
the waterfall resolver (:mod:`truetime._resolver`) consults them in
configured order.

Provides:

- :class:`ResolvedTime` — ``(succeeded, value)`` result of every fetch
- :class:`TimeSource` — Protocol with ``fetch()`` / ``fetch_utc()``
- :class:`SystemTimeSource` — the device clock, never fails
- :class:`HttpDateTimeSource` — the ``Date`` header of an HTTP response
- :func:`build_sources` — ordered source list from settings

Design decisions:

- Both accessors are coroutines so network sources can suspend; the
  device clock simply returns immediately.
- Network failures are reported as failed results, not raised, so a
  source is usable directly as well as through the resolver.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Protocol, Self, runtime_checkable

import httpx

from truetime._errors import AllSourcesExhaustedError
from truetime._settings import SourceSettings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ResolvedTime:
    """Outcome of a single time fetch or a whole waterfall resolution.

    When ``succeeded`` is ``False``, ``value`` is ``None`` and must not
    be used.  ``source`` names the source that produced the value.
    """

    succeeded: bool
    value: datetime | None = None
    source: str | None = None

    @classmethod
    def ok(cls, value: datetime, source: str | None = None) -> Self:
        """Build a successful result."""
        return cls(succeeded=True, value=value, source=source)

    @classmethod
    def failed(cls, source: str | None = None) -> Self:
        """Build a failed result."""
        return cls(succeeded=False, value=None, source=source)

    def unwrap(self) -> datetime:
        """Return the value, or raise if resolution failed.

        Raises:
            AllSourcesExhaustedError: When ``succeeded`` is ``False``.
        """
        if not self.succeeded or self.value is None:
            raise AllSourcesExhaustedError()
        return self.value


# ---------------------------------------------------------------------------
# Port (Protocol)
# ---------------------------------------------------------------------------


@runtime_checkable
class TimeSource(Protocol):
    """Port contract for anything that can tell the time.

    ``fetch()`` returns the source's local notion of time (an aware
    datetime in the local zone); ``fetch_utc()`` returns an aware UTC
    datetime.  Either may perform I/O and either may fail.
    """

    name: str

    async def fetch(self) -> ResolvedTime: ...

    async def fetch_utc(self) -> ResolvedTime: ...


# ---------------------------------------------------------------------------
# Device clock adapter
# ---------------------------------------------------------------------------


class SystemTimeSource:
    """The device's own wall clock.

    Always succeeds, which makes it a sensible last entry in a
    waterfall: a possibly-wrong answer beats no answer.
    """

    name = "system"

    async def fetch(self) -> ResolvedTime:
        return ResolvedTime.ok(datetime.now().astimezone(), self.name)

    async def fetch_utc(self) -> ResolvedTime:
        return ResolvedTime.ok(datetime.now(UTC), self.name)

    def __repr__(self) -> str:
        return "SystemTimeSource()"


# ---------------------------------------------------------------------------
# HTTP Date header adapter
# ---------------------------------------------------------------------------


class HttpDateTimeSource:
    """Read the time from the ``Date`` header of an HTTP response.

    Sends a ``HEAD`` request to *url*; any server that follows RFC 9110
    stamps its responses with the current time at one-second
    resolution, which is plenty for elapsed-while-closed accounting.

    Args:
        url: Endpoint to query.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``
            in tests.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.name = f"http:{url}"
        self._timeout = timeout
        self._transport = transport

    async def fetch(self) -> ResolvedTime:
        result = await self.fetch_utc()
        if not result.succeeded or result.value is None:
            return result
        return ResolvedTime.ok(result.value.astimezone(), self.name)

    async def fetch_utc(self) -> ResolvedTime:
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            ) as client:
                response = await client.head(self.url)
        except httpx.HTTPError as exc:
            logger.warning("HTTP time source %s failed: %s", self.url, exc)
            return ResolvedTime.failed(self.name)

        if response.status_code >= 400:
            logger.warning(
                "HTTP time source %s answered %d", self.url, response.status_code
            )
            return ResolvedTime.failed(self.name)

        header = response.headers.get("date")
        if header is None:
            logger.warning("HTTP time source %s sent no Date header", self.url)
            return ResolvedTime.failed(self.name)

        try:
            value = parsedate_to_datetime(header)
        except (TypeError, ValueError):
            logger.warning(
                "HTTP time source %s sent unparseable Date %r", self.url, header
            )
            return ResolvedTime.failed(self.name)

        # RFC 9110 dates are always GMT; parsedate may still hand back naive.
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return ResolvedTime.ok(value.astimezone(UTC), self.name)

    def __repr__(self) -> str:
        return f"HttpDateTimeSource(url={self.url!r})"


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def build_sources(
    settings: SourceSettings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[TimeSource]:
    """Build the ordered waterfall described by *settings*.

    HTTP sources come first in configured order, followed by the device
    clock when ``allow_system_clock`` is set.
    """
    sources: list[TimeSource] = [
        HttpDateTimeSource(url, timeout=settings.timeout, transport=transport)
        for url in settings.http_urls
    ]
    if settings.allow_system_clock:
        sources.append(SystemTimeSource())
    return sources
