"""Time authority: the orchestrator clients talk to.

:class:`TimeAuthority` composes the waterfall resolver, the anchor store
and the suspension tracker:

- :meth:`~TimeAuthority.initialize` resolves the time once at start-up,
  computes how long the process was closed and writes a fresh anchor.
- :meth:`~TimeAuthority.refresh` re-anchors later, e.g. from a resume
  handler, to keep drift small.
- :meth:`~TimeAuthority.now` extrapolates UTC from the anchor with the
  monotonic clock; no I/O.
- ``elapsed_while_lost_focus`` / ``elapsed_while_paused`` broadcast
  in-process suspension durations once initialized.

Lifecycle::

    UNINITIALIZED --initialize()--> INITIALIZING --ok--> INITIALIZED
                         ^                |
                         +----failed------+

An initialized authority never becomes uninitialized again.  There is
no internal locking: the host is expected to serialize ``initialize``
and ``refresh`` on one instance.

Each authority must own its store (or its pair of keys) exclusively: the
monotonic half of the anchor is held in memory, so two authorities
writing the same anchor key extrapolate each other's instants from the
wrong reading.  :class:`~truetime._anchor.AnchorStore` logs a WARNING
when it sees that happen.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime, timedelta
from enum import StrEnum
from types import TracebackType
from typing import Self

from truetime._anchor import DEFAULT_ANCHOR_KEY, DEFAULT_FIRST_RUN_KEY, AnchorStore
from truetime._clock import ClockPort, SystemClock
from truetime._events import Event
from truetime._resolver import WaterfallResolver
from truetime._settings import RegressionPolicy
from truetime._signals import SuspendSignalPort
from truetime._sources import ResolvedTime, TimeSource
from truetime._storage import KeyValueStore
from truetime._suspension import SuspensionTracker

logger = logging.getLogger(__name__)


class AuthorityState(StrEnum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    INITIALIZED = "initialized"


class TimeAuthority:
    """Trusted UTC time and suspension accounting for one process.

    Args:
        sources: Time sources in waterfall order.
        store: Persistent key-value store holding the anchor.
        signals: Host focus/pause notifications.
        clock: Monotonic clock.  Defaults to :class:`SystemClock`.
        regression_policy: What :meth:`initialize` does when the
            resolved time is not newer than the stored anchor.
        anchor_key: Store key for the anchor instant.
        first_run_key: Store key for the first-run flag.

    Usage::

        hub = SuspendSignalHub()
        with TimeAuthority([SystemTimeSource()], JsonFileStore("t.json"), hub) as ta:
            if await ta.initialize():
                print(ta.now(), ta.elapsed_while_closed)
    """

    def __init__(
        self,
        sources: Sequence[TimeSource],
        store: KeyValueStore,
        signals: SuspendSignalPort,
        *,
        clock: ClockPort | None = None,
        regression_policy: RegressionPolicy = RegressionPolicy.STAY_UNINITIALIZED,
        anchor_key: str = DEFAULT_ANCHOR_KEY,
        first_run_key: str = DEFAULT_FIRST_RUN_KEY,
    ) -> None:
        self._clock = clock if clock is not None else SystemClock()
        self._resolver = WaterfallResolver(sources)
        self._anchors = AnchorStore(
            store,
            self._clock,
            anchor_key=anchor_key,
            first_run_key=first_run_key,
        )
        self._regression_policy = regression_policy
        self._state = AuthorityState.UNINITIALIZED
        self._elapsed_while_closed = timedelta(0)
        self._pending: set[asyncio.Task[ResolvedTime]] = set()
        self._tracker = SuspensionTracker(
            signals, self._clock, gate=lambda: self.is_initialized
        )

    # -- state ---------------------------------------------------------------

    @property
    def state(self) -> AuthorityState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is AuthorityState.INITIALIZED

    @property
    def elapsed_while_closed(self) -> timedelta:
        """Wall-clock time between the previous anchor and the last reconciliation.

        ``timedelta(0)`` on the first run and before any successful
        reconciliation.
        """
        return self._elapsed_while_closed

    @property
    def last_recorded_utc(self) -> datetime:
        """The anchor instant currently persisted."""
        return self._anchors.read_anchor().utc_instant

    @property
    def elapsed_while_lost_focus(self) -> Event[timedelta]:
        return self._tracker.elapsed_while_lost_focus

    @property
    def elapsed_while_paused(self) -> Event[timedelta]:
        return self._tracker.elapsed_while_paused

    # -- time ------------------------------------------------------------------

    def now(self) -> datetime:
        """Current UTC time extrapolated from the anchor."""
        return self._anchors.now()

    async def get_datetime(self) -> ResolvedTime:
        """Resolve local-zone time through the waterfall; no state change."""
        return await self._resolver.resolve_local()

    async def get_datetime_utc(self) -> ResolvedTime:
        """Resolve UTC time through the waterfall; no state change."""
        return await self._resolver.resolve_utc()

    # -- reconciliation --------------------------------------------------------

    async def initialize(self) -> bool:
        """Resolve the time and reconcile it with the stored anchor.

        Returns:
            ``True`` if the authority is initialized afterwards.
        """
        previous = self._state
        if previous is AuthorityState.UNINITIALIZED:
            self._state = AuthorityState.INITIALIZING
        try:
            succeeded = await self._initialize()
        except BaseException:
            if self._state is AuthorityState.INITIALIZING:
                self._state = previous
            raise
        if succeeded:
            self._state = AuthorityState.INITIALIZED
        elif self._state is AuthorityState.INITIALIZING:
            self._state = previous
        return succeeded

    async def _initialize(self) -> bool:
        result = await self.get_datetime_utc()
        if not result.succeeded or result.value is None:
            logger.warning("Initialization failed: no time source answered")
            return False
        resolved = result.value

        if self._anchors.read_first_run():
            self._elapsed_while_closed = timedelta(0)
            self._anchors.write_anchor(resolved)
            self._anchors.write_first_run(False)
            logger.info(
                "First run: anchored at %s (source %s)",
                resolved.isoformat(),
                result.source,
                extra={"source": result.source, "resolved": resolved.isoformat()},
            )
            return True

        if self._reanchor(resolved, result.source):
            logger.info(
                "Initialized at %s; elapsed while closed: %s",
                resolved.isoformat(),
                self._elapsed_while_closed,
                extra={"elapsed_s": self._elapsed_while_closed.total_seconds()},
            )
            return True

        if self._regression_policy is RegressionPolicy.MARK_INITIALIZED:
            logger.info("Initialized without re-anchoring (regression policy)")
            return True
        return False

    async def refresh(self) -> ResolvedTime:
        """Re-anchor if the resolved time is newer than the anchor.

        Never changes the first-run flag or the initialized state.
        """
        result = await self.get_datetime_utc()
        if result.succeeded and result.value is not None:
            self._reanchor(result.value, result.source)
        return result

    def refresh_soon(self) -> asyncio.Task[ResolvedTime]:
        """Schedule :meth:`refresh` on the running loop and return immediately.

        Must be called from within a running event loop.
        """
        task = asyncio.create_task(self.refresh())
        self._pending.add(task)
        task.add_done_callback(self._on_refresh_done)
        return task

    def _on_refresh_done(self, task: asyncio.Task[ResolvedTime]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background refresh failed: %s", exc, exc_info=exc)

    def _reanchor(self, resolved: datetime, source: str | None) -> bool:
        anchor = self._anchors.read_anchor()
        if resolved <= anchor.utc_instant:
            logger.warning(
                "Clock regression: %s from %s is not newer than anchor %s",
                resolved.isoformat(),
                source,
                anchor.utc_instant.isoformat(),
                extra={
                    "source": source,
                    "resolved": resolved.isoformat(),
                    "anchor": anchor.utc_instant.isoformat(),
                },
            )
            return False
        self._elapsed_while_closed = resolved - anchor.utc_instant
        self._anchors.write_anchor(resolved)
        return True

    # -- housekeeping ----------------------------------------------------------

    def clear_persistent_data(self) -> None:
        """Delete the anchor and first-run keys.

        The next :meth:`initialize` behaves like a first run.  Intended
        for tests and debugging.
        """
        self._anchors.clear()

    def dispose(self) -> None:
        """Stop listening to focus/pause signals.  Idempotent."""
        self._tracker.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def __repr__(self) -> str:
        return f"TimeAuthority(state={self._state.value!r}, resolver={self._resolver!r})"
