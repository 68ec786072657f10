"""Monotonic clock port and system adapter.

Provides ClockPort (Protocol) and SystemClock, the counter that anchors
are extrapolated from.

**Why monotonic?** time.monotonic() is immune to NTP adjustments and
manual system-clock changes, so the distance between two readings is
real elapsed time even when the device clock is wrong or tampered with.
The epoch is arbitrary (PEP 418); SystemClock rebases it so that a
reading is the number of seconds since the adapter was created, which
in practice is process start.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class ClockPort(Protocol):
    """Monotonic clock used for anchor extrapolation and suspend marks.

    The default implementation wraps ``time.monotonic()``. Tests
    inject a deterministic fake clock for reproducible timing.
    """

    def now(self) -> float:
        """Return monotonic time in seconds.

        Returns:
            A float of seconds from an arbitrary, per-process origin.
            Only the *difference* between two calls is meaningful.
        """
        ...


class SystemClock:
    """Production clock wrapping ``time.monotonic()``.

    Readings start near ``0.0`` when the clock is constructed and never
    decrease.  Satisfies :class:`ClockPort` via structural subtyping.

    Usage::

        clock = SystemClock()
        start = clock.now()
        # ... some work ...
        elapsed = clock.now() - start
    """

    def __init__(self) -> None:
        self._origin = time.monotonic()

    def now(self) -> float:
        """Return seconds elapsed since this clock was created."""
        return time.monotonic() - self._origin
