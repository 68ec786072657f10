"""Deterministic fake clock for testing.

Satisfies ClockPort (PEP 544 structural subtyping) with a manually
controllable reading — no real time dependency.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class FakeClock:
    """Test double for ClockPort.

    Attributes:
        _time: The monotonic reading returned by ``now()``.

    Example::

        clock = FakeClock(10.0)
        clock.advance(32.0)
        assert clock.now() == 42.0
    """

    _time: float = 0.0

    def now(self) -> float:
        """Return the manually set reading."""
        return self._time

    def set(self, value: float) -> None:
        self._time = value

    def advance(self, seconds: float) -> None:
        """Move the reading forward by *seconds*."""
        if seconds < 0:
            raise ValueError("a monotonic clock cannot go backwards")
        self._time += seconds
