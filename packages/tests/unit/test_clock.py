"""Unit tests for truetime._clock — clock port and system adapter.

Test Techniques Used:
    - Specification-based Testing: Verifying ClockPort protocol
      contract
    - Protocol Conformance: isinstance checks for structural
      subtyping
    - Boundary Value Analysis: Origin near zero, monotonic ordering
"""

from __future__ import annotations

from truetime._clock import ClockPort, SystemClock
from truetime.testing import FakeClock


class TestSystemClock:
    """Tests for SystemClock production implementation.

    Technique: Specification-based Testing — verifying public
    contract.
    """

    def test_satisfies_clock_port_protocol(self) -> None:
        """SystemClock is recognized as ClockPort."""
        assert isinstance(SystemClock(), ClockPort)

    def test_now_returns_float(self) -> None:
        """now() returns a float value."""
        assert isinstance(SystemClock().now(), float)

    def test_starts_near_zero(self) -> None:
        """Readings count from the clock's construction."""
        clock = SystemClock()
        assert 0.0 <= clock.now() < 5.0

    def test_now_is_monotonically_non_decreasing(self) -> None:
        """Successive calls return non-decreasing values."""
        clock = SystemClock()
        t1 = clock.now()
        t2 = clock.now()
        assert t2 >= t1


class TestClockPortProtocol:
    """Tests for ClockPort protocol definition.

    Technique: Protocol Conformance — structural subtyping checks.
    """

    def test_fake_clock_satisfies_protocol(self) -> None:
        """The testing FakeClock satisfies ClockPort."""
        assert isinstance(FakeClock(), ClockPort)

    def test_class_without_now_does_not_satisfy(self) -> None:
        """A class without now() does not satisfy ClockPort."""

        class NotAClock:
            pass

        assert not isinstance(NotAClock(), ClockPort)
