"""Unit tests for truetime._suspension — focus/pause accounting.

Test Techniques Used:
    - State Transition Testing: Active <-> Suspended per kind
    - Clock Injection: FakeClock sets suspend marks
    - Specification-based Testing: Gated emission, overwritten marks
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from truetime._signals import SuspendSignalHub
from truetime._suspension import SuspendKind, SuspensionTracker
from truetime.testing import FakeClock


@pytest.fixture
def gate_open() -> list[bool]:
    return [True]


@pytest.fixture
def tracker(
    suspend_signals: SuspendSignalHub, fake_clock: FakeClock, gate_open: list[bool]
) -> SuspensionTracker:
    return SuspensionTracker(suspend_signals, fake_clock, gate=lambda: gate_open[0])


class TestFocus:
    """Focus pair.

    Technique: State Transition Testing.
    """

    def test_round_trip_emits_elapsed(
        self,
        tracker: SuspensionTracker,
        suspend_signals: SuspendSignalHub,
        fake_clock: FakeClock,
    ) -> None:
        """Lost at m=10, regained at m=42 -> exactly one 32 s event."""
        seen: list[timedelta] = []
        tracker.elapsed_while_lost_focus.subscribe(seen.append)

        fake_clock.set(10.0)
        suspend_signals.focus_changed(False)
        assert tracker.is_suspended(SuspendKind.FOCUS)
        fake_clock.set(42.0)
        suspend_signals.focus_changed(True)

        assert seen == [timedelta(seconds=32)]
        assert not tracker.is_suspended(SuspendKind.FOCUS)

    def test_closed_gate_emits_nothing(
        self,
        tracker: SuspensionTracker,
        suspend_signals: SuspendSignalHub,
        fake_clock: FakeClock,
        gate_open: list[bool],
    ) -> None:
        gate_open[0] = False
        seen: list[timedelta] = []
        tracker.elapsed_while_lost_focus.subscribe(seen.append)

        fake_clock.set(10.0)
        suspend_signals.focus_changed(False)
        fake_clock.set(42.0)
        suspend_signals.focus_changed(True)

        assert seen == []

    def test_second_suspend_overwrites_mark(
        self,
        tracker: SuspensionTracker,
        suspend_signals: SuspendSignalHub,
        fake_clock: FakeClock,
    ) -> None:
        seen: list[timedelta] = []
        tracker.elapsed_while_lost_focus.subscribe(seen.append)

        fake_clock.set(10.0)
        suspend_signals.focus_changed(False)
        fake_clock.set(20.0)
        suspend_signals.focus_changed(False)
        fake_clock.set(25.0)
        suspend_signals.focus_changed(True)

        assert tracker.mark(SuspendKind.FOCUS) == 20.0
        assert seen == [timedelta(seconds=5)]

    def test_resume_without_suspend_measures_from_start(
        self,
        tracker: SuspensionTracker,
        suspend_signals: SuspendSignalHub,
        fake_clock: FakeClock,
    ) -> None:
        seen: list[timedelta] = []
        tracker.elapsed_while_lost_focus.subscribe(seen.append)
        fake_clock.set(3.0)
        suspend_signals.focus_changed(True)
        assert seen == [timedelta(seconds=3)]


class TestPause:
    """Pause pair.

    Technique: State Transition Testing.
    """

    def test_round_trip_emits_elapsed(
        self,
        tracker: SuspensionTracker,
        suspend_signals: SuspendSignalHub,
        fake_clock: FakeClock,
    ) -> None:
        seen: list[timedelta] = []
        tracker.elapsed_while_paused.subscribe(seen.append)

        fake_clock.set(5.0)
        suspend_signals.paused_changed(True)
        fake_clock.set(65.0)
        suspend_signals.paused_changed(False)

        assert seen == [timedelta(seconds=60)]

    def test_pairs_are_independent(
        self,
        tracker: SuspensionTracker,
        suspend_signals: SuspendSignalHub,
        fake_clock: FakeClock,
    ) -> None:
        """Overlapping pause and focus loss each measure their own span."""
        focus: list[timedelta] = []
        paused: list[timedelta] = []
        tracker.elapsed_while_lost_focus.subscribe(focus.append)
        tracker.elapsed_while_paused.subscribe(paused.append)

        fake_clock.set(1.0)
        suspend_signals.focus_changed(False)
        fake_clock.set(2.0)
        suspend_signals.paused_changed(True)
        fake_clock.set(7.0)
        suspend_signals.paused_changed(False)
        fake_clock.set(11.0)
        suspend_signals.focus_changed(True)

        assert paused == [timedelta(seconds=5)]
        assert focus == [timedelta(seconds=10)]


class TestClose:
    """Unsubscription.

    Technique: State-based Testing.
    """

    def test_close_unsubscribes(
        self, tracker: SuspensionTracker, suspend_signals: SuspendSignalHub
    ) -> None:
        assert suspend_signals.focus_subscriber_count == 1
        assert suspend_signals.paused_subscriber_count == 1

        tracker.close()

        assert suspend_signals.focus_subscriber_count == 0
        assert suspend_signals.paused_subscriber_count == 0
        assert not tracker.subscribed

    def test_close_is_idempotent(
        self, tracker: SuspensionTracker, suspend_signals: SuspendSignalHub
    ) -> None:
        other: list[bool] = []
        suspend_signals.subscribe_focus_changed(other.append)

        tracker.close()
        tracker.close()

        assert suspend_signals.focus_subscriber_count == 1
        suspend_signals.focus_changed(True)
        assert other == [True]

    def test_no_events_after_close(
        self,
        tracker: SuspensionTracker,
        suspend_signals: SuspendSignalHub,
    ) -> None:
        seen: list[timedelta] = []
        tracker.elapsed_while_paused.subscribe(seen.append)
        tracker.close()
        suspend_signals.paused_changed(True)
        suspend_signals.paused_changed(False)
        assert seen == []
