"""Suspension accounting for focus loss and pause.

Two independent ``Active <-> Suspended`` pairs, one per kind.  The
suspending signal records a *suspend mark* (the monotonic reading at
that moment); the resuming signal measures the distance back to the
mark and broadcasts it as a :class:`~datetime.timedelta`.

Behaviour worth knowing:

- Emission is gated.  While the gate (normally "the time authority is
  initialized") is closed, a resume produces **no event at all**, not
  a zero duration.
- One mark per kind.  Two suspends of the same kind in a row overwrite
  the mark; the earlier instant is lost.
- A resume with no preceding suspend in this process measures from
  monotonic ``0.0``, i.e. process start.
- Handlers only read the clock and broadcast; they never block on I/O
  and never touch the anchor.  Reconciling the anchor on resume is the
  caller's job (``TimeAuthority.refresh()``).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import timedelta
from enum import StrEnum

from truetime._clock import ClockPort
from truetime._events import Event
from truetime._signals import SuspendSignalPort

logger = logging.getLogger(__name__)


class SuspendKind(StrEnum):
    FOCUS = "focus"
    PAUSE = "pause"


class SuspensionTracker:
    """Turns focus/pause transitions into elapsed-time events.

    Subscribes to *signals* on construction; :meth:`close` unsubscribes
    and is safe to call repeatedly.

    Args:
        signals: Host notification port.
        clock: Monotonic clock used for suspend marks.
        gate: Emission is suppressed while this returns ``False``.
    """

    def __init__(
        self,
        signals: SuspendSignalPort,
        clock: ClockPort,
        gate: Callable[[], bool] = lambda: True,
    ) -> None:
        self._signals = signals
        self._clock = clock
        self._gate = gate
        self._marks: dict[SuspendKind, float] = {
            SuspendKind.FOCUS: 0.0,
            SuspendKind.PAUSE: 0.0,
        }
        self._suspended: dict[SuspendKind, bool] = {
            SuspendKind.FOCUS: False,
            SuspendKind.PAUSE: False,
        }
        self.elapsed_while_lost_focus = Event[timedelta]("elapsed_while_lost_focus")
        self.elapsed_while_paused = Event[timedelta]("elapsed_while_paused")

        signals.subscribe_focus_changed(self._on_focus_changed)
        signals.subscribe_paused_changed(self._on_paused_changed)
        self._subscribed = True

    def mark(self, kind: SuspendKind) -> float:
        """The last suspend mark recorded for *kind*."""
        return self._marks[kind]

    def is_suspended(self, kind: SuspendKind) -> bool:
        return self._suspended[kind]

    @property
    def subscribed(self) -> bool:
        return self._subscribed

    def _suspend(self, kind: SuspendKind) -> None:
        self._marks[kind] = self._clock.now()
        self._suspended[kind] = True

    def _resume(self, kind: SuspendKind, event: Event[timedelta]) -> None:
        elapsed = timedelta(seconds=self._clock.now() - self._marks[kind])
        self._suspended[kind] = False
        if not self._gate():
            logger.debug("Suppressed %s resume event (%s): not initialized", kind, elapsed)
            return
        logger.debug(
            "Elapsed while %s suspended: %s",
            kind,
            elapsed,
            extra={"elapsed_s": elapsed.total_seconds()},
        )
        event.emit(elapsed)

    def _on_focus_changed(self, has_focus: bool) -> None:
        if has_focus:
            self._resume(SuspendKind.FOCUS, self.elapsed_while_lost_focus)
        else:
            self._suspend(SuspendKind.FOCUS)

    def _on_paused_changed(self, is_paused: bool) -> None:
        if is_paused:
            self._suspend(SuspendKind.PAUSE)
        else:
            self._resume(SuspendKind.PAUSE, self.elapsed_while_paused)

    def close(self) -> None:
        """Unsubscribe from the signal port.  Idempotent."""
        if not self._subscribed:
            return
        self._signals.unsubscribe_focus_changed(self._on_focus_changed)
        self._signals.unsubscribe_paused_changed(self._on_paused_changed)
        self._subscribed = False
