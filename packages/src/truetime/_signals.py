"""Host pause/focus notification port and an in-process hub.

The host (game loop, GUI toolkit, mobile lifecycle, ...) tells truetime
when the application loses or regains focus and when it is paused or
resumed.  :class:`SuspendSignalPort` is the subscription contract the
suspension tracker depends on; :class:`SuspendSignalHub` is a ready-made
implementation the host feeds by calling :meth:`~SuspendSignalHub.focus_changed`
and :meth:`~SuspendSignalHub.paused_changed` from its own callbacks.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from truetime._events import Event

logger = logging.getLogger(__name__)

SignalCallback = Callable[[bool], None]
"""Receives ``has_focus`` (focus signal) or ``is_paused`` (pause signal)."""


@runtime_checkable
class SuspendSignalPort(Protocol):
    """Subscription contract for focus and pause transitions."""

    def subscribe_focus_changed(self, callback: SignalCallback) -> None: ...

    def unsubscribe_focus_changed(self, callback: SignalCallback) -> None: ...

    def subscribe_paused_changed(self, callback: SignalCallback) -> None: ...

    def unsubscribe_paused_changed(self, callback: SignalCallback) -> None: ...


class SuspendSignalHub:
    """Broadcasts host focus/pause transitions to subscribers.

    Usage::

        hub = SuspendSignalHub()
        authority = TimeAuthority(sources, store, hub)

        # in the host's lifecycle callbacks
        hub.focus_changed(False)
        hub.focus_changed(True)
    """

    def __init__(self) -> None:
        self._focus = Event[bool]("focus_changed")
        self._paused = Event[bool]("paused_changed")

    def subscribe_focus_changed(self, callback: SignalCallback) -> None:
        self._focus.subscribe(callback)

    def unsubscribe_focus_changed(self, callback: SignalCallback) -> None:
        self._focus.unsubscribe(callback)

    def subscribe_paused_changed(self, callback: SignalCallback) -> None:
        self._paused.subscribe(callback)

    def unsubscribe_paused_changed(self, callback: SignalCallback) -> None:
        self._paused.unsubscribe(callback)

    def focus_changed(self, has_focus: bool) -> None:
        """Deliver a focus transition to every subscriber."""
        logger.debug("Focus changed: has_focus=%s", has_focus)
        self._focus.emit(has_focus)

    def paused_changed(self, is_paused: bool) -> None:
        """Deliver a pause transition to every subscriber."""
        logger.debug("Pause changed: is_paused=%s", is_paused)
        self._paused.emit(is_paused)

    @property
    def focus_subscriber_count(self) -> int:
        return self._focus.subscriber_count

    @property
    def paused_subscriber_count(self) -> int:
        return self._paused.subscriber_count
