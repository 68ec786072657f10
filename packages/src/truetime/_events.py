"""Synchronous publish/subscribe event.

:class:`Event` holds an ordered list of callbacks and invokes them in
subscription order on :meth:`Event.emit`.  It is the observable surface
of the time authority (``elapsed_while_lost_focus``,
``elapsed_while_paused``) and of :class:`~truetime.SuspendSignalHub`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Event(Generic[T]):
    """Ordered, synchronous broadcast to zero or more subscribers.

    Subscribing the same callback twice registers it twice; each
    :meth:`unsubscribe` removes one registration.  Unsubscribing a
    callback that is not registered is a no-op.

    Subscriber exceptions propagate to the emitter, the same way a
    failing handler would surface in any direct call.

    Usage::

        paused = Event[timedelta]("paused")
        paused.subscribe(lambda d: print(d))
        paused.emit(timedelta(seconds=3))
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._subscribers: list[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> None:
        """Register *callback* to be invoked on every emission."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[T], None]) -> None:
        """Remove one registration of *callback*, if present."""
        try:
            self._subscribers.remove(callback)
        except ValueError:
            logger.debug("Event %r: unsubscribe of unknown callback ignored", self.name)

    def emit(self, value: T) -> None:
        """Invoke every subscriber with *value*, in subscription order."""
        # Copy so a subscriber may unsubscribe itself while being called.
        for callback in list(self._subscribers):
            callback(value)

    def clear(self) -> None:
        """Drop all subscribers."""
        self._subscribers.clear()

    @property
    def subscriber_count(self) -> int:
        """Number of registered callbacks."""
        return len(self._subscribers)

    def __repr__(self) -> str:
        return f"Event(name={self.name!r}, subscribers={len(self._subscribers)})"
