"""Public test-support utilities for truetime.

Provided symbols:

- :class:`FakeClock` — settable monotonic clock.
- :class:`StubTimeSource` — scripted time source that counts calls.
- :class:`MemoryStore` — in-memory key-value store.
- :class:`SuspendSignalHub` — drive focus/pause transitions by hand.
- :func:`make_settings` — ``Settings`` without env vars or ``.env``.
"""

from truetime._signals import SuspendSignalHub
from truetime._storage import MemoryStore
from truetime.testing._clock import FakeClock
from truetime.testing._settings import make_settings
from truetime.testing._sources import StubTimeSource

__all__ = [
    "FakeClock",
    "MemoryStore",
    "StubTimeSource",
    "SuspendSignalHub",
    "make_settings",
]
