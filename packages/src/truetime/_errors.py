"""Exception hierarchy for truetime.

The reconciliation core never lets a failure escape as an exception:
resolution failures are reported as ``ResolvedTime(succeeded=False)``
and clock regressions are logged and handled by policy.  Exceptions
exist at the edges:

- :class:`SourceUnavailableError` — for custom or third-party time
  sources that cannot produce a timestamp; the built-in sources return
  a failed ``ResolvedTime`` instead.  The waterfall resolver catches it
  and moves on to the next source.
- :class:`AllSourcesExhaustedError` — raised by
  :meth:`ResolvedTime.unwrap` for callers that prefer exceptions over
  checking ``succeeded``.
- :class:`StoreError` — raised by a key-value store whose backing data
  is unusable.
"""

from __future__ import annotations


class TruetimeError(Exception):
    """Base class for all truetime errors."""


class SourceUnavailableError(TruetimeError):
    """A custom or third-party time source failed to produce a timestamp.

    Args:
        source: Name of the failing source.
        reason: Human-readable cause.
    """

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"time source '{source}' unavailable: {reason}")
        self.source = source
        self.reason = reason


class AllSourcesExhaustedError(TruetimeError):
    """Every configured time source failed."""

    def __init__(self) -> None:
        super().__init__("all time sources failed")


class StoreError(TruetimeError):
    """Persistent key-value storage is unreadable or corrupt."""
