"""Persistent anchor: the last trusted UTC instant plus its monotonic pair.

An anchor turns one trusted timestamp into a clock: the current UTC time
is the anchor instant plus however many monotonic seconds have passed
since it was recorded.  Only the instant is persisted (as an ISO-8601
round-trip string); the monotonic reading is meaningless in another
process and starts at ``0.0`` until this process writes an anchor of
its own.

Persisted layout::

    {anchor_key}     -> "2026-10-17T08:30:00.123456+00:00"
    {first_run_key}  -> 1 | 0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from truetime._clock import ClockPort
from truetime._storage import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_ANCHOR_KEY = "truetime.last_recorded_utc"
DEFAULT_FIRST_RUN_KEY = "truetime.first_run"


@dataclass(frozen=True, slots=True)
class Anchor:
    """An absolute UTC instant and the monotonic reading taken with it."""

    utc_instant: datetime
    monotonic_at_recording: float

    def extrapolate(self, monotonic_now: float) -> datetime:
        """Project the instant forward to *monotonic_now*."""
        return self.utc_instant + timedelta(
            seconds=monotonic_now - self.monotonic_at_recording
        )


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class AnchorStore:
    """Reads and writes the anchor and the first-run flag.

    The monotonic pair lives on this instance, not in *store*.  One store
    (or one pair of keys) must therefore have a single owning
    ``AnchorStore``: an instant written by another owner is paired with
    this instance's reading and extrapolates wrongly.  Reading such an
    instant logs a WARNING once per foreign value.

    Args:
        store: Backing key-value store.
        clock: Monotonic clock paired with every anchor write.
        anchor_key: Key for the ISO-8601 instant.
        first_run_key: Key for the 0/1 first-run flag.
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: ClockPort,
        *,
        anchor_key: str = DEFAULT_ANCHOR_KEY,
        first_run_key: str = DEFAULT_FIRST_RUN_KEY,
    ) -> None:
        self._store = store
        self._clock = clock
        self._anchor_key = anchor_key
        self._first_run_key = first_run_key
        self._monotonic_at_recording = 0.0
        self._written: str | None = None
        self._foreign: str | None = None

    def read_anchor(self) -> Anchor:
        """Return the current anchor.

        With nothing persisted (or an unreadable value), the anchor
        defaults to the device's UTC time paired with the current
        monotonic reading, so :meth:`now` reads as the device clock.
        """
        raw = self._store.get_string(self._anchor_key, "")
        instant: datetime | None = None
        if raw:
            try:
                instant = _to_utc(datetime.fromisoformat(raw))
            except ValueError:
                logger.warning(
                    "Discarding unreadable anchor %r under key %s", raw, self._anchor_key
                )
        if instant is None:
            return Anchor(datetime.now(UTC), self._clock.now())
        if self._written is not None and raw != self._written:
            self._warn_foreign(raw)
        return Anchor(instant, self._monotonic_at_recording)

    def write_anchor(self, instant: datetime) -> Anchor:
        """Persist *instant* paired with the current monotonic reading.

        Returns:
            The anchor that was written.
        """
        instant = _to_utc(instant)
        # The reading and the write belong together; nothing may run in between.
        self._monotonic_at_recording = self._clock.now()
        self._store.set_string(self._anchor_key, instant.isoformat())
        self._written = instant.isoformat()
        logger.debug(
            "Anchor written: %s at monotonic %.3f",
            instant.isoformat(),
            self._monotonic_at_recording,
            extra={"anchor": instant.isoformat()},
        )
        return Anchor(instant, self._monotonic_at_recording)

    def _warn_foreign(self, raw: str) -> None:
        if raw == self._foreign:
            return
        self._foreign = raw
        logger.warning(
            "Anchor under key %s was rewritten by another owner (%s, expected %s);"
            " extrapolation is unreliable until this process re-anchors",
            self._anchor_key,
            raw,
            self._written,
            extra={"anchor": raw},
        )

    def has_anchor(self) -> bool:
        """Whether an anchor instant is persisted."""
        return bool(self._store.get_string(self._anchor_key, ""))

    def read_first_run(self) -> bool:
        return bool(self._store.get_int(self._first_run_key, 1))

    def write_first_run(self, value: bool) -> None:
        self._store.set_int(self._first_run_key, int(value))

    def now(self) -> datetime:
        """Current UTC time extrapolated from the anchor."""
        return self.read_anchor().extrapolate(self._clock.now())

    def clear(self) -> None:
        """Delete both keys, restoring pre-first-run semantics."""
        self._store.delete_key(self._anchor_key)
        self._store.delete_key(self._first_run_key)
        logger.info("Persistent time data cleared")
