"""Key-value storage port and adapters.

Provides KeyValueStore (Protocol) and two implementations:

- MemoryStore — in-process dict; tests and hosts without persistence
- JsonFileStore — a JSON object in a file, rewritten atomically on
  every mutation

Missing keys are never errors: getters return the caller's default.
Writes are last-writer-wins with no compare-and-swap; a single process
is assumed to own the store at a time.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from truetime._errors import StoreError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Port (Protocol)
# ---------------------------------------------------------------------------


@runtime_checkable
class KeyValueStore(Protocol):
    """Port contract for string/int persistence keyed by name."""

    def get_string(self, key: str, default: str) -> str: ...

    def set_string(self, key: str, value: str) -> None: ...

    def get_int(self, key: str, default: int) -> int: ...

    def set_int(self, key: str, value: int) -> None: ...

    def delete_key(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# In-memory adapter
# ---------------------------------------------------------------------------


@dataclass
class MemoryStore:
    """Dict-backed store.

    ``data`` is public so tests can seed or inspect raw values.
    """

    data: dict[str, str | int] = field(default_factory=dict)

    def get_string(self, key: str, default: str) -> str:
        value = self.data.get(key, default)
        return value if isinstance(value, str) else default

    def set_string(self, key: str, value: str) -> None:
        self.data[key] = value

    def get_int(self, key: str, default: int) -> int:
        value = self.data.get(key, default)
        return value if isinstance(value, int) else default

    def set_int(self, key: str, value: int) -> None:
        self.data[key] = value

    def delete_key(self, key: str) -> None:
        self.data.pop(key, None)

    def has_key(self, key: str) -> bool:
        return key in self.data


# ---------------------------------------------------------------------------
# JSON file adapter
# ---------------------------------------------------------------------------


class JsonFileStore:
    """Store persisted as a single JSON object on disk.

    The file is read once on construction and rewritten on every
    mutation via a temporary file and :func:`os.replace`, so a crash
    mid-write leaves the previous contents intact.

    Args:
        path: Location of the JSON file.  Missing files (and missing
            parent directories) are created on first write.

    Raises:
        StoreError: If the file exists but does not hold a JSON object.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._data = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str | int]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as exc:
            raise StoreError(f"{self._path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise StoreError(f"{self._path} must contain a JSON object")
        return data

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, indent=2, sort_keys=True)
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        logger.debug("Flushed %d keys to %s", len(self._data), self._path)

    def get_string(self, key: str, default: str) -> str:
        value = self._data.get(key, default)
        return value if isinstance(value, str) else default

    def set_string(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def get_int(self, key: str, default: int) -> int:
        value = self._data.get(key, default)
        # bool is an int subclass; JSON true/false are not valid ints here
        if isinstance(value, bool) or not isinstance(value, int):
            return default
        return value

    def set_int(self, key: str, value: int) -> None:
        self._data[key] = int(value)
        self._flush()

    def delete_key(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def __repr__(self) -> str:
        return f"JsonFileStore(path={str(self._path)!r})"
