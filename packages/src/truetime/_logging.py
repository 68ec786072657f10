"""Log formatting and root-logger configuration.

Library modules only ever call ``logging.getLogger(__name__)``; handlers
are installed by the application (or the ``truetime`` CLI) through
:func:`configure_logging`.

Two formats are supported:

- ``"text"`` — ``asctime [LEVEL] logger: message`` for terminals.
- ``"json"`` — one JSON object per line via :class:`JsonFormatter`.
  Reconciliation events pass structured context through ``extra=``
  (``source``, ``anchor``, ``resolved``, ``elapsed_s``); the formatter
  copies those keys into the JSON object when present.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from typing import Any

from truetime._settings import LoggingSettings

_MB = 1024 * 1024

_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

STRUCTURED_FIELDS: tuple[str, ...] = ("source", "anchor", "resolved", "elapsed_s")
"""``extra=`` keys that :class:`JsonFormatter` lifts into its output."""


class JsonFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects.

    Fields: ``timestamp`` (UTC ISO 8601, from the *device* clock, since
    the log record is created outside any time authority), ``level``,
    ``logger``, ``message``, ``service``, ``version`` (omitted when
    empty), any of :data:`STRUCTURED_FIELDS` set on the record, and
    ``exception`` when a traceback is attached.

    Args:
        service: Application name included in every log line.
        version: Application version string.
    """

    def __init__(self, *, service: str = "", version: str = "") -> None:
        super().__init__()
        self._service = service
        self._version = version

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self._service,
        }
        if self._version:
            entry["version"] = self._version

        for key in STRUCTURED_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def configure_logging(
    settings: LoggingSettings,
    *,
    service: str = "truetime",
    version: str = "",
) -> None:
    """Replace the root logger's handlers according to *settings*.

    A stderr handler is always installed; a rotating file handler is
    added when ``settings.file`` is set.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if settings.format == "json":
        formatter: logging.Formatter = JsonFormatter(service=service, version=version)
    else:
        formatter = logging.Formatter(_TEXT_FORMAT)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if settings.file is not None:
        file_handler = RotatingFileHandler(
            settings.file,
            maxBytes=settings.max_file_size_mb * _MB,
            backupCount=settings.backup_count,
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.setLevel(settings.level)
