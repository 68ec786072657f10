"""Configuration via pydantic-settings.

Configuration is loaded from environment variables prefixed with
``TRUETIME_`` and/or a ``.env`` file.  Nested models use ``__`` as the
delimiter, e.g. ``TRUETIME_STORAGE__PATH=/var/lib/app/time.json``.

The schema covers four concerns:

* **Logging** — level, format, optional file sink, rotation.
* **Storage** — where the anchor lives and under which keys.
* **Sources** — the ordered waterfall of time sources.
* **Regression policy** — what ``initialize()`` does when a source
  returns a time that is not newer than the stored anchor.

All durations are in **seconds**.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RegressionPolicy(StrEnum):
    """Outcome of ``initialize()`` when the resolved time is not newer.

    ``STAY_UNINITIALIZED`` leaves the authority uninitialized so the
    caller retries later.  ``MARK_INITIALIZED`` accepts the stored
    anchor as-is: the authority becomes initialized but neither the
    anchor nor the elapsed-while-closed value changes.
    """

    STAY_UNINITIALIZED = "stay_uninitialized"
    MARK_INITIALIZED = "mark_initialized"


# -------------------------------------------------------------------
# Sub-models (BaseModel, NOT BaseSettings — nested via composition)
# -------------------------------------------------------------------


class LoggingSettings(BaseModel):
    """Logging configuration.

    When ``file`` is set, logs are also written to a rotating file
    (``max_file_size_mb`` per file, ``backup_count`` generations kept).
    When ``None``, logs go to stderr only.

    ``format`` is ``"json"`` for one JSON object per line or
    ``"text"`` for human-readable lines.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level.",
    )
    format: Literal["json", "text"] = Field(
        default="text",
        description="Log output format: 'json' lines or human-readable 'text'.",
    )
    file: str | None = Field(
        default=None,
        description="Optional log file path. ``None`` means stderr only.",
    )
    max_file_size_mb: Annotated[int, Field(ge=1)] = Field(
        default=10,
        description="Maximum log file size in megabytes before rotation.",
    )
    backup_count: Annotated[int, Field(ge=0)] = Field(
        default=3,
        description="Number of rotated log files to keep.",
    )


class StorageSettings(BaseModel):
    """Persistent anchor storage.

    Environment variables::

        TRUETIME_STORAGE__PATH=/var/lib/myapp/truetime.json
        TRUETIME_STORAGE__ANCHOR_KEY=myapp.anchor
    """

    path: str = Field(
        default="truetime.json",
        description="JSON file backing the key-value store.",
    )
    anchor_key: str = Field(
        default="truetime.last_recorded_utc",
        min_length=1,
        description="Key holding the ISO-8601 anchor instant.",
    )
    first_run_key: str = Field(
        default="truetime.first_run",
        min_length=1,
        description="Key holding the first-run flag (0/1).",
    )


class SourceSettings(BaseModel):
    """Ordered waterfall of time sources.

    HTTP sources are consulted first, in the order given; the device
    clock is appended as the last resort when ``allow_system_clock``
    is true.

    Environment variables::

        TRUETIME_SOURCES__HTTP_URLS='["https://www.google.com"]'
        TRUETIME_SOURCES__TIMEOUT=3
    """

    http_urls: list[str] = Field(
        default_factory=list,
        description="URLs whose HTTP 'Date' response header is trusted.",
    )
    timeout: Annotated[float, Field(gt=0)] = Field(
        default=5.0,
        description="Per-request timeout for HTTP sources, in seconds.",
    )
    allow_system_clock: bool = Field(
        default=True,
        description="Fall back to the device clock when all other sources fail.",
    )


# -------------------------------------------------------------------
# Root settings
# -------------------------------------------------------------------


class Settings(BaseSettings):
    """Root settings for truetime.

    Loaded from ``TRUETIME_``-prefixed environment variables with the
    nested delimiter ``__`` and an optional ``.env`` file.

    Example ``.env``::

        TRUETIME_LOGGING__LEVEL=DEBUG
        TRUETIME_STORAGE__PATH=/tmp/truetime.json
        TRUETIME_SOURCES__HTTP_URLS='["https://example.com"]'
        TRUETIME_REGRESSION_POLICY=mark_initialized
    """

    model_config = SettingsConfigDict(
        env_prefix="TRUETIME_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration.",
    )
    storage: StorageSettings = Field(
        default_factory=StorageSettings,
        description="Anchor storage configuration.",
    )
    sources: SourceSettings = Field(
        default_factory=SourceSettings,
        description="Time source waterfall configuration.",
    )
    regression_policy: RegressionPolicy = Field(
        default=RegressionPolicy.STAY_UNINITIALIZED,
        description="Behaviour of initialize() when the resolved time is not newer.",
    )
