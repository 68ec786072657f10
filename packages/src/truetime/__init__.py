"""truetime.

Trusted UTC time for processes that cannot trust their local clock:
waterfall resolution over time sources, a persistent anchor that
survives restarts, and accounting of time spent closed, paused or
unfocused.
"""

from importlib.metadata import PackageNotFoundError, version

from truetime._anchor import Anchor, AnchorStore
from truetime._authority import AuthorityState, TimeAuthority
from truetime._clock import ClockPort, SystemClock
from truetime._errors import (
    AllSourcesExhaustedError,
    SourceUnavailableError,
    StoreError,
    TruetimeError,
)
from truetime._events import Event
from truetime._logging import JsonFormatter, configure_logging
from truetime._resolver import WaterfallResolver, resolve_local, resolve_utc
from truetime._settings import (
    LoggingSettings,
    RegressionPolicy,
    Settings,
    SourceSettings,
    StorageSettings,
)
from truetime._signals import SuspendSignalHub, SuspendSignalPort
from truetime._sources import (
    HttpDateTimeSource,
    ResolvedTime,
    SystemTimeSource,
    TimeSource,
    build_sources,
)
from truetime._storage import JsonFileStore, KeyValueStore, MemoryStore
from truetime._suspension import SuspendKind, SuspensionTracker

try:
    __version__ = version("truetime")
except PackageNotFoundError:
    # Source checkout without installed metadata
    __version__ = "0.0.0+unknown"

__all__ = [
    # Version
    "__version__",
    # Authority
    "AuthorityState",
    "TimeAuthority",
    # Anchor
    "Anchor",
    "AnchorStore",
    # Clock
    "ClockPort",
    "SystemClock",
    # Errors
    "AllSourcesExhaustedError",
    "SourceUnavailableError",
    "StoreError",
    "TruetimeError",
    # Events
    "Event",
    # Logging
    "JsonFormatter",
    "configure_logging",
    # Resolution
    "WaterfallResolver",
    "resolve_local",
    "resolve_utc",
    # Settings
    "LoggingSettings",
    "RegressionPolicy",
    "Settings",
    "SourceSettings",
    "StorageSettings",
    # Signals
    "SuspendSignalHub",
    "SuspendSignalPort",
    # Sources
    "HttpDateTimeSource",
    "ResolvedTime",
    "SystemTimeSource",
    "TimeSource",
    "build_sources",
    # Storage
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    # Suspension
    "SuspendKind",
    "SuspensionTracker",
]
