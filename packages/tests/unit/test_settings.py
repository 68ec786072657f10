"""Unit tests for truetime._settings — configuration models.

Test Techniques Used:
    - Specification-based Testing: Default values
    - Boundary Value Analysis: Timeout and rotation constraints
    - Environment Override: monkeypatch for env var injection
    - Validation Error: pydantic constraint violations
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from truetime._settings import (
    LoggingSettings,
    RegressionPolicy,
    Settings,
    SourceSettings,
    StorageSettings,
)


class TestDefaults:
    """Model defaults.

    Technique: Specification-based Testing.
    """

    def test_logging_defaults(self) -> None:
        s = LoggingSettings()
        assert s.level == "INFO"
        assert s.format == "text"
        assert s.file is None

    def test_storage_defaults(self) -> None:
        s = StorageSettings()
        assert s.path == "truetime.json"
        assert s.anchor_key == "truetime.last_recorded_utc"
        assert s.first_run_key == "truetime.first_run"

    def test_source_defaults(self) -> None:
        s = SourceSettings()
        assert s.http_urls == []
        assert s.timeout == 5.0
        assert s.allow_system_clock is True

    def test_regression_policy_default(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.regression_policy is RegressionPolicy.STAY_UNINITIALIZED


class TestValidation:
    """Field constraints.

    Technique: Boundary Value Analysis.
    """

    @pytest.mark.parametrize("timeout", [0, -1.0])
    def test_timeout_must_be_positive(self, timeout: float) -> None:
        with pytest.raises(ValidationError):
            SourceSettings(timeout=timeout)

    def test_empty_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            StorageSettings(anchor_key="")

    def test_invalid_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoggingSettings(level="VERBOSE")  # type: ignore[arg-type]

    def test_max_file_size_at_least_one(self) -> None:
        with pytest.raises(ValidationError):
            LoggingSettings(max_file_size_mb=0)

    def test_policy_accepts_string(self) -> None:
        s = Settings(_env_file=None, regression_policy="mark_initialized")  # type: ignore[call-arg]
        assert s.regression_policy is RegressionPolicy.MARK_INITIALIZED


class TestEnvironment:
    """Loading from TRUETIME_* variables and .env files.

    Technique: Environment Override.
    """

    def test_nested_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TRUETIME_STORAGE__PATH", "/tmp/x.json")
        monkeypatch.setenv("TRUETIME_SOURCES__HTTP_URLS", '["https://a.test"]')
        monkeypatch.setenv("TRUETIME_REGRESSION_POLICY", "mark_initialized")

        s = Settings(_env_file=None)  # type: ignore[call-arg]

        assert s.storage.path == "/tmp/x.json"
        assert s.sources.http_urls == ["https://a.test"]
        assert s.regression_policy is RegressionPolicy.MARK_INITIALIZED

    def test_unprefixed_vars_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STORAGE__PATH", "/tmp/ignored.json")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.storage.path == "truetime.json"

    def test_env_file(self, tmp_path: Path) -> None:
        env = tmp_path / ".env"
        env.write_text("TRUETIME_LOGGING__LEVEL=DEBUG\n", encoding="utf-8")
        s = Settings(_env_file=env)  # type: ignore[call-arg]
        assert s.logging.level == "DEBUG"
