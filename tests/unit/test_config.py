"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from avdcheck.core.config import Settings, get_settings


class TestSettings:
    """Test suite for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        for var in ("RUN_TIMEOUT_SECONDS", "MAX_PARALLEL_CHECKS", "LOG_LEVEL", "LOG_FILE"):
            monkeypatch.delenv(var, raising=False)

        settings = Settings(_env_file=None)

        assert settings.run_timeout_seconds == 120.0
        assert settings.max_parallel_checks == 4
        assert settings.log_level == "INFO"
        assert settings.log_file is None

    def test_reads_environment(self, monkeypatch):
        """Test values are parsed from environment variables."""
        monkeypatch.setenv("AZURE_TENANT_ID", "tenant-1")
        monkeypatch.setenv("AZURE_SUBSCRIPTION_ID", "sub-1")
        monkeypatch.setenv("RUN_TIMEOUT_SECONDS", "30")
        monkeypatch.setenv("MAX_PARALLEL_CHECKS", "2")

        settings = get_settings()

        assert settings.azure_tenant_id == "tenant-1"
        assert settings.azure_subscription_id == "sub-1"
        assert settings.run_timeout_seconds == 30.0
        assert settings.max_parallel_checks == 2

    def test_log_level_normalized(self):
        """Test log level names are upper-cased and unknown names fall back to INFO."""
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"
        assert Settings(_env_file=None, log_level="chatty").log_level == "INFO"

    def test_invalid_limits_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_parallel_checks=0)
        with pytest.raises(ValidationError):
            Settings(_env_file=None, run_timeout_seconds=-1)

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()
