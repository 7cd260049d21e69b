"""
Tests for settings and logging configuration.
"""

import structlog

from atomfeed.config import Settings, get_settings
from atomfeed.logging import configure_logging, get_logger


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ATOMFEED_LOG_LEVEL", raising=False)
        monkeypatch.delenv("ATOMFEED_LOG_FORMAT", raising=False)
        settings = Settings()
        assert settings.log_level == "INFO"
        assert settings.log_format == "json"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("ATOMFEED_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("ATOMFEED_LOG_FORMAT", "console")
        settings = Settings()
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "console"

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()


class TestLogging:
    """Test structlog configuration."""

    def teardown_method(self):
        structlog.reset_defaults()

    def test_configure_console(self):
        configure_logging(Settings(log_level="DEBUG", log_format="console"))
        assert structlog.is_configured()
        get_logger("atomfeed.test").debug("Console logging configured")

    def test_configure_json(self):
        configure_logging(Settings(log_level="INFO", log_format="json"))
        get_logger("atomfeed.test").info("JSON logging configured", feed_id="urn:feed")
        # Output goes through stdlib logging, which may already be configured
        assert structlog.is_configured()
