"""Tests for settings and logging configuration."""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError
from rich.logging import RichHandler

from cbt_author.config.logging_config import configure_logging
from cbt_author.config.settings import Settings


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self):
        """Test values with no environment."""
        settings = Settings()

        assert settings.api_base_url == "http://159.65.31.191/api"
        assert settings.request_timeout == 30.0
        assert settings.auth_token is None
        assert settings.token_file == Path.home() / ".cbt_author" / "token"
        assert settings.log_level == "WARNING"

    def test_reads_environment(self, monkeypatch):
        """Test the CBT_* variables."""
        monkeypatch.setenv("CBT_API_BASE_URL", "https://cbt.school.test/api")
        monkeypatch.setenv("CBT_TIMEZONE", "Africa/Lagos")
        monkeypatch.setenv("CBT_REQUEST_TIMEOUT", "12.5")

        settings = Settings()

        assert settings.api_base_url == "https://cbt.school.test/api"
        assert settings.timezone == "Africa/Lagos"
        assert settings.request_timeout == 12.5

    def test_rejects_bad_timeout(self, monkeypatch):
        """Test the timeout bounds."""
        monkeypatch.setenv("CBT_REQUEST_TIMEOUT", "0")

        with pytest.raises(ValidationError):
            Settings()


class TestConfigureLogging:
    """Test the Rich logging setup."""

    def test_sets_level_and_handler(self):
        """Test the package logger configuration."""
        logger = configure_logging("debug")

        assert logger.name == "cbt_author"
        assert logger.level == logging.DEBUG
        assert any(isinstance(h, RichHandler) for h in logger.handlers)

    def test_does_not_stack_handlers(self):
        """Test that repeated calls keep one Rich handler."""
        configure_logging()
        logger = configure_logging("INFO")

        assert sum(isinstance(h, RichHandler) for h in logger.handlers) == 1

    def test_unknown_level_falls_back_to_warning(self):
        """Test an unrecognised level name."""
        assert configure_logging("chatty").level == logging.WARNING
