"""Tests for application settings and logging setup."""

import logging

import pytest
import structlog

from py_isle.config import Settings, settings
from py_isle.utils.logging import configure_logging


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        for name in ("ISLE_LOG_LEVEL", "ISLE_LOG_FORMAT", "ISLE_DEFAULT_MAP_WIDTH"):
            monkeypatch.delenv(name, raising=False)
        s = Settings(_env_file=None)
        assert s.log_level == "INFO"
        assert s.log_format == "console"
        assert s.default_map_width == 800
        assert s.default_map_height == 600
        assert s.default_num_points == 2000

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("ISLE_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("ISLE_DEFAULT_NUM_POINTS", "750")
        s = Settings(_env_file=None)
        assert s.log_level == "DEBUG"
        assert s.default_num_points == 750

    def test_invalid_env(self, monkeypatch):
        monkeypatch.setenv("ISLE_DEFAULT_MAP_WIDTH", "0")
        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_singleton(self):
        assert isinstance(settings, Settings)


class TestConfigureLogging:
    """Test structlog configuration."""

    @pytest.fixture(autouse=True)
    def restore(self):
        yield
        structlog.reset_defaults()

    def test_level(self):
        configure_logging(level="warning", fmt="console")
        assert logging.getLogger().level == logging.WARNING

    def test_json_renderer(self):
        configure_logging(level="INFO", fmt="json")
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer(self):
        configure_logging(level="INFO", fmt="console")
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_defaults_from_settings(self):
        configure_logging()
        assert logging.getLogger().level == logging.getLevelName(settings.log_level.upper())
