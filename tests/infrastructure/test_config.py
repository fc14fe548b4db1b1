"""Tests for settings and logging setup."""

import logging
from pathlib import Path

import pytest
import structlog

from fulfillment.infrastructure.config import Settings, get_settings
from fulfillment.infrastructure.logging import configure_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FULFILLMENT_DATA_DIR", raising=False)
        settings = Settings()
        assert settings.order_number_max_attempts == 100
        assert settings.order_number_padding == 5
        assert settings.max_page_size == 100
        assert settings.data_dir.name == "data"

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FULFILLMENT_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("FULFILLMENT_MAX_PAGE_SIZE", "25")

        settings = get_settings()

        assert settings.data_dir == Path(tmp_path)
        assert settings.max_page_size == 25


class TestConfigureLogging:

    def test_production_renders_json(self, restore_logging):
        configure_logging(Settings(environment="production", log_level="warning"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert logging.getLogger().level == logging.WARNING

    def test_development_renders_console(self, restore_logging):
        configure_logging(Settings(environment="development"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert len(logging.getLogger().handlers) == 1
