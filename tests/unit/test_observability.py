"""
Cloud Cache — Logging Setup Tests
"""

import json
import logging
from collections.abc import Generator

import pytest

from cloud_cache.config import load_config
from cloud_cache.observability import (
    PACKAGE_LOGGER,
    JSONFormatter,
    configure_logging,
    configure_logging_from_config,
)


@pytest.fixture
def restore_package_logger() -> Generator[None, None, None]:
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestLogging:
    """Test suite for logging configuration."""

    def test_json_formatter_includes_extra_fields(self) -> None:
        record = logging.LogRecord(
            name="cloud_cache.cache.lru",
            level=logging.DEBUG,
            pathname=__file__,
            lineno=10,
            msg="Evicted key from LRU store: %s",
            args=("k1",),
            exc_info=None,
        )
        record.max_size = 2

        payload = json.loads(JSONFormatter().format(record))

        assert payload["level"] == "DEBUG"
        assert payload["logger"] == "cloud_cache.cache.lru"
        assert payload["message"] == "Evicted key from LRU store: k1"
        assert payload["max_size"] == 2
        assert payload["timestamp"].endswith("Z")
        assert "args" not in payload

    @pytest.mark.usefixtures("restore_package_logger")
    def test_configure_logging_replaces_handlers(self) -> None:
        configure_logging("DEBUG")
        logger = configure_logging(logging.WARNING, json_format=True)

        assert logger.name == PACKAGE_LOGGER
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    @pytest.mark.usefixtures("restore_package_logger")
    def test_configure_logging_from_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        monkeypatch.setenv("LOG_FORMAT", "json")

        logger = configure_logging_from_config(load_config(reload=True))

        assert logger.level == logging.WARNING
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    @pytest.mark.usefixtures("restore_package_logger")
    def test_configure_logging_from_config_defaults_to_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        monkeypatch.delenv("LOG_FORMAT", raising=False)

        logger = configure_logging_from_config()

        assert logger.level == logging.ERROR
        assert not isinstance(logger.handlers[0].formatter, JSONFormatter)
