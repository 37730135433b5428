"""
Cloud Cache — Logging Setup

Structured logging for the cache package. Modules log through
``logging.getLogger(__name__)`` and pass context via ``extra=``; this module
installs a handler on the package logger, optionally emitting JSON lines.
"""

import json
import logging
from datetime import UTC, datetime
from typing import Any

from .config import CloudCacheConfig, get_config

PACKAGE_LOGGER = "cloud_cache"

# LogRecord attributes that are not user-supplied ``extra`` fields
_RESERVED_ATTRS = frozenset(
    {
        "args",
        "msg",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "name",
        "message",
        "asctime",
    }
)


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add any extra fields from record.__dict__
        for key, value in record.__dict__.items():
            if key not in log_data and not key.startswith("_") and key not in _RESERVED_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def configure_logging(level: str | int = logging.INFO, json_format: bool = False) -> logging.Logger:
    """
    Install a stream handler on the package logger.

    Calling it again replaces the previous handler.

    Args:
        level: Log level name or number
        json_format: Emit JSON lines instead of plain text

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler()
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)

    return logger


def configure_logging_from_config(config: CloudCacheConfig | None = None) -> logging.Logger:
    """
    Apply the LOG_LEVEL / LOG_FORMAT settings of a loaded configuration.

    Args:
        config: Configuration to apply (default: the environment configuration)

    Returns:
        The configured package logger
    """
    config = config or get_config()
    return configure_logging(config.log_level, json_format=config.json_logs)
