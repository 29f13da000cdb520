"""JSON logging for rapiddelete."""

import json
import logging
import sys
from typing import Any, Dict, Optional


class JsonFormatter(logging.Formatter):
    """Render each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        """Format LogRecord into JSON string."""
        log_obj: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_obj["error"] = self.formatException(record.exc_info)
            log_obj["error_type"] = record.exc_info[0].__name__ if record.exc_info[0] else None

        if hasattr(record, "extra_fields"):
            log_obj["extra_fields"] = record.extra_fields

        return json.dumps(log_obj, default=str)


def parse_level(level: str) -> int:
    """Map a level name such as "info" to its numeric value."""
    level_value = logging.getLevelName(level.strip().upper())
    if not isinstance(level_value, int):
        raise ValueError(f"Unknown log level: {level}")
    return level_value


def setup_logging(logger_name: str = "rapiddelete", level: str | None = None) -> logging.Logger:
    """
    Attach the JSON handler to the library logger.

    The handler is added once per process. The logger's level is only
    changed when level is given; with None, whatever the application
    configured (or the root logger's level) stays in effect.

    Args:
        logger_name: Name of the logger
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL) or None

    Returns:
        Configured logger instance

    Raises:
        ValueError: If level is not a known logging level name
    """
    logger = logging.getLogger(logger_name)
    if level is not None:
        logger.setLevel(parse_level(level))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)

    return logger


def log_with_context(
    logger: logging.Logger, level: str, message: str, extra: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log message with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (info, warning, error, etc.)
        message: Log message
        extra: Additional context fields to include in JSON output
    """
    if extra is None:
        extra = {}

    log_method = getattr(logger, level.lower())
    log_method(message, extra={"extra_fields": extra})
