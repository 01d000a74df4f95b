"""
Structured logging configuration
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from .settings import config_settings

PACKAGE_LOGGER = "survey_ab"


class JSONFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": config_settings.APP_NAME,
        }

        for field in ("survey_name", "survey_language", "record_id"):
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(level: str | None = None) -> logging.Logger:
    """
    Configure JSON logging on the package logger.

    Every module logs through ``logging.getLogger(__name__)``, so records from
    the whole package end up on this single stdout handler.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level or config_settings.LOG_LEVEL)

    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JSONFormatter())
    logger.addHandler(console_handler)

    logger.propagate = False

    return logger
