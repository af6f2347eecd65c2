"""Structured logging configuration for the USSD gateway."""

import logging
import logging.config
import re
from typing import Any

LOGGER_NAME = "ussd_gateway"

_LAST_DIGITS = re.compile(r"\d{4}$")


def setup_logging(level: str = "INFO", json_file: str | None = None) -> None:
    """
    Configure logging for the gateway.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_file: When set, also write JSON lines to this rotating file
    """
    level = level.upper()
    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "level": level,
            },
        },
        "loggers": {
            LOGGER_NAME: {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    }

    if json_file:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": json_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "formatter": "json",
            "level": level,
        }
        config["loggers"][LOGGER_NAME]["handlers"].append("file")

    logging.config.dictConfig(config)


def mask_phone(phone_number: str | None) -> str:
    """Hide the last four digits of a phone number for logs.

    ``+237670000123`` becomes ``+23767000****``.
    """
    if not phone_number:
        return ""
    return _LAST_DIGITS.sub("****", phone_number.strip())


class ContextLogger:
    """Logger with contextual information."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def with_context(self, **context: Any) -> logging.LoggerAdapter:
        """
        Add context to log messages.

        Args:
            **context: Context key-value pairs (session_id, state_id, ...)

        Returns:
            LoggerAdapter with context
        """
        return logging.LoggerAdapter(self.logger, context)
