"""
Structured Logging Setup

Consistent logging configuration for the whole service.
Uses JSON format for structured logs in production.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

ROOT_LOGGER_NAME = "mobile_api"

# LogRecord attributes that are not user supplied "extra" fields
_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "service",
    "message", "taskName",
))

_configured = False


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", "unknown"),
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ServiceLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds service name to all logs"""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs["extra"] = {
            **kwargs.get("extra", {}),
            "service": self.extra.get("service", "unknown"),
        }
        return msg, kwargs


def setup_logging(log_level: str = "INFO", json_format: bool = True) -> logging.Logger:
    """
    Set up structured logging for the service.

    All service loggers are children of the "mobile_api" logger, so a single
    handler here covers them. Calling this again replaces the handler, which is
    how the server applies the level from its settings after import time.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format (True for production, False for dev)

    Returns:
        The configured "mobile_api" logger
    """
    global _configured

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)

    if json_format:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    _configured = True
    return logger


def get_service_logger(service_name: str) -> ServiceLoggerAdapter:
    """
    Get a logger adapter with service context.

    Logging is configured from MOBILE_API_LOG_LEVEL / MOBILE_API_LOG_FORMAT the
    first time any service asks for a logger.

    Args:
        service_name: Name of the service (e.g. "config", "commands")

    Returns:
        Logger adapter with service name in all logs
    """
    if not _configured:
        log_level = os.environ.get("MOBILE_API_LOG_LEVEL", "INFO")
        json_format = os.environ.get("MOBILE_API_LOG_FORMAT", "json").lower() == "json"
        setup_logging(log_level, json_format)

    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{service_name}")
    return ServiceLoggerAdapter(logger, {"service": service_name})
