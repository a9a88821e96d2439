"""Logging configuration with request correlation ids."""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

from .config import Settings
from .context import get_request_id

_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(request_id)s | %(message)s"

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime", "request_id", "taskName"}


class RequestContextFilter(logging.Filter):
    """Stamp records with the correlation id of the current request."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line, including any ``extra`` fields."""

    def __init__(self, *, service: str = "", environment: str = "") -> None:
        super().__init__()
        self._service = service
        self._environment = environment

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
            "service": self._service,
            "environment": self._environment,
        }
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS:
                payload.setdefault(key, value)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(settings: Settings) -> None:
    """Install a single stream handler on the root and uvicorn loggers."""
    level = getattr(logging, settings.log_level, logging.INFO)
    if settings.log_json:
        formatter: dict[str, Any] = {
            "()": JsonLogFormatter,
            "service": settings.project_name,
            "environment": settings.environment,
        }
    else:
        formatter = {"format": _TEXT_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"}

    uvicorn_logger = {"handlers": ["default"], "level": level, "propagate": False}
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": formatter},
            "filters": {"request_context": {"()": RequestContextFilter}},
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "filters": ["request_context"],
                    "level": level,
                }
            },
            "loggers": {
                "": {"handlers": ["default"], "level": level},
                "uvicorn": dict(uvicorn_logger),
                "uvicorn.error": dict(uvicorn_logger),
                "uvicorn.access": dict(uvicorn_logger),
            },
        }
    )


__all__ = ["JsonLogFormatter", "RequestContextFilter", "configure_logging"]
