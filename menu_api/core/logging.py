"""
Structured JSON logging with request_id and item/database context when applicable.
"""
from __future__ import annotations

import json
import logging
import time
from contextvars import ContextVar
from typing import Optional

ROOT_LOGGER = "menu_api"

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Extra attributes copied from the LogRecord into the JSON line
_EXTRA_FIELDS = ("item_id", "db_target", "error", "operation", "method", "path", "status_code", "duration_ms")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S.000Z", time.gmtime(record.created)),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        if request_id_ctx.get():
            log["request_id"] = request_id_ctx.get()
        for field in _EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log[field] = value
        if record.exc_info:
            log["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log, default=str)


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach the JSON handler to the package logger once; (re)apply the level."""
    logger = logging.getLogger(ROOT_LOGGER)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
    logger.setLevel(level.upper())
    return logger


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger(ROOT_LOGGER).handlers:
        configure_logging()
    return logging.getLogger(name)
