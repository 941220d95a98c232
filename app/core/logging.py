"""JSON logging for the operations console backend.

Every record is one JSON object. Structured context passed through
``extra={...}`` (alert type, key, role, collector names) lands as
top-level fields so log queries can filter on them directly.
"""
from __future__ import annotations

import logging
from typing import Optional

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "ops-console-backend"

# Loggers that are chatty at INFO and add nothing to alert triage.
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "alembic.runtime.migration")


def build_formatter() -> jsonlogger.JsonFormatter:
    return jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
        static_fields={"service": SERVICE_NAME},
    )


def setup_logging(level: str = "INFO") -> None:
    """Route the root logger to a single JSON stream handler at ``level``."""

    root_logger = logging.getLogger()
    # Remove existing handlers to avoid duplicate logs when reloading.
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(level.upper())

    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter())
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level.upper())
    return logger


__all__ = ["QUIET_LOGGERS", "SERVICE_NAME", "build_formatter", "get_logger", "setup_logging"]
