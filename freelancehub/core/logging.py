"""Logging setup for the freelancehub backend.

Every record leaves the process as one JSON object. Services attach the ids
they act on through ``extra={...}`` (``contract_id``, ``dispute_id`` ...);
those keys become top-level fields next to the service name and environment.
"""
from __future__ import annotations

import logging

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "freelancehub"

# Loggers that are too chatty at INFO for a request-per-line service.
QUIET_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "alembic.runtime.migration": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}


class ServiceContextFilter(logging.Filter):
    """Stamp each record with the service and environment it came from."""

    def __init__(self, env: str) -> None:
        super().__init__()
        self.env = env

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = SERVICE_NAME
        record.env = self.env
        return True


def build_formatter(fmt: str = "json") -> logging.Formatter:
    if fmt == "text":
        return logging.Formatter("%(asctime)s %(levelname)-7s [%(env)s] %(name)s: %(message)s")
    return jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(service)s %(env)s",
        rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
    )


def setup_logging(level: str = "INFO", *, env: str = "dev", fmt: str = "json") -> logging.Handler:
    """Install a single stream handler on the root logger and return it."""

    root_logger = logging.getLogger()
    # Reloads and repeated test startups must not stack handlers.
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(level.upper())

    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter(fmt))
    handler.addFilter(ServiceContextFilter(env))
    root_logger.addHandler(handler)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(quiet_level, root_logger.level))
    return handler


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["SERVICE_NAME", "ServiceContextFilter", "build_formatter", "setup_logging", "get_logger"]
