# common/logging_config.py
"""Structured logging shared by the rooms service and the rooms web app."""

import logging
import os
import sys
from typing import Optional

import structlog
from structlog.types import Processor

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")


def configure_logging(
    service_name: Optional[str] = None,
    log_level: str = LOG_LEVEL,
    json_logs: bool = LOG_FORMAT.lower() == "json",
) -> None:
    """
    Configure structlog on top of the standard logging module.

    Parameters
    ----------
    service_name : Optional[str]
        Bound into the context of every log entry when given.
    log_level : str
        DEBUG, INFO, WARNING, ERROR or CRITICAL.
    json_logs : bool
        Render JSON lines when True, human readable console output otherwise.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    if service_name:
        structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structured logger, typically for ``__name__``."""
    return structlog.get_logger(name)
