"""Structured logging setup driven by ``AppConfig``."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import structlog

from boqcalc.config import AppConfig, get_config

LOG_FILE = Path("logs/boqcalc.log")


def build_processors(log_format: str) -> list[Any]:
    """Processor chain ending in a JSON renderer for ``json``, console otherwise."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if log_format.lower() == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def configure_logging(config: AppConfig | None = None) -> None:
    """Configure structlog and the stdlib root logger from application config.

    Log lines also go to ``logs/boqcalc.log`` when the ``logs`` directory exists.
    """
    config = config or get_config()

    structlog.configure(
        processors=build_processors(config.log_format),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if LOG_FILE.parent.exists():
        handlers.append(logging.FileHandler(LOG_FILE))

    logging.basicConfig(format="%(message)s", handlers=handlers)
    logging.getLogger().setLevel(config.log_level.upper())
