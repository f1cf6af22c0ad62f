"""
PickupDesk - Logging configuration

stdlib log records are rendered through structlog's ProcessorFormatter, as
JSON or as console lines depending on settings.LOG_FORMAT. Structured context
is passed with ``extra=`` and ends up as top-level keys.

Usage:
    from app.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Pickup confirmed", extra={"order_id": order_id})
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, List

import structlog
from structlog.stdlib import ProcessorFormatter

from app.core.settings import settings

_configured = False


def build_formatter(log_format: str) -> ProcessorFormatter:
    """ProcessorFormatter for stdlib records; ``json`` or anything else for console."""
    pre_chain: List[Any] = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if log_format.lower() == "json":
        processors: List[Any] = [
            ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(default=str, ensure_ascii=False),
        ]
    else:
        processors = [
            ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=False),
        ]
    return ProcessorFormatter(processors=processors, foreign_pre_chain=pre_chain)


def setup_logging() -> None:
    """Configure the root logger once from settings."""
    global _configured
    if _configured:
        return

    formatter = build_formatter(settings.LOG_FORMAT)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.LOG_FILE:
        handlers.append(
            RotatingFileHandler(
                settings.LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
            )
        )

    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL.upper())
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # uvicorn access lines are noisy next to our own request logging
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
