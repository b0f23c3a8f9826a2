"""
Logging Setup
competency_engine/logging_config.py

structlog event logging rendered as JSON (default) or console output,
driven by LOG_FORMAT / LOG_LEVEL.
"""

import logging
import sys

import structlog

from competency_engine.config import Settings, settings as default_settings


def configure_logging(settings: Settings = default_settings) -> None:
    """Configure stdlib logging and structlog once at startup."""
    level = getattr(logging, settings.LOG_LEVEL)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.LOG_FORMAT == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
