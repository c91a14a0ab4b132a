"""
Logging setup - ZZIK Scoring Service
zzik/core/logging.py

Configures structlog once per process. Modules obtain loggers with
structlog.get_logger(__name__) and log event names with key-value context.
"""

import logging
import sys

import structlog

from zzik.config import Settings


def configure_logging(settings: Settings) -> None:
    """Route structlog and stdlib logging to stdout at LOG_LEVEL."""
    level = getattr(logging, settings.LOG_LEVEL, logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)

    if settings.LOG_FORMAT == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
