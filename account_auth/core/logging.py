"""Logging setup for stdlib logging and structlog.

Adapters log through ``logging.getLogger(__name__)``; the app entry point
and services log structured events through ``structlog.get_logger()``.
Both end up on the same handler at ``settings.log_level``.
"""

import logging

import structlog

from account_auth.core.config import settings


def configure_logging() -> None:
    """Configure root logging and the structlog processor chain."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", level=level)

    renderer: structlog.types.Processor
    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

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
        cache_logger_on_first_use=True,
    )
