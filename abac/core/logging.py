"""
Structured logging setup.

Engine components take their logger by injection and default to
``structlog.get_logger(<module>)``. Per-evaluation identifiers are bound
through structlog contextvars by the access control facade, so every
line emitted during one decision carries ``user_id``, ``resource_id`` and
``action_id``.

Usage:
    from abac.core.config import settings
    from abac.core.logging import configure_logging

    configure_logging(settings)
"""

import logging
import sys

import structlog

from .config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure structlog rendering and level filtering."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer: structlog.typing.Processor
    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

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
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )
