"""
Structured logging for the cinema admin client.
Events are logged with keyword context: logger.info("Movies loaded", count=3)
"""

import logging
import sys

import structlog

from config.settings import get_settings

_configured = False


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Log level name, defaults to settings.log_level
        fmt: 'json' or 'text', defaults to settings.log_format
    """
    global _configured

    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    fmt = (fmt or settings.log_format).lower()
    log_level = getattr(logging, level_name, logging.INFO)

    # no-op when the host application already configured the root logger
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)

    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, configuring logging on first use."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)
