"""
Logging Configuration for Marketplace Analytics

Routes structlog and stdlib records through one stdout handler, rendered as
JSON lines (batch runs) or colored console output (local work).
"""

import logging
import sys
from typing import List, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter

from marketplace_analytics.config.settings import get_settings

# Third-party loggers that are chatty below WARNING
NOISY_LOGGERS = ("faker", "faker.factory")


def _shared_processors() -> List:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_format: str):
    if log_format == "json":
        return JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structured logging for analytics runs.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR); defaults to
            DEBUG in debug mode, otherwise the configured level
        log_format: Override renderer, "json" or "text"
    """
    settings = get_settings()
    if log_level is None:
        log_level = "DEBUG" if settings.debug else settings.monitoring.log_level
    level = log_level.upper()
    fmt = (log_format or settings.monitoring.log_format).lower()
    numeric_level = getattr(logging, level, logging.INFO)

    processors = _shared_processors()
    structlog.configure(
        processors=processors + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(ProcessorFormatter(processor=_renderer(fmt), foreign_pre_chain=processors))

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=level,
        format=fmt,
        environment=settings.app_env,
    )


def run_context(**values):
    """
    Bind key/values (run id, source directory) to every log event inside a ``with`` block.

    Values bound before the block are restored when it exits.
    """
    return structlog.contextvars.bound_contextvars(**values)


def get_logger(name: str):
    """Get a logger instance with the given name."""
    return structlog.get_logger(name)
