"""Structured logging utilities."""
import logging
from typing import Optional

import structlog

from .config import get_settings

_configured = False


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """
    Configure structlog once for the process.

    Args:
        level: Minimum level name (defaults to settings.log_level)
        json_output: Render JSON lines instead of console output (defaults to settings.log_json)
    """
    global _configured
    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    use_json = settings.log_json if json_output is None else json_output

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level_name, logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structured logger, configuring logging on first use."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)
