"""
Structured logging with structlog.

Usage:
    configure_logging(ExplorerSettings.load())
    bind_context(request_id=req_id)
    try:
        explorer.init_requested_columns(params)
    finally:
        clear_context()

Bound context is merged into every event logged on the current thread or task.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from covex.explorer.config import ExplorerSettings


def configure_logging(settings: ExplorerSettings | None = None) -> None:
    """
    Configure structlog on top of stdlib logging.

    Args:
        settings (ExplorerSettings | None): Source of log_level and log_format;
            ExplorerSettings.load() when None.
    """
    if settings is None:
        from covex.explorer.config import ExplorerSettings

        settings = ExplorerSettings.load()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    formatter = structlog.stdlib.ProcessorFormatter(processor=renderer)
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def bind_context(**kwargs: object) -> None:
    """Bind context variables (e.g. a request id) onto every subsequent log event."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
