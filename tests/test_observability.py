from __future__ import annotations

import logging

import structlog

from covex.explorer.config import ExplorerSettings
from covex.observability import bind_context, clear_context, configure_logging


def test_configure_logging_json() -> None:
    saved = [(h, h.formatter) for h in logging.root.handlers]
    try:
        configure_logging(ExplorerSettings(log_format="json", log_level="DEBUG"))
        assert structlog.is_configured()
        bind_context(request_id="abc")
        assert structlog.contextvars.get_contextvars() == {"request_id": "abc"}
    finally:
        clear_context()
        structlog.reset_defaults()
        for handler, formatter in saved:
            handler.setFormatter(formatter)
