"""Structured logging for pyports.

The terminal belongs to the UI, so while the app runs, records are not
printed. structlog renders them and stdlib logging hands them to Textual's
devtools console (``textual console``), which is where they can be watched.
Outside a running app the handler falls back to stderr.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import structlog
from textual.logging import TextualHandler

if TYPE_CHECKING:
    from pyports.config import Config


def configure(config: Config) -> None:
    """Route structlog through stdlib logging into the Textual console."""
    handler = TextualHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=False),
            foreign_pre_chain=[
                structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False),
                structlog.processors.add_log_level,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(config.log_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, optionally named after the calling module."""
    return structlog.get_logger(name)
