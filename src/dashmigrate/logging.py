"""Structured logging setup for dashmigrate.

All modules log through structlog with snake_case event names and keyword
context, e.g. ``log.info("migration_applied", version=41)``. Output goes to
stderr so that migrated documents written to stdout stay clean.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def setup_logging(json_output: bool = True, level: str = "INFO") -> None:
    """Configure structlog for the process.

    Args:
        json_output: Render events as JSON lines instead of console text.
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if json_output:
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Get a logger bound to a component name.

    Args:
        name: Component name, recorded as the ``logger_name`` key on every event.
    """
    return structlog.get_logger(logger_name=name)
