"""
topicmap.logging_config - structlog setup.

Modules log through ``structlog.get_logger(__name__)`` with event names and
key/value context. ``configure_logging`` routes those records through the
standard logging module to stderr, rendered for a console or as JSON lines.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Mapping

import structlog

LOG_FORMATS = ("console", "json")


def configure_logging(level: str = "WARNING", fmt: str = "console") -> None:
    """Configure structlog and the standard logging handler.

    Args:
        level: Standard logging level name.
        fmt: "console" for human-readable lines, "json" for JSON lines.

    Raises:
        ValueError: If fmt is not a known format.
    """
    if fmt not in LOG_FORMATS:
        raise ValueError(f"Unknown log format {fmt!r}; expected one of {', '.join(LOG_FORMATS)}")

    log_level = getattr(logging, str(level).upper(), logging.WARNING)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level, force=True)

    renderer: Any
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def configure_from_config(config: Mapping[str, Any]) -> None:
    """Configure logging from the ``[logging]`` config section."""
    section = config.get("logging", {})
    configure_logging(
        level=str(section.get("level", "WARNING")),
        fmt=str(section.get("format", "console")),
    )
