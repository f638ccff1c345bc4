"""structlog setup shared by the library and the command-line scripts."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

from .config import Settings, get_settings


def configure_logging(
    level: str | None = None,
    *,
    settings: Settings | None = None,
    json_output: bool | None = None,
    stream: TextIO | None = None,
) -> None:
    """Send stdlib and structlog output to ``stream`` (stderr by default).

    Events render as JSON lines unless ``json_output`` is False; when it is left
    unset, an interactive terminal gets the plain console renderer instead.
    Stdout stays free for command output.
    """
    resolved_settings = settings or get_settings()
    effective_level = (level or resolved_settings.log_level).upper()
    numeric_level = logging.getLevelName(effective_level)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    target = stream or sys.stderr
    if json_output is None:
        json_output = not target.isatty()
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)

    logging.basicConfig(stream=target, level=numeric_level, format="%(name)s: %(message)s", force=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(target),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    return structlog.get_logger(name)
