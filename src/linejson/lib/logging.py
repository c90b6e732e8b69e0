"""Logging setup for the CLI.

Diagnostics always go to stderr; stdout carries the formatted records. In JSON
mode both structlog and stdlib loggers render through linejson itself.
"""

from __future__ import annotations

import logging as std_logging
import sys

import structlog

from linejson.lib.adapters import JsonLinesLogFormatter, StructlogLineRenderer


def _level_from_verbosity(verbosity: int) -> int:
    if verbosity <= 0:
        return std_logging.WARNING
    if verbosity == 1:
        return std_logging.INFO
    return std_logging.DEBUG


def configure_logging(json_mode: bool = False, verbosity: int = 0) -> None:
    level = _level_from_verbosity(verbosity)
    handler = std_logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        JsonLinesLogFormatter() if json_mode else std_logging.Formatter("%(message)s")
    )
    std_logging.basicConfig(level=level, handlers=[handler], force=True)

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
    ]
    if json_mode:
        processors.append(structlog.processors.format_exc_info)
        processors.append(StructlogLineRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
