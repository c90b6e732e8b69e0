"""Bridges from stdlib logging and structlog onto ``Formatter``."""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from datetime import UTC, datetime
from typing import Any

from linejson.lib.formatter import Formatter
from linejson.lib.records import LogEvent

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_STANDARD_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


class JsonLinesLogFormatter(logging.Formatter):
    """``logging.Formatter`` that renders each record as one JSON document.

    The handler appends its own terminator, so the returned text carries no
    trailing newline.
    """

    def __init__(self, options: Mapping[str, object] | None = None) -> None:
        super().__init__()
        self._formatter = Formatter(options)

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            payload["error"] = record.exc_info[1]
        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_ATTRS or key.startswith("_"):
                continue
            payload[key] = value

        event = LogEvent(
            level=record.levelname,
            payload=payload,
            timestamp=datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
        )
        return self._formatter.format(event).removesuffix("\n")


class StructlogLineRenderer:
    """Final structlog processor: ``level`` and ``timestamp`` stay top level,
    every other key of the event dict goes under ``payload``."""

    def __init__(self, options: Mapping[str, object] | None = None) -> None:
        self._formatter = Formatter(options)

    def __call__(
        self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> str:
        _ = logger
        fields = dict(event_dict)
        level = fields.pop("level", method_name)
        timestamp = fields.pop("timestamp", None)
        event = LogEvent(level=level, payload=fields, timestamp=timestamp)
        return self._formatter.format(event).removesuffix("\n")
