"""Input record shapes accepted by the formatter."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, cast

from linejson.lib.replacers import OMIT

RECORD_FIELDS: tuple[str, ...] = ("level", "payload", "timestamp")


@dataclass(frozen=True, slots=True)
class LogEvent:
    """One structured log event."""

    level: str
    payload: Any = None
    timestamp: Any = None


def record_document(record: object) -> dict[str, object]:
    """Pick ``level``, ``payload`` and ``timestamp`` from a mapping or an object.

    Fields missing from the record map to ``OMIT`` so the encoder leaves them out.
    Anything else on the record is ignored.
    """

    if isinstance(record, Mapping):
        source = cast("Mapping[str, object]", record)
        return {name: source.get(name, OMIT) for name in RECORD_FIELDS}
    return {name: getattr(record, name, OMIT) for name in RECORD_FIELDS}
