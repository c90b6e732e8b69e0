"""Core linejson library exports."""

from linejson.lib.config import FormatterConfig, ReplacerPolicy
from linejson.lib.encoding import CIRCULAR_MARKER
from linejson.lib.errors import FormatterConfigError, RecordFormatError, StreamClosedError
from linejson.lib.formatter import Formatter
from linejson.lib.records import LogEvent
from linejson.lib.replacers import OMIT, default_replacer, error_to_dict
from linejson.lib.stream import FormatterStream

__all__ = [
    "CIRCULAR_MARKER",
    "OMIT",
    "Formatter",
    "FormatterConfig",
    "FormatterConfigError",
    "FormatterStream",
    "LogEvent",
    "RecordFormatError",
    "ReplacerPolicy",
    "StreamClosedError",
    "default_replacer",
    "error_to_dict",
]
