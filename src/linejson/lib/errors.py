"""Error types raised by the formatter and its stream."""

from __future__ import annotations


class FormatterConfigError(ValueError):
    """Formatter options failed validation at construction time."""

    def __init__(self, key: str | None, message: str) -> None:
        super().__init__(message)
        self.key = key


class RecordFormatError(RuntimeError):
    """One record could not be serialized.

    The original failure is chained as ``__cause__``.
    """

    def __init__(self, record: object, message: str) -> None:
        super().__init__(message)
        self.record = record


class StreamClosedError(RuntimeError):
    """A record was written after the stream was ended."""
