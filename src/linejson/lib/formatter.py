"""Record-to-line formatter."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import TypeAlias

from linejson.lib.config import FormatterConfig, ReplacerPolicy, resolve_config
from linejson.lib.encoding import SafeEncoder
from linejson.lib.errors import RecordFormatError
from linejson.lib.records import record_document

ErrorHandler: TypeAlias = Callable[[RecordFormatError], None]


class Formatter:
    """Serialize log records into newline-terminated JSON documents.

    Options are validated once, here; an invalid mapping raises
    ``FormatterConfigError`` and no instance is created. Each call to
    ``format`` is independent, so a failed record leaves the formatter usable.
    """

    def __init__(self, options: Mapping[str, object] | None = None) -> None:
        self._config = resolve_config(options)
        self._encoder = SafeEncoder(
            replacer=self._config.replacer,
            allow_list=self._config.allow_list,
            indent=self._config.indent,
            # Only the default policy stringifies leaves with no JSON form.
            fallback=str if self._config.policy is ReplacerPolicy.DEFAULT else None,
        )

    @property
    def config(self) -> FormatterConfig:
        return self._config

    def format(self, record: object) -> str:
        """Return one JSON line (with trailing newline) for ``record``."""

        try:
            text = self._encoder.encode(record_document(record))
        except Exception as exc:
            raise RecordFormatError(
                record, f"Failed to format log record: {type(exc).__name__}: {exc}"
            ) from exc
        return f"{text}\n"

    def __call__(self, record: object) -> str:
        return self.format(record)

    def iter_lines(
        self,
        records: Iterable[object],
        *,
        on_error: ErrorHandler | None = None,
    ) -> Iterator[str]:
        """Lazily format ``records`` in order, one line per record.

        The next record is only pulled once the previous line has been consumed.
        Without ``on_error`` a failing record raises out of the iterator.
        """

        for record in records:
            try:
                line = self.format(record)
            except RecordFormatError as exc:
                if on_error is None:
                    raise
                on_error(exc)
                continue
            yield line
