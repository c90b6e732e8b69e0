"""Asyncio object-mode transform stream around ``Formatter``."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Mapping
from typing import Final, TypeAlias, cast

import structlog

from linejson.lib.errors import RecordFormatError, StreamClosedError
from linejson.lib.formatter import ErrorHandler, Formatter

logger = structlog.get_logger(__name__)

DEFAULT_HIGH_WATER_MARK = 16


class _EndOfStream:
    __slots__ = ()


_END: Final = _EndOfStream()

_QueueItem: TypeAlias = str | RecordFormatError | _EndOfStream


class FormatterStream:
    """Records go in through ``write``, lines come out through async iteration.

    The readable side buffers at most ``high_water_mark`` items; ``write``
    suspends until the consumer catches up. Lines come out in write order, and a
    record that fails to format raises ``RecordFormatError`` from ``__anext__``
    at its position. The stream stays open after such an error, so iteration
    can resume. Only ``end()`` finishes the stream.
    """

    def __init__(
        self,
        formatter: Formatter | None = None,
        *,
        options: Mapping[str, object] | None = None,
        high_water_mark: int = DEFAULT_HIGH_WATER_MARK,
        on_error: ErrorHandler | None = None,
    ) -> None:
        if formatter is not None and options is not None:
            raise ValueError("Pass either a formatter or options, not both.")
        if high_water_mark < 1:
            raise ValueError("high_water_mark must be >= 1.")

        self._formatter = formatter if formatter is not None else Formatter(options)
        self._on_error = on_error
        self._queue: asyncio.Queue[_QueueItem] = asyncio.Queue(maxsize=high_water_mark)
        self._ended = False
        self._finished = False
        self._written = 0

    @property
    def formatter(self) -> Formatter:
        return self._formatter

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def buffered(self) -> int:
        return self._queue.qsize()

    async def write(self, record: object) -> None:
        if self._ended:
            raise StreamClosedError("Cannot write to a stream after end().")

        item: _QueueItem
        try:
            item = self._formatter.format(record)
        except RecordFormatError as exc:
            if self._on_error is not None:
                self._report(exc)
                return
            item = exc
        self._written += 1
        await self._queue.put(item)

    async def end(self) -> None:
        if self._ended:
            return
        self._ended = True
        await self._queue.put(_END)
        logger.debug("Formatter stream ended.", records=self._written)

    async def pipe_from(self, source: Iterable[object] | AsyncIterable[object]) -> None:
        """Write every record from ``source``, then end the stream."""

        if isinstance(source, AsyncIterable):
            async for record in cast("AsyncIterable[object]", source):
                await self.write(record)
        else:
            for record in source:
                await self.write(record)
        await self.end()

    async def read(self) -> str | None:
        """Return the next line, or ``None`` once the stream has ended."""

        try:
            return await self.__anext__()
        except StopAsyncIteration:
            return None

    def __aiter__(self) -> AsyncIterator[str]:
        return self

    async def __anext__(self) -> str:
        if self._finished:
            raise StopAsyncIteration
        item = await self._queue.get()
        if isinstance(item, _EndOfStream):
            self._finished = True
            raise StopAsyncIteration
        if isinstance(item, RecordFormatError):
            raise item
        return item

    def _report(self, error: RecordFormatError) -> None:
        handler = cast("ErrorHandler", self._on_error)
        try:
            handler(error)
        except Exception:
            logger.warning("Stream error handler failed.", exc_info=True)
