"""Replacer callables applied to every key/value pair during encoding."""

from __future__ import annotations

import traceback
from collections.abc import Callable
from typing import Final, TypeAlias

Replacer: TypeAlias = Callable[[str | int, object], object]


class _Omit:
    __slots__ = ()

    def __repr__(self) -> str:
        return "OMIT"


OMIT: Final = _Omit()
"""Returned by a replacer to drop a dict entry (``null`` inside a list)."""


def error_to_dict(error: BaseException) -> dict[str, object]:
    """Describe an exception as a plain ``name``/``message``/``stack`` mapping."""

    stack: str | None = None
    if error.__traceback__ is not None:
        stack = "".join(traceback.format_exception(error)).rstrip("\n")
    return {
        "name": type(error).__name__,
        "message": str(error),
        "stack": stack,
    }


def default_replacer(key: str | int, value: object) -> object:
    _ = key
    if isinstance(value, BaseException):
        return error_to_dict(value)
    return value
