"""Cycle-safe JSON encoding with JSON.stringify-style replacer semantics.

The encoder walks the value once, applying the replacer to every key/value
pair and substituting ``CIRCULAR_MARKER`` for any container that is already on
the current ancestor path. The resulting plain tree is handed to ``json.dumps``
so escaping and number formatting stay standard. Leaves with no JSON form go
through ``fallback`` when one is set, and raise ``TypeError`` otherwise.
"""

from __future__ import annotations

import enum
import json
import math
from collections.abc import Callable, Mapping
from dataclasses import fields, is_dataclass
from datetime import date, datetime, time
from pathlib import PurePath
from typing import cast

from linejson.lib.replacers import OMIT, Replacer

CIRCULAR_MARKER = "[Circular]"

_COMPACT_SEPARATORS = (",", ":")
_INDENT_SEPARATORS = (",", ": ")


def to_json_form(value: object) -> object:
    """Shallow conversion of common Python values to their JSON-facing form."""

    if is_dataclass(value) and not isinstance(value, type):
        return {field.name: getattr(value, field.name) for field in fields(value)}
    if isinstance(value, PurePath):
        return str(value)
    if isinstance(value, datetime | date | time):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, tuple | set | frozenset):
        return list(cast("tuple[object, ...] | set[object] | frozenset[object]", value))
    if isinstance(value, Mapping) and not isinstance(value, dict):
        return dict(cast("Mapping[object, object]", value))
    return value


def key_text(key: object) -> str:
    """Render a mapping key the way ``json.dumps`` would."""

    if isinstance(key, str):
        return key
    if key is True:
        return "true"
    if key is False:
        return "false"
    if key is None:
        return "null"
    if isinstance(key, int):
        return str(key)
    if isinstance(key, float):
        return float.__repr__(key)
    raise TypeError(f"Keys must be str, int, float, bool or None, not {type(key).__name__}")


class SafeEncoder:
    """Encode one value to JSON text without failing on reference cycles."""

    def __init__(
        self,
        *,
        replacer: Replacer | None = None,
        allow_list: tuple[str, ...] | None = None,
        indent: str | None = None,
        fallback: Callable[[object], str] | None = None,
    ) -> None:
        self._replacer = replacer
        self._allow_list = allow_list
        self._indent = indent
        self._fallback = fallback

    def encode(self, value: object) -> str:
        prepared = self._prepare("", value, [])
        if prepared is OMIT:
            raise ValueError("Replacer omitted the whole document.")
        if self._indent is None:
            return json.dumps(prepared, ensure_ascii=False, separators=_COMPACT_SEPARATORS)
        return json.dumps(
            prepared,
            ensure_ascii=False,
            indent=self._indent,
            separators=_INDENT_SEPARATORS,
        )

    def _prepare(self, key: str | int, value: object, ancestors: list[int]) -> object:
        raw = value
        # Scalars share ids (small ints, interned strings), so only containers are tracked.
        tracked = _is_container(raw)
        if tracked and id(raw) in ancestors:
            value = CIRCULAR_MARKER
        value = to_json_form(value)
        if self._replacer is not None:
            value = self._replacer(key, value)
        if value is OMIT:
            return OMIT

        if isinstance(value, dict | list):
            if id(value) in ancestors:
                return CIRCULAR_MARKER
            pushed = [id(value), id(raw)] if tracked else [id(value)]
            ancestors.extend(pushed)
            try:
                if isinstance(value, dict):
                    return self._prepare_dict(cast("dict[object, object]", value), ancestors)
                return self._prepare_list(cast("list[object]", value), ancestors)
            finally:
                del ancestors[-len(pushed) :]

        return self._scalar(value)

    def _prepare_dict(
        self, value: dict[object, object], ancestors: list[int]
    ) -> dict[str, object]:
        by_text = {key_text(key): key for key in value}
        names = by_text.keys() if self._allow_list is None else self._allow_list

        result: dict[str, object] = {}
        for name in names:
            if name not in by_text:
                continue
            item = self._prepare(name, value[by_text[name]], ancestors)
            if item is OMIT:
                continue
            result[name] = item
        return result

    def _prepare_list(self, value: list[object], ancestors: list[int]) -> list[object]:
        result: list[object] = []
        for index, item in enumerate(value):
            prepared = self._prepare(index, item, ancestors)
            result.append(None if prepared is OMIT else prepared)
        return result

    def _scalar(self, value: object) -> object:
        if value is None or isinstance(value, str | bool | int):
            return value
        if isinstance(value, float):
            # NaN and the infinities have no JSON spelling.
            return value if math.isfinite(value) else None
        if self._fallback is not None:
            return self._fallback(value)
        raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _is_container(value: object) -> bool:
    if isinstance(value, dict | list | tuple | set | frozenset | Mapping | BaseException):
        return True
    return is_dataclass(value) and not isinstance(value, type)
