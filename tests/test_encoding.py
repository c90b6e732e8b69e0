"""Cycle-safe encoder tests."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import UTC, date, datetime
from pathlib import Path

import pytest

from linejson.lib.encoding import CIRCULAR_MARKER, SafeEncoder, key_text, to_json_form
from linejson.lib.replacers import OMIT


class Color(enum.Enum):
    RED = "red"


@dataclass
class Node:
    name: str
    child: object = None


def test_replacer_sees_keys_depth_first() -> None:
    seen: list[str | int] = []

    def replacer(key: str | int, value: object) -> object:
        seen.append(key)
        return value

    text = SafeEncoder(replacer=replacer).encode({"level": "info", "payload": [10], "timestamp": "T"})

    assert text == '{"level":"info","payload":[10],"timestamp":"T"}'
    assert seen == ["", "level", "payload", 0, "timestamp"]


def test_omit_drops_dict_entries_and_nulls_list_items() -> None:
    def replacer(key: str | int, value: object) -> object:
        return OMIT if value == "drop" else value

    encoder = SafeEncoder(replacer=replacer)

    assert encoder.encode({"a": "drop", "b": ["drop", 1]}) == '{"b":[null,1]}'
    with pytest.raises(ValueError, match="omitted the whole document"):
        encoder.encode("drop")


def test_replacer_receives_circular_marker() -> None:
    seen: list[object] = []
    payload: dict[str, object] = {}
    payload["loop"] = payload

    def replacer(key: str | int, value: object) -> object:
        seen.append(value)
        return value

    assert SafeEncoder(replacer=replacer).encode(payload) == '{"loop":"[Circular]"}'
    assert CIRCULAR_MARKER in seen


def test_replacer_returning_an_ancestor_is_marked_circular() -> None:
    root: dict[str, object] = {"a": 1}

    def replacer(key: str | int, value: object) -> object:
        return root if key == "a" else value

    assert SafeEncoder(replacer=replacer).encode(root) == '{"a":"[Circular]"}'


def test_dataclass_cycles_are_marked() -> None:
    node = Node("a")
    node.child = node

    assert SafeEncoder().encode(node) == '{"name":"a","child":"[Circular]"}'


def test_deep_cycles_are_marked() -> None:
    first: dict[str, object] = {"name": "first"}
    second: dict[str, object] = {"name": "second", "back": first}
    first["next"] = [second]

    assert SafeEncoder().encode(first) == (
        '{"name":"first","next":[{"name":"second","back":"[Circular]"}]}'
    )


def test_non_finite_floats_become_null() -> None:
    assert SafeEncoder().encode([float("nan"), float("inf"), 1.5]) == "[null,null,1.5]"


def test_unserializable_values_raise() -> None:
    with pytest.raises(TypeError, match="not JSON serializable"):
        SafeEncoder().encode({"value": object()})


def test_indent_uses_pretty_separators() -> None:
    assert SafeEncoder(indent="  ").encode({"a": [1, 2]}) == '{\n  "a": [\n    1,\n    2\n  ]\n}'


def test_to_json_form() -> None:
    assert to_json_form(datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)) == "2024-01-02T03:04:05+00:00"
    assert to_json_form(date(2024, 1, 2)) == "2024-01-02"
    assert to_json_form(Path("/tmp/x")) == "/tmp/x"
    assert to_json_form(Color.RED) == "red"
    assert to_json_form((1, 2)) == [1, 2]
    assert to_json_form(frozenset({3})) == [3]
    assert to_json_form(Node("n")) == {"name": "n", "child": None}
    assert to_json_form(Node) is Node
    assert to_json_form("plain") == "plain"


def test_key_text() -> None:
    assert key_text("k") == "k"
    assert key_text(True) == "true"
    assert key_text(False) == "false"
    assert key_text(None) == "null"
    assert key_text(7) == "7"
    assert key_text(1.5) == "1.5"
    with pytest.raises(TypeError, match="Keys must be"):
        key_text((1, 2))


def test_allow_list_does_not_filter_list_items() -> None:
    encoder = SafeEncoder(allow_list=("items", "keep"))

    text = encoder.encode({"items": [{"keep": 1, "drop": 2}, 3], "other": 4})

    assert text == '{"items":[{"keep":1},3]}'


def test_replacer_wrapping_scalars_is_not_mistaken_for_a_cycle() -> None:
    def replacer(key: str | int, value: object) -> object:
        if key in {"level", "timestamp"}:
            return {"value": value}
        return value

    text = SafeEncoder(replacer=replacer).encode({"level": "info", "payload": 1, "timestamp": 5})

    assert text == '{"level":{"value":"info"},"payload":1,"timestamp":{"value":5}}'


def test_wrapped_small_int_next_to_equal_values_is_kept() -> None:
    def replacer(key: str | int, value: object) -> object:
        return [value] if isinstance(key, str) and isinstance(value, int) else value

    assert SafeEncoder(replacer=replacer).encode({"a": 1, "b": [1, 1]}) == '{"a":[1],"b":[1,1]}'


def test_fallback_renders_leaves_without_json_form() -> None:
    class Point:
        def __str__(self) -> str:
            return "Point(1, 2)"

    encoder = SafeEncoder(fallback=str)

    assert encoder.encode({"p": Point(), "n": 1}) == '{"p":"Point(1, 2)","n":1}'
