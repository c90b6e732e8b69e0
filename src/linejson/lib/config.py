"""Formatter option validation and defaults."""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import cast

from linejson.lib.errors import FormatterConfigError
from linejson.lib.replacers import Replacer, default_replacer

logger = logging.getLogger(__name__)

_ALLOWED_KEYS = frozenset({"replacer", "space"})
_MAX_INDENT = 10

_ENV_SPACE = "LINEJSON_SPACE"
_ENV_KEYS = "LINEJSON_KEYS"


class ReplacerPolicy(StrEnum):
    DEFAULT = "default"
    CUSTOM = "custom"
    ALLOW_LIST = "allow_list"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class FormatterConfig:
    """Resolved, immutable formatter configuration."""

    policy: ReplacerPolicy = ReplacerPolicy.DEFAULT
    replacer: Replacer | None = default_replacer
    allow_list: tuple[str, ...] | None = None
    space: str | int | float | None = None
    indent: str | None = None


def _is_number(value: object) -> bool:
    return not isinstance(value, bool) and isinstance(value, int | float)


def _describe(value: object) -> str:
    return f"{type(value).__name__} ({value!r})"


def _resolve_allow_list(raw_value: list[object] | tuple[object, ...]) -> tuple[str, ...]:
    resolved: list[str] = []
    for index, item in enumerate(raw_value):
        if isinstance(item, str):
            name = item
        elif _is_number(item):
            number = cast("int | float", item)
            name = str(int(number)) if float(number).is_integer() else str(number)
        else:
            raise FormatterConfigError(
                "replacer",
                f'"replacer[{index}]" must be a string or a number, got {_describe(item)}.',
            )
        if name not in resolved:
            resolved.append(name)
    return tuple(resolved)


def _resolve_replacer(
    raw_value: object,
) -> tuple[ReplacerPolicy, Replacer | None, tuple[str, ...] | None]:
    if raw_value is None:
        return ReplacerPolicy.NONE, None, None
    if isinstance(raw_value, list | tuple):
        items = cast("list[object] | tuple[object, ...]", raw_value)
        return ReplacerPolicy.ALLOW_LIST, None, _resolve_allow_list(items)
    if callable(raw_value):
        return ReplacerPolicy.CUSTOM, cast("Replacer", raw_value), None
    raise FormatterConfigError(
        "replacer",
        f'"replacer" must be a function, a list of keys, or None, got {_describe(raw_value)}.',
    )


def resolve_indent(space: str | int | float | None) -> str | None:
    """Turn a ``space`` option into the indent string, or ``None`` for compact output."""

    if space is None:
        return None
    if isinstance(space, str):
        indent = space[:_MAX_INDENT]
        return indent or None
    if not math.isfinite(space):
        return None
    count = min(_MAX_INDENT, math.floor(space))
    if count < 1:
        return None
    return " " * count


def resolve_config(options: Mapping[str, object] | None = None) -> FormatterConfig:
    """Validate user options and apply defaults.

    Raises ``FormatterConfigError`` naming the offending key.
    """

    if options is None:
        return FormatterConfig()
    if not isinstance(options, Mapping):
        raise FormatterConfigError(
            None, f"Formatter options must be a mapping, got {_describe(options)}."
        )

    for key in options:
        if key not in _ALLOWED_KEYS:
            raise FormatterConfigError(str(key), f'"{key}" is not allowed')

    policy = ReplacerPolicy.DEFAULT
    replacer: Replacer | None = default_replacer
    allow_list: tuple[str, ...] | None = None
    if "replacer" in options:
        policy, replacer, allow_list = _resolve_replacer(options["replacer"])

    space: str | int | float | None = None
    if "space" in options:
        raw_space = options["space"]
        if not isinstance(raw_space, str) and not _is_number(raw_space):
            raise FormatterConfigError(
                "space", f'"space" must be a string or a number, got {_describe(raw_space)}.'
            )
        space = cast("str | int | float", raw_space)

    return FormatterConfig(
        policy=policy,
        replacer=replacer,
        allow_list=allow_list,
        space=space,
        indent=resolve_indent(space),
    )


def options_from_env(environ: Mapping[str, str] | None = None) -> dict[str, object]:
    """Read formatter options from ``LINEJSON_*`` environment variables."""

    env = os.environ if environ is None else environ
    options: dict[str, object] = {}

    raw_space = env.get(_ENV_SPACE)
    if raw_space is not None and raw_space != "":
        options["space"] = parse_space(raw_space)

    raw_keys = env.get(_ENV_KEYS, "").strip()
    if raw_keys:
        options["replacer"] = parse_keys(raw_keys)

    if options:
        logger.debug("Formatter options from environment: %s", sorted(options))
    return options


def parse_space(raw_value: str) -> str | int:
    """Numeric strings become a space count, anything else is a literal indent."""

    stripped = raw_value.strip()
    if stripped.isdigit():
        return int(stripped)
    return raw_value.replace("\\t", "\t")


def parse_keys(raw_value: str) -> list[str]:
    return [item.strip() for item in raw_value.split(",") if item.strip()]


def describe_policy(config: FormatterConfig) -> str:
    if config.policy is ReplacerPolicy.CUSTOM:
        replacer = cast("Callable[..., object]", config.replacer)
        return f"custom ({getattr(replacer, '__name__', type(replacer).__name__)})"
    if config.policy is ReplacerPolicy.ALLOW_LIST:
        return f"allow_list ({', '.join(config.allow_list or ())})"
    return str(config.policy)
