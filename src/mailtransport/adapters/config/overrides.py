"""Parse and apply ``--set SECTION.KEY=VALUE`` overrides to a layered Config.

Also home of :func:`deep_merge`, used by the transports that merge
passthrough ``options`` into provider payloads.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, cast

import orjson
from lib_layered_config import Config

CoercedValue = str | int | float | bool | None | list[object] | dict[str, object]
"""Union of types that :func:`coerce_value` can produce."""


@dataclass(frozen=True, slots=True)
class ConfigOverride:
    """A single parsed configuration override."""

    section: str
    key_path: tuple[str, ...]
    value: CoercedValue


def parse_override(raw: str) -> ConfigOverride:
    """Split a ``SECTION.KEY[.SUBKEY...]=VALUE`` string into a ConfigOverride.

    The first dot separates the top-level section from the key path.
    The first ``=`` separates the full dotted path from the value.

    Raises:
        ValueError: If the string lacks ``=``, has no dot in the key, or has
            empty section/key components.

    Examples:
        >>> override = parse_override("mail.transport.port=587")
        >>> override.section
        'mail'
        >>> override.key_path
        ('transport', 'port')
        >>> override.value
        587
    """
    if "=" not in raw:
        raise ValueError(f"Invalid override {raw!r}: must contain '='")

    path_part, value_str = raw.split("=", maxsplit=1)

    if "." not in path_part:
        raise ValueError(f"Invalid override {raw!r}: key must contain at least one dot (SECTION.KEY)")

    parts = path_part.split(".")
    section = parts[0]
    key_parts = tuple(parts[1:])

    if not section:
        raise ValueError(f"Invalid override {raw!r}: section name is empty")
    if not all(key_parts):
        raise ValueError(f"Invalid override {raw!r}: key path contains empty component")

    return ConfigOverride(section=section, key_path=key_parts, value=coerce_value(value_str))


def coerce_value(raw: str) -> CoercedValue:
    """Coerce a raw string value using JSON parsing with string fallback.

    Examples:
        >>> coerce_value("true")
        True
        >>> coerce_value("42")
        42
        >>> coerce_value("null")
        >>> coerce_value('["a","b"]')
        ['a', 'b']
        >>> coerce_value("smtp.example.com")
        'smtp.example.com'
        >>> coerce_value("")
        ''
    """
    if raw == "":
        return ""
    try:
        return orjson.loads(raw)
    except (orjson.JSONDecodeError, ValueError):
        return raw


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return a new dict with ``override`` merged recursively into ``base``.

    Nested mappings are merged key by key; any other value in ``override``
    replaces the value in ``base``. Neither input is modified.

    Example:
        >>> deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
        {'a': {'x': 1, 'y': 3}, 'b': 1, 'c': 4}
    """
    result: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in override.items():
        existing = result.get(key)
        if isinstance(existing, Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(cast(Mapping[str, Any], existing), cast(Mapping[str, Any], value))
        else:
            result[key] = copy.deepcopy(value)
    return result


def _nest_override(target: dict[str, Any], override: ConfigOverride) -> None:
    """Build a nested override dict from a parsed ConfigOverride.

    Examples:
        >>> d: dict[str, object] = {}
        >>> _nest_override(d, ConfigOverride(section="mail", key_path=("transport", "port"), value=2))
        >>> d
        {'mail': {'transport': {'port': 2}}}
    """
    node: dict[str, Any] = target.setdefault(override.section, {})
    for part in override.key_path[:-1]:
        existing = node.setdefault(part, {})
        if not isinstance(existing, dict):
            msg = f"Expected dict at key {part!r}, got {type(existing).__name__}"
            raise TypeError(msg)
        node = cast(dict[str, Any], existing)
    node[override.key_path[-1]] = override.value


def apply_overrides(config: Config, raw_overrides: tuple[str, ...]) -> Config:
    """Deep-merge CLI overrides into a Config instance.

    Returns:
        New Config with overrides applied, or ``config`` itself when
        ``raw_overrides`` is empty.

    Raises:
        ValueError: If any override string is malformed.
        TypeError: If an override descends into a non-table value.

    Examples:
        >>> cfg = Config({"mail": {"logging_enabled": True}}, {})
        >>> apply_overrides(cfg, ("mail.logging_enabled=false",))["mail"]["logging_enabled"]
        False
        >>> apply_overrides(cfg, ()) is cfg
        True
    """
    if not raw_overrides:
        return config

    overrides: dict[str, Any] = {}
    for raw in raw_overrides:
        _nest_override(overrides, parse_override(raw))
    return config.with_overrides(overrides)


__all__ = [
    "CoercedValue",
    "ConfigOverride",
    "apply_overrides",
    "coerce_value",
    "deep_merge",
    "parse_override",
]
