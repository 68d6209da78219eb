"""Unit tests for CLI configuration overrides (--set SECTION.KEY=VALUE).

Tests cover parsing, value coercion, deep merging and full apply_overrides
integration with mailer configuration loading.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from lib_layered_config import Config

from mailtransport.adapters.config.models import MailgunConfig, load_mailer_config_from_dict
from mailtransport.adapters.config.overrides import (
    ConfigOverride,
    apply_overrides,
    coerce_value,
    deep_merge,
    parse_override,
)

# ======================== parse_override tests ========================


@pytest.mark.os_agnostic
def test_parse_override_simple_key() -> None:
    """Simple SECTION.KEY=VALUE produces correct section and single-element key_path."""
    result = parse_override("logging.level=DEBUG")

    assert result == ConfigOverride(section="logging", key_path=("level",), value="DEBUG")


@pytest.mark.os_agnostic
def test_parse_override_nested_key() -> None:
    """Dotted key path beyond section creates multi-element key_path."""
    result = parse_override("mail.logger.max_raw_content_length=8192")

    assert result.section == "mail"
    assert result.key_path == ("logger", "max_raw_content_length")
    assert result.value == 8192


@pytest.mark.os_agnostic
def test_parse_override_value_containing_equals() -> None:
    """Value containing '=' is preserved intact after the first split."""
    assert parse_override("mail.transport.api_key=abc==").value == "abc=="


@pytest.mark.os_agnostic
def test_parse_override_empty_value() -> None:
    """Empty value after '=' produces empty string."""
    assert parse_override("mail.transport.password=").value == ""


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    ("raw", "reason"),
    [
        ("mail.transport.host", "must contain '='"),
        ("mail=value", "must contain at least one dot"),
        (".key=value", "section name is empty"),
        ("mail..host=value", "empty component"),
        ("mail.transport.=value", "empty component"),
    ],
)
def test_parse_override_rejects_malformed_input(raw: str, reason: str) -> None:
    """Malformed overrides raise ValueError naming the problem."""
    with pytest.raises(ValueError, match=reason):
        parse_override(raw)


# ======================== coerce_value tests ========================


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("true", True),
        ("false", False),
        ("587", 587),
        ("-3", -3),
        ("2.5", 2.5),
        ("null", None),
        ('["Authorization", "X-Token"]', ["Authorization", "X-Token"]),
        ('{"o:tag": "billing"}', {"o:tag": "billing"}),
    ],
)
def test_coerce_value_parses_json_literals(raw: str, expected: Any) -> None:
    """JSON literals become the matching Python values."""
    assert coerce_value(raw) == expected


@pytest.mark.os_agnostic
@pytest.mark.parametrize("raw", ["smtp.example.com", "SG.abc", "hello world", "Ünïcödé", ""])
def test_coerce_value_keeps_plain_strings(raw: str) -> None:
    """Anything that is not valid JSON stays a string."""
    assert coerce_value(raw) == raw


# ======================== deep_merge tests ========================


@pytest.mark.os_agnostic
def test_deep_merge_merges_nested_tables() -> None:
    """Nested mappings merge key by key."""
    merged = deep_merge(
        {"mail": {"logger": {"enabled": True, "category": "mail"}}},
        {"mail": {"logger": {"enabled": False}}},
    )

    assert merged == {"mail": {"logger": {"enabled": False, "category": "mail"}}}


@pytest.mark.os_agnostic
def test_deep_merge_replaces_lists_wholesale() -> None:
    """Lists in the override replace rather than extend."""
    assert deep_merge({"tags": ["a", "b"]}, {"tags": ["c"]}) == {"tags": ["c"]}


@pytest.mark.os_agnostic
def test_deep_merge_leaves_inputs_untouched() -> None:
    """Neither argument is modified."""
    base: dict[str, Any] = {"a": {"b": 1}}
    override: dict[str, Any] = {"a": {"c": 2}}

    deep_merge(base, override)

    assert base == {"a": {"b": 1}}
    assert override == {"a": {"c": 2}}


# ======================== apply_overrides tests ========================


@pytest.mark.os_agnostic
def test_apply_overrides_without_overrides_returns_same_config(
    config_factory: Callable[[dict[str, Any]], Config],
) -> None:
    """No overrides hands back the original Config instance."""
    config = config_factory({"mail": {"logging_enabled": True}})

    assert apply_overrides(config, ()) is config


@pytest.mark.os_agnostic
def test_apply_overrides_multiple_overrides(config_factory: Callable[[dict[str, Any]], Config]) -> None:
    """Several overrides land in their respective tables."""
    result = apply_overrides(
        config_factory({"mail": {"transport": {"provider": "smtp"}}}),
        ("mail.transport.host=mx.example.com", "mail.transport.port=2525", "lib_log_rich.environment=test"),
    )

    assert result.as_dict() == {
        "mail": {"transport": {"provider": "smtp", "host": "mx.example.com", "port": 2525}},
        "lib_log_rich": {"environment": "test"},
    }


@pytest.mark.os_agnostic
def test_apply_overrides_does_not_mutate_original(config_factory: Callable[[dict[str, Any]], Config]) -> None:
    """The input configuration is left unchanged."""
    config = config_factory({"mail": {"logging_enabled": True}})

    apply_overrides(config, ("mail.logging_enabled=false",))

    assert config.as_dict() == {"mail": {"logging_enabled": True}}


@pytest.mark.os_agnostic
def test_apply_overrides_rejects_malformed_input(config_factory: Callable[[dict[str, Any]], Config]) -> None:
    """A malformed override aborts with ValueError."""
    with pytest.raises(ValueError):
        apply_overrides(config_factory({}), ("no-equals-sign",))


@pytest.mark.os_agnostic
def test_overrides_switch_transport_provider(config_factory: Callable[[dict[str, Any]], Config]) -> None:
    """Overrides can select and configure a different provider."""
    config = apply_overrides(
        config_factory({"mail": {"transport": {"provider": "smtp"}}}),
        ("mail.transport.provider=mailgun", "mail.transport.api_key=key", "mail.transport.domain=mg.example.com"),
    )

    mailer = load_mailer_config_from_dict(config.as_dict())

    assert isinstance(mailer.transport, MailgunConfig)
    assert mailer.transport.messages_url == "https://api.mailgun.net/v3/mg.example.com/messages"
