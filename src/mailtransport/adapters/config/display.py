"""Display configuration - delegates to lib_layered_config.

Thin wrapper around lib_layered_config's Rich-styled display that flushes
pending log output first and masks every non-empty ``api_key`` and
``password`` value before rendering.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

import lib_log_rich.runtime
from lib_layered_config import Config
from lib_layered_config import OutputFormat as LibOutputFormat
from lib_layered_config import display_config as _lib_display
from rich.console import Console

from mailtransport.domain.enums import OutputFormat

from ..logging.audit import REDACTED
from .models import SECRET_FIELDS


def secret_overrides(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return a nested mapping that replaces each set credential with a placeholder.

    Empty credentials are left out so users can spot unset keys.

    Example:
        >>> secret_overrides({"mail": {"transport": {"api_key": "k", "domain": "d"}}, "x": {"password": ""}})
        {'mail': {'transport': {'api_key': '***REDACTED***'}}}
    """
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, Mapping):
            nested = secret_overrides(cast(Mapping[str, Any], value))
            if nested:
                result[key] = nested
        elif key in SECRET_FIELDS and value:
            result[key] = REDACTED
    return result


def redact_secrets(config: Config) -> Config:
    """Return ``config`` with credential values masked.

    Example:
        >>> masked = redact_secrets(Config({"mail": {"transport": {"password": "pw", "host": "h"}}}, {}))
        >>> masked["mail"]["transport"]
        {'password': '***REDACTED***', 'host': 'h'}
    """
    overrides = secret_overrides(config.as_dict())
    return config.with_overrides(overrides) if overrides else config


def display_config(
    config: Config,
    *,
    output_format: OutputFormat = OutputFormat.HUMAN,
    section: str | None = None,
    console: Console | None = None,
    profile: str | None = None,
) -> None:
    """Display configuration using lib_layered_config's Rich display.

    Args:
        config: Already-loaded layered configuration object to display.
        output_format: Human-readable TOML-like sections or JSON.
        section: Optional top-level section to show on its own.
        console: Optional Rich console; the library default writes to stdout.
        profile: Optional profile name to include in provenance comments.

    Raises:
        ValueError: If a section was requested that doesn't exist.
    """
    if lib_log_rich.runtime.is_initialised():
        lib_log_rich.runtime.flush()

    lib_format = LibOutputFormat(output_format.value)
    _lib_display(redact_secrets(config), output_format=lib_format, section=section, profile=profile, console=console)


__all__ = ["display_config", "redact_secrets", "secret_overrides"]
