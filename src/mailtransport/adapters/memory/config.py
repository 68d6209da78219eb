"""In-memory configuration adapters for testing.

Provides configuration functions that satisfy the same Protocols as
production adapters but operate entirely in memory -- no filesystem,
no environment, no lib_layered_config layer discovery.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from lib_layered_config import Config

from ...domain.enums import OutputFormat
from ..config.models import MailerConfig


def load_config_in_memory(
    config_file: Path | None = None,
    *,
    profile: str | None = None,
    start_dir: str | None = None,
) -> Config:
    """Return an empty in-memory Config; every model falls back to its defaults."""
    return Config({}, {})


def load_mailer_config_from_dict_in_memory(config_dict: Mapping[str, Any]) -> MailerConfig:
    """Parse the ``[mail]`` section using the real Pydantic model."""
    mail_raw = config_dict.get("mail", {})
    return MailerConfig.model_validate(mail_raw if mail_raw else {})


def display_config_in_memory(
    config: Config,
    *,
    output_format: OutputFormat = OutputFormat.HUMAN,
    section: str | None = None,
    profile: str | None = None,
) -> None:
    """No-op display -- satisfies the DisplayConfig protocol."""


__all__ = [
    "display_config_in_memory",
    "load_config_in_memory",
    "load_mailer_config_from_dict_in_memory",
]
