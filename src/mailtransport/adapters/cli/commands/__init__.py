"""CLI command implementations.

Collects all subcommand functions and re-exports them for registration
with the root CLI group.

Contents:
    * Info command from :mod:`.info`
    * Config command from :mod:`.config_cmd`
    * Send command from :mod:`.send_cmd`
"""

from __future__ import annotations

from .config_cmd import cli_config
from .info import cli_info
from .send_cmd import cli_send

__all__ = [
    "cli_config",
    "cli_info",
    "cli_send",
]
