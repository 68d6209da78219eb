"""Shared CLI constants.

Contents:
    * :data:`CLICK_CONTEXT_SETTINGS` - Shared Click settings for help display.
    * :data:`TRACEBACK_SUMMARY_LIMIT` - Character budget for the one-line error summary.
    * :data:`TRACEBACK_VERBOSE_LIMIT` - Frame budget for verbose tracebacks.
"""

from __future__ import annotations

from typing import Final

#: Shared Click context flags so help output stays consistent across commands.
CLICK_CONTEXT_SETTINGS: Final[dict[str, list[str]]] = {"help_option_names": ["-h", "--help"]}

#: Character budget used when printing the error summary without traceback.
TRACEBACK_SUMMARY_LIMIT: Final[int] = 500

#: Maximum number of frames rendered when verbose tracebacks are enabled.
TRACEBACK_VERBOSE_LIMIT: Final[int] = 100

__all__ = [
    "CLICK_CONTEXT_SETTINGS",
    "TRACEBACK_SUMMARY_LIMIT",
    "TRACEBACK_VERBOSE_LIMIT",
]
