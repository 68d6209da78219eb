"""POSIX-conventional exit codes for CLI error paths.

Provides a single :class:`ExitCode` enum so every ``SystemExit`` raised by a
CLI command carries a meaningful, grep-friendly integer instead of a bare ``1``.

Uncaught exceptions and signals are mapped by
``lib_cli_exit_tools`` at the CLI boundary and have no members here.

Contents:
    * :class:`ExitCode` - IntEnum of all exit codes used by this application.
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """POSIX-conventional exit codes for CLI error paths.

    Values follow sysexits.h and errno conventions where applicable:

    * 0-1: generic success / failure
    * 2: ENOENT (attachment file not found)
    * 22: EINVAL
    * 69: EX_UNAVAILABLE (delivery failed)
    * 78: EX_CONFIG (sysexits.h)

    Example:
        >>> ExitCode.SUCCESS
        <ExitCode.SUCCESS: 0>
        >>> int(ExitCode.DELIVERY_FAILURE)
        69
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    FILE_NOT_FOUND = 2
    INVALID_ARGUMENT = 22
    DELIVERY_FAILURE = 69
    CONFIG_ERROR = 78


__all__ = ["ExitCode"]
