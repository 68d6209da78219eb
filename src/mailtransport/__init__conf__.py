"""Static package metadata surfaced to CLI commands and documentation.

Kept in one module so the CLI, the Mailgun user agent, and the packaging
metadata agree on name and version.

Contents:
    * Module-level metadata constants.
    * :func:`print_info` - Render the metadata block for the ``info`` command.
"""

from __future__ import annotations

name = "mailtransport"
title = "Provider-agnostic email delivery over HTTP APIs and SMTP"
version = "1.0.0"
homepage = "https://github.com/mailtransport/mailtransport"
author = "mailtransport contributors"
shell_command = "mailtransport"

#: lib_layered_config identifiers; they pick the platform config directories
#: and the ``MAILTRANSPORT___SECTION__KEY`` environment prefix.
LAYEREDCONF_VENDOR = "mailtransport"
LAYEREDCONF_APP = "mailtransport"
LAYEREDCONF_SLUG = "mailtransport"


def print_info() -> None:
    """Print the summarised metadata block.

    Example:
        >>> print_info()  # doctest: +ELLIPSIS
        Info for mailtransport:
        ...
    """
    fields = [
        ("name", name),
        ("title", title),
        ("version", version),
        ("homepage", homepage),
        ("author", author),
        ("shell_command", shell_command),
    ]
    pad = max(len(label) for label, _ in fields)
    lines = [f"Info for {name}:", ""]
    lines.extend(f"    {label.ljust(pad)} = {value}" for label, value in fields)
    print("\n".join(lines))


__all__ = ["print_info"]
