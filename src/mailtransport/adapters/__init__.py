"""Adapters layer - infrastructure and framework integrations.

Contains adapter implementations that connect the application to external
systems and frameworks (HTTP APIs, SMTP, configuration files, logging, CLI).

Contents:
    * :mod:`.transports` - Brevo, SendGrid, Mailgun and SMTP transports
    * :mod:`.config` - Configuration models, loading and display
    * :mod:`.logging` - Console setup and the redacting audit logger
    * :mod:`.memory` - In-memory adapters for tests
    * :mod:`.cli` - Click CLI framework integration
"""

from __future__ import annotations

__all__: list[str] = []
