"""Logging adapter - console setup and the redacting audit logger.

Contents:
    * :func:`.setup.init_logging` - Idempotent logging initialization
    * :class:`.audit.MailLogger` - Audit logger for send operations and HTTP traffic
"""

from __future__ import annotations

from .audit import REDACTED, MailLogger
from .setup import init_logging

__all__ = ["REDACTED", "MailLogger", "init_logging"]
