"""Domain layer - message model and error types with no I/O dependencies.

Contents:
    * :mod:`.message` - Provider-agnostic message and attachment model
    * :mod:`.history` - Error records and bounded error history
    * :mod:`.enums` - Domain enumerations (Provider, SmtpEncryption, OutputFormat)
    * :mod:`.errors` - Domain exception types
"""

from __future__ import annotations

from .enums import OutputFormat, Provider, SmtpEncryption
from .errors import AttachmentError, ConfigurationError, TransportError
from .history import DEFAULT_MAX_ERRORS, ErrorHistory, ErrorRecord
from .message import Attachment, Message, normalize_addresses

__all__ = [
    # Message
    "Attachment",
    "Message",
    "normalize_addresses",
    # History
    "DEFAULT_MAX_ERRORS",
    "ErrorHistory",
    "ErrorRecord",
    # Enums
    "OutputFormat",
    "Provider",
    "SmtpEncryption",
    # Errors
    "AttachmentError",
    "ConfigurationError",
    "TransportError",
]
