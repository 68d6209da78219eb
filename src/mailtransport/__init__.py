"""Public package surface: message model, transports and configuration.

This module provides the stable public API for the package, routing imports
through the proper architectural layers:
- Domain exports: Message model and error types
- Adapter exports: Transports and the audit logger
- Composition exports: Wired services (configuration, transport factory)
- Metadata: Package information
"""

from __future__ import annotations

# Metadata (imported first; adapters read it at import time)
from .__init__conf__ import print_info

# Adapter exports
from .adapters.config.models import (
    BrevoConfig,
    MailerConfig,
    MailgunConfig,
    MailLoggerConfig,
    SendGridConfig,
    SmtpConfig,
)
from .adapters.logging.audit import MailLogger
from .adapters.transports import (
    BaseTransport,
    BrevoTransport,
    MailgunTransport,
    SendGridTransport,
    SmtpTransport,
)

# Composition exports (wired adapters)
from .composition import build_transport, load_config, load_mailer_config_from_dict

# Domain exports
from .domain import (
    Attachment,
    AttachmentError,
    ConfigurationError,
    ErrorRecord,
    Message,
    TransportError,
)

__all__ = [
    "Attachment",
    "AttachmentError",
    "BaseTransport",
    "BrevoConfig",
    "BrevoTransport",
    "ConfigurationError",
    "ErrorRecord",
    "MailLogger",
    "MailLoggerConfig",
    "MailerConfig",
    "MailgunConfig",
    "MailgunTransport",
    "Message",
    "SendGridConfig",
    "SendGridTransport",
    "SmtpConfig",
    "SmtpTransport",
    "TransportError",
    "build_transport",
    "load_config",
    "load_mailer_config_from_dict",
    "print_info",
]
