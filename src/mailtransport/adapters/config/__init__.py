"""Configuration adapter - models, layered loading and CLI overrides.

Contents:
    * :mod:`.models` - Pydantic transport, logger and mailer configuration
    * :mod:`.loader` - lib_layered_config layers plus the ``--config`` file
    * :mod:`.overrides` - ``--set`` parsing and deep merge helpers
    * :mod:`.display` - Redacted lib_layered_config display
"""

from __future__ import annotations

from .display import display_config, redact_secrets
from .loader import clear_config_cache, get_default_config_path, load_config
from .models import (
    BrevoConfig,
    MailerConfig,
    MailgunConfig,
    MailLoggerConfig,
    SendGridConfig,
    SmtpConfig,
    TransportConfig,
    load_mailer_config_from_dict,
)
from .overrides import apply_overrides, deep_merge

__all__ = [
    "BrevoConfig",
    "MailLoggerConfig",
    "MailerConfig",
    "MailgunConfig",
    "SendGridConfig",
    "SmtpConfig",
    "TransportConfig",
    "apply_overrides",
    "clear_config_cache",
    "deep_merge",
    "display_config",
    "get_default_config_path",
    "load_config",
    "load_mailer_config_from_dict",
    "redact_secrets",
]
