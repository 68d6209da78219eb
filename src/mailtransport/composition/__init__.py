"""Composition root wiring adapters to application ports.

Holds the closed provider registry: each ``provider`` tag of the transport
configuration union maps to exactly one transport class.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

# Configuration services
from ..adapters.config.display import display_config
from ..adapters.config.loader import load_config
from ..adapters.config.models import MailerConfig, load_mailer_config_from_dict

# Logging services
from ..adapters.logging.audit import MailLogger
from ..adapters.logging.setup import init_logging

# Transports
from ..adapters.transports import (
    BaseTransport,
    BrevoTransport,
    HttpApiTransport,
    MailgunTransport,
    SendGridTransport,
    SmtpTransport,
)
from ..domain.errors import ConfigurationError

if TYPE_CHECKING:
    from ..adapters.memory.transport import TransportSpy
    from ..application.ports import (
        BuildTransport,
        DisplayConfig,
        InitLogging,
        LoadConfig,
        LoadMailerConfigFromDict,
    )

TRANSPORT_REGISTRY: dict[str, type[BaseTransport]] = {
    "brevo": BrevoTransport,
    "sendgrid": SendGridTransport,
    "mailgun": MailgunTransport,
    "smtp": SmtpTransport,
}


def build_mail_logger(mailer_config: MailerConfig) -> MailLogger | None:
    """Return the audit logger, or None when sender-level logging is off."""
    if not mailer_config.logging_enabled or not mailer_config.logger.enabled:
        return None
    return MailLogger(mailer_config.logger)


def build_transport(mailer_config: MailerConfig, *, http_client: httpx.Client | None = None) -> BaseTransport:
    """Instantiate the transport selected by ``mailer_config.transport.provider``.

    Args:
        mailer_config: Validated mailer configuration.
        http_client: Optional client handed to HTTP transports (ignored by SMTP).

    Raises:
        ConfigurationError: For an unknown provider tag or incomplete
            transport settings.

    Example:
        >>> config = MailerConfig.model_validate({"transport": {"provider": "brevo", "api_key": "k"}})
        >>> type(build_transport(config)).__name__
        'BrevoTransport'
    """
    transport_config: Any = mailer_config.transport
    provider = getattr(transport_config, "provider", None)
    transport_cls = TRANSPORT_REGISTRY.get(str(provider))
    if transport_cls is None:
        raise ConfigurationError(f"Unknown mail transport provider: {provider!r}")

    mail_logger = build_mail_logger(mailer_config)
    if issubclass(transport_cls, HttpApiTransport):
        return transport_cls(transport_config, mail_logger, http_client=http_client)
    return transport_cls(transport_config, mail_logger)


# Static conformance assertions - pyright verifies that each adapter function
# structurally satisfies its corresponding Protocol at type-check time.
if TYPE_CHECKING:
    _assert_load_config: LoadConfig = load_config
    _assert_load_mailer_config_from_dict: LoadMailerConfigFromDict = load_mailer_config_from_dict
    _assert_init_logging: InitLogging = init_logging
    _assert_display_config: DisplayConfig = display_config
    _assert_build_transport: BuildTransport = build_transport


@dataclass(frozen=True, slots=True)
class AppServices:
    """Frozen container holding all application port implementations."""

    load_config: LoadConfig
    load_mailer_config_from_dict: LoadMailerConfigFromDict
    display_config: DisplayConfig
    build_transport: BuildTransport
    init_logging: InitLogging


def build_production() -> AppServices:
    """Wire production adapters into an AppServices container."""
    return AppServices(
        load_config=load_config,
        load_mailer_config_from_dict=load_mailer_config_from_dict,
        display_config=display_config,
        build_transport=build_transport,
        init_logging=init_logging,
    )


def build_testing(*, spy: TransportSpy | None = None) -> AppServices:
    """Wire in-memory adapters into an AppServices container.

    Args:
        spy: Optional TransportSpy capturing sent messages. When None, a
            fresh TransportSpy is created. Pass your own spy to assert on
            captured messages in tests.

    Returns:
        AppServices container with in-memory adapters.
    """
    from ..adapters.memory import (
        TransportSpy,
        display_config_in_memory,
        init_logging_in_memory,
        load_config_in_memory,
        load_mailer_config_from_dict_in_memory,
    )

    transport_spy = spy if spy is not None else TransportSpy()

    return AppServices(
        load_config=load_config_in_memory,
        load_mailer_config_from_dict=load_mailer_config_from_dict_in_memory,
        display_config=display_config_in_memory,
        build_transport=transport_spy.build,
        init_logging=init_logging_in_memory,
    )


__all__ = [
    # Configuration
    "load_config",
    "load_mailer_config_from_dict",
    "display_config",
    # Transports
    "TRANSPORT_REGISTRY",
    "build_mail_logger",
    "build_transport",
    # Logging
    "init_logging",
    # Composition
    "AppServices",
    "build_production",
    "build_testing",
]
