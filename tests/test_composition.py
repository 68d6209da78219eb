"""Tests for the composition root: provider registry, logger cascade, service wiring."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import httpx
import pytest

from mailtransport.adapters.config.models import MailerConfig
from mailtransport.adapters.memory import TransportSpy
from mailtransport.adapters.transports import (
    BrevoTransport,
    MailgunTransport,
    SendGridTransport,
    SmtpTransport,
)
from mailtransport.composition import (
    TRANSPORT_REGISTRY,
    build_mail_logger,
    build_production,
    build_testing,
    build_transport,
)
from mailtransport.domain.enums import Provider
from mailtransport.domain.errors import ConfigurationError


def _mailer(transport: dict[str, Any], **fields: Any) -> MailerConfig:
    return MailerConfig.model_validate({"transport": transport, **fields})


@pytest.mark.os_agnostic
def test_registry_covers_every_provider() -> None:
    """Each Provider value has exactly one transport class."""
    assert set(TRANSPORT_REGISTRY) == {provider.value for provider in Provider}


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    ("transport", "expected"),
    [
        ({"provider": "brevo", "api_key": "k"}, BrevoTransport),
        ({"provider": "sendgrid", "api_key": "k"}, SendGridTransport),
        ({"provider": "mailgun", "api_key": "k", "domain": "mg.example.com"}, MailgunTransport),
        ({"provider": "smtp", "host": "mx.example.com"}, SmtpTransport),
    ],
)
def test_build_transport_picks_class_from_provider(transport: dict[str, Any], expected: type) -> None:
    """The provider tag selects the transport implementation."""
    assert type(build_transport(_mailer(transport))) is expected


@pytest.mark.os_agnostic
def test_unknown_provider_is_a_configuration_error() -> None:
    """A provider without a registered transport is refused."""
    config = MailerConfig.model_construct(transport=SimpleNamespace(provider="pigeon"))

    with pytest.raises(ConfigurationError, match="pigeon"):
        build_transport(config)


@pytest.mark.os_agnostic
def test_incomplete_provider_settings_surface_as_configuration_error() -> None:
    """Missing credentials fail at build time."""
    with pytest.raises(ConfigurationError, match="api_key"):
        build_transport(_mailer({"provider": "sendgrid"}))


@pytest.mark.os_agnostic
def test_http_client_is_handed_to_http_transports() -> None:
    """A caller-supplied client is used as-is and not closed by the transport."""
    client = httpx.Client()
    try:
        transport = build_transport(_mailer({"provider": "brevo", "api_key": "k"}), http_client=client)
        transport.close()

        assert isinstance(transport, BrevoTransport)
        assert transport.http_client is client
        assert not client.is_closed
    finally:
        client.close()


@pytest.mark.os_agnostic
def test_smtp_ignores_http_client() -> None:
    """SMTP transports are built without the HTTP client."""
    with httpx.Client() as client:
        transport = build_transport(_mailer({"provider": "smtp"}), http_client=client)

    assert isinstance(transport, SmtpTransport)


# ======================== Logger cascade ========================


@pytest.mark.os_agnostic
def test_mailer_logging_switch_disables_audit_logger() -> None:
    """logging_enabled=False means the transport gets no audit logger."""
    config = _mailer({"provider": "smtp"}, logging_enabled=False)

    assert build_mail_logger(config) is None
    assert build_transport(config).mail_logger is None


@pytest.mark.os_agnostic
def test_disabled_logger_config_yields_no_audit_logger() -> None:
    """logger.enabled=False is honoured as well."""
    assert build_mail_logger(_mailer({"provider": "smtp"}, logger={"enabled": False})) is None


@pytest.mark.os_agnostic
def test_transport_logging_switch_overrides_mailer() -> None:
    """A transport with enable_logging=False ignores the mailer's logger."""
    transport = build_transport(_mailer({"provider": "smtp", "enable_logging": False}))

    assert transport.mail_logger is None


@pytest.mark.os_agnostic
def test_enabled_logging_reaches_transport() -> None:
    """With every switch on the transport logs through the configured audit logger."""
    config = _mailer({"provider": "smtp"}, logger={"include_message_details": True})

    transport = build_transport(config)

    assert transport.mail_logger is not None
    assert transport.mail_logger.config.include_message_details is True


# ======================== Service containers ========================


@pytest.mark.os_agnostic
def test_production_services_use_real_adapters() -> None:
    """The production container wires the real builder."""
    assert build_production().build_transport is build_transport


@pytest.mark.os_agnostic
def test_testing_services_return_the_spy() -> None:
    """The testing container hands out the injected spy as transport."""
    spy = TransportSpy()
    services = build_testing(spy=spy)

    transport = services.build_transport(services.load_mailer_config_from_dict(services.load_config().as_dict()))

    assert transport is spy
    assert isinstance(spy.mailer_config, MailerConfig)
