"""Port behavioral contract tests: verify in-memory adapter implementations.

Tests exercise in-memory adapters only; production adapters are tested by
their own modules and the CLI tests. Static type conformance is enforced
by pyright.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from lib_layered_config import Config

from mailtransport.adapters.config.models import MailerConfig, SmtpConfig
from mailtransport.adapters.memory import (
    TransportSpy,
    display_config_in_memory,
    init_logging_in_memory,
    load_config_in_memory,
    load_mailer_config_from_dict_in_memory,
)
from mailtransport.domain.message import Message

if TYPE_CHECKING:
    from mailtransport.application.ports import (
        BuildTransport,
        DisplayConfig,
        InitLogging,
        LoadConfig,
        LoadMailerConfigFromDict,
        Transport,
    )


# ======================== In-Memory Adapter Contract Tests ========================


@pytest.fixture
def load_config_impl() -> LoadConfig:
    """Provide in-memory LoadConfig implementation."""
    return load_config_in_memory


@pytest.fixture
def load_mailer_config_impl() -> LoadMailerConfigFromDict:
    """Provide in-memory LoadMailerConfigFromDict implementation."""
    return load_mailer_config_from_dict_in_memory


@pytest.fixture
def transport_impl() -> Transport:
    """Provide in-memory Transport implementation."""
    return TransportSpy()


@pytest.mark.os_agnostic
def test_load_config_returns_empty_config(load_config_impl: LoadConfig) -> None:
    """LoadConfig returns an empty layered config without any sources."""
    assert load_config_impl().as_dict() == {}


@pytest.mark.os_agnostic
def test_load_mailer_config_parses_mail_section(load_mailer_config_impl: LoadMailerConfigFromDict) -> None:
    """The [mail] section is validated into a MailerConfig."""
    config = load_mailer_config_impl(
        {"mail": {"logging_enabled": False, "transport": {"provider": "smtp", "port": 2525}}},
    )

    assert config.logging_enabled is False
    assert isinstance(config.transport, SmtpConfig)
    assert config.transport.port == 2525


@pytest.mark.os_agnostic
def test_load_mailer_config_defaults_without_mail_section(load_mailer_config_impl: LoadMailerConfigFromDict) -> None:
    """A missing [mail] section yields the defaults."""
    assert load_mailer_config_impl({}) == MailerConfig()


@pytest.mark.os_agnostic
def test_display_and_init_logging_accept_any_config() -> None:
    """The in-memory display and logging adapters are silent no-ops."""
    display: DisplayConfig = display_config_in_memory
    init: InitLogging = init_logging_in_memory

    assert display(Config({"mail": {}}, {})) is None
    assert init(Config({"lib_log_rich": {"environment": "test"}}, {})) is None


@pytest.mark.os_agnostic
def test_transport_records_sent_messages(transport_impl: Transport, sample_message: Message) -> None:
    """A successful send returns True and records nothing."""
    assert transport_impl.send(sample_message) is True
    assert transport_impl.send_multiple([sample_message, sample_message]) == 2
    assert not transport_impl.has_errors()


@pytest.mark.os_agnostic
def test_spy_failure_mode_records_errors(sample_message: Message) -> None:
    """should_fail makes every send fail with a recorded error."""
    spy = TransportSpy(should_fail=True)

    assert spy.send_multiple([sample_message, sample_message]) == 0
    assert len(spy.get_errors()) == 2
    error = spy.get_error()
    assert error is not None
    assert error.message == "Simulated delivery failure"

    spy.clear_errors()
    assert not spy.has_errors()


@pytest.mark.os_agnostic
def test_spy_build_records_config_and_close() -> None:
    """build returns the spy itself and remembers the configuration."""
    spy = TransportSpy()
    builder: BuildTransport = spy.build
    config = MailerConfig()

    transport = builder(config)
    transport.close()

    assert transport is spy
    assert spy.mailer_config is config
    assert spy.closed is True


@pytest.mark.os_agnostic
def test_spy_clear_resets_state(sample_message: Message) -> None:
    """clear forgets messages, errors and the configured exception."""
    spy = TransportSpy(should_fail=True, raise_exception=RuntimeError("x"))
    with pytest.raises(RuntimeError):
        spy.send(sample_message)

    spy.clear()

    assert spy.sent_messages == []
    assert spy.raise_exception is None
