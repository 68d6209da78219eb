"""Shared pytest fixtures for transport, logging and CLI tests.

Centralizes test infrastructure:
- All shared fixtures live here
- Tests import fixtures implicitly via pytest's conftest discovery
- Fixtures use descriptive names that read as plain English
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any

import httpx
import lib_cli_exit_tools
import lib_log_rich.runtime
import pytest
from click.testing import CliRunner
from lib_layered_config import Config

from mailtransport.adapters.config.models import MailLoggerConfig
from mailtransport.adapters.logging.audit import MailLogger
from mailtransport.adapters.memory import TransportSpy
from mailtransport.domain.message import Message

if TYPE_CHECKING:
    from mailtransport.composition import AppServices


#: Logger name the audit logger fixtures write to.
AUDIT_LOGGER_NAME = "mailtransport.mail.test"

CONFIG_FIELDS: tuple[str, ...] = tuple(field.name for field in fields(type(lib_cli_exit_tools.config)))


def _snapshot_cli_config() -> dict[str, object]:
    """Capture every attribute from ``lib_cli_exit_tools.config``."""
    return {name: getattr(lib_cli_exit_tools.config, name) for name in CONFIG_FIELDS}


def _restore_cli_config(snapshot: dict[str, object]) -> None:
    """Reapply a configuration snapshot captured by ``_snapshot_cli_config``."""
    for name, value in snapshot.items():
        setattr(lib_cli_exit_tools.config, name, value)


@dataclass
class RecordingHandler:
    """Answers HTTP requests with a fixed response and remembers them.

    Attributes:
        status_code: Status returned for every request.
        json_body: JSON body of the response; ignored when ``text`` is set.
        text: Raw response body.
        raise_exc: When set, raised instead of answering.
        requests: Requests seen so far.
    """

    status_code: int = 200
    json_body: Any = None
    text: str | None = None
    raise_exc: Exception | None = None
    requests: list[httpx.Request] = field(default_factory=lambda: [])

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self.raise_exc is not None:
            raise self.raise_exc
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        if self.json_body is None:
            return httpx.Response(self.status_code)
        return httpx.Response(self.status_code, json=self.json_body)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def http_handler() -> RecordingHandler:
    """Provide a recording handler for ``httpx.MockTransport``.

    Example:
        def test_status(http_handler, http_client) -> None:
            http_handler.status_code = 201
    """
    return RecordingHandler()


@pytest.fixture
def http_client(http_handler: RecordingHandler) -> Iterator[httpx.Client]:
    """Provide an ``httpx.Client`` whose traffic goes to ``http_handler``."""
    client = httpx.Client(transport=httpx.MockTransport(http_handler))
    try:
        yield client
    finally:
        client.close()


@pytest.fixture
def sample_message() -> Message:
    """Provide a message that passes validation for every transport."""
    return (
        Message()
        .set_from({"sender@example.com": "Sender"})
        .set_to({"alice@example.com": "Alice", "bob@example.com": ""})
        .set_subject("Quarterly report")
        .set_text_body("Plain body")
        .set_html_body("<p>HTML body</p>")
    )


@pytest.fixture
def audit_logger() -> MailLogger:
    """Provide an enabled audit logger writing to :data:`AUDIT_LOGGER_NAME`."""
    return MailLogger(MailLoggerConfig(), logger=logging.getLogger(AUDIT_LOGGER_NAME))


@pytest.fixture
def verbose_audit_logger() -> MailLogger:
    """Provide an audit logger with message details and raw HTTP logging on."""
    config = MailLoggerConfig(include_message_details=True, log_raw_http=True)
    return MailLogger(config, logger=logging.getLogger(AUDIT_LOGGER_NAME))


@pytest.fixture
def audit_records(caplog: pytest.LogCaptureFixture) -> Callable[[], list[logging.LogRecord]]:
    """Return a helper listing captured records of the audit test logger."""
    caplog.set_level(logging.DEBUG, logger=AUDIT_LOGGER_NAME)

    def _records() -> list[logging.LogRecord]:
        return [record for record in caplog.records if record.name == AUDIT_LOGGER_NAME]

    return _records


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a fresh CliRunner per test."""
    return CliRunner()


@pytest.fixture
def transport_spy() -> TransportSpy:
    """Provide a fresh TransportSpy per test."""
    return TransportSpy()


@pytest.fixture
def testing_factory(transport_spy: TransportSpy) -> Callable[[], AppServices]:
    """Provide a services factory wired with in-memory adapters and ``transport_spy``."""
    from mailtransport.composition import build_testing

    def _factory() -> AppServices:
        return build_testing(spy=transport_spy)

    return _factory


@pytest.fixture
def production_factory() -> Callable[[], AppServices]:
    """Provide the production services factory for tests."""
    from mailtransport.composition import build_production

    return build_production


@pytest.fixture
def managed_traceback_state() -> Iterator[None]:
    """Reset lib_cli_exit_tools traceback flags to a baseline and restore them after the test."""
    lib_cli_exit_tools.reset_config()
    lib_cli_exit_tools.config.traceback = False
    lib_cli_exit_tools.config.traceback_force_color = False
    snapshot = _snapshot_cli_config()
    try:
        yield
    finally:
        _restore_cli_config(snapshot)


def _shutdown_log_runtime() -> None:
    if lib_log_rich.runtime.is_initialised():
        lib_log_rich.runtime.shutdown()


@pytest.fixture
def isolated_logging() -> Iterator[None]:
    """Shut down any lib_log_rich runtime before and after the test."""
    _shutdown_log_runtime()
    try:
        yield
    finally:
        _shutdown_log_runtime()


@pytest.fixture
def clear_config_cache() -> Iterator[None]:
    """Clear the cached configuration layers before the test."""
    from mailtransport.adapters.config import loader as config_mod

    config_mod.clear_config_cache()
    yield


@pytest.fixture
def config_factory() -> Callable[[dict[str, Any]], Config]:
    """Create real Config instances from test data dicts without filesystem I/O.

    Example:
        def test_section(config_factory) -> None:
            config = config_factory({"mail": {"logging_enabled": False}})
    """

    def _factory(data: dict[str, Any]) -> Config:
        return Config(data, {})

    return _factory


@pytest.fixture
def config_cli_context(
    config_factory: Callable[[dict[str, Any]], Config],
) -> Callable[[dict[str, Any]], Callable[[], AppServices]]:
    """Return a factory building production services whose config loader yields the given data."""
    from mailtransport.composition import AppServices, build_production

    def _create(config_data: dict[str, Any]) -> Callable[[], AppServices]:
        config = config_factory(config_data)
        prod = build_production()

        def _fake_load_config(*_args: Any, **_kwargs: Any) -> Config:
            return config

        test_services = AppServices(
            load_config=_fake_load_config,
            load_mailer_config_from_dict=prod.load_mailer_config_from_dict,
            display_config=prod.display_config,
            build_transport=prod.build_transport,
            init_logging=prod.init_logging,
        )
        return lambda: test_services

    return _create
