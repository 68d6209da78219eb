"""Shared transport behaviour: validation, error history and the send funnel.

Every provider adapter derives from :class:`BaseTransport`. HTTP providers
derive from :class:`HttpApiTransport`, which adds the lazily created
``httpx.Client`` and the request/response logging around each call.

Contents:
    * :class:`BaseTransport` - Validation, error history, logging hooks.
    * :class:`HttpApiTransport` - Payload -> request -> response pipeline.
"""

from __future__ import annotations

import base64
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any, ClassVar

import httpx
import orjson

from mailtransport.adapters.config.overrides import deep_merge
from mailtransport.adapters.logging.audit import MailLogger
from mailtransport.domain.errors import TransportError
from mailtransport.domain.history import ErrorHistory, ErrorRecord
from mailtransport.domain.message import Message

logger = logging.getLogger(__name__)

#: Timeout applied to the ``httpx.Client`` a transport creates for itself.
DEFAULT_HTTP_TIMEOUT = 30.0

#: Code recorded for client, network and unexpected failures.
GENERIC_ERROR_CODE = 500

UNKNOWN_ERROR = "Unknown error"


class BaseTransport(ABC):
    """Common behaviour of all transports.

    Subclasses set :attr:`provider_name`, implement :meth:`_deliver` and list
    the exceptions of their client library in :attr:`client_errors`.

    ``send`` never raises for delivery problems: validation failures,
    provider rejections, client errors and unexpected exceptions are all
    recorded in the error history and reported as ``False``.
    """

    provider_name: ClassVar[str] = "Transport"
    client_errors: ClassVar[tuple[type[BaseException], ...]] = ()
    client_error_label: ClassVar[str] = "Client error"

    def __init__(self, config: Any, mail_logger: MailLogger | None = None) -> None:
        self.config = config
        self.mail_logger = mail_logger if config.enable_logging else None
        self._errors = ErrorHistory(config.max_errors)

    # Public API

    def send(self, message: Message) -> bool:
        """Attempt one delivery of ``message``; return True on success."""
        self.log(
            f"Preparing to send email via {self.provider_name}",
            {"subject": message.subject, "to": list(message.to), "from": list(message.from_)},
        )
        try:
            self.validate_message(message)
            return self._deliver(message)
        except TransportError as exc:
            self.add_error(exc.code, str(exc), exc.details)
            self.log_send_operation(message, False, {"exception": "TransportError", "error": str(exc)})
        except self.client_errors as exc:
            error = f"{self.client_error_label}: {exc}"
            self.add_error(GENERIC_ERROR_CODE, error)
            self.log_send_operation(message, False, {"exception": type(exc).__name__, "error": error})
        except Exception as exc:
            logger.debug("Unexpected failure in %s transport", self.provider_name, exc_info=True)
            error = f"Unexpected error: {exc}"
            self.add_error(GENERIC_ERROR_CODE, error)
            self.log_send_operation(message, False, {"exception": type(exc).__name__, "error": error})
        return False

    def send_multiple(self, messages: Iterable[Message]) -> int:
        """Send ``messages`` in order and return how many succeeded.

        A failed message does not stop the ones after it.
        """
        return sum(1 for message in messages if self.send(message))

    def get_error(self) -> ErrorRecord | None:
        """Return the most recent error, or None."""
        return self._errors.last

    def get_errors(self) -> list[ErrorRecord]:
        """Return the retained errors, oldest first."""
        return self._errors.to_list()

    def has_errors(self) -> bool:
        return bool(self._errors)

    def clear_errors(self) -> None:
        self._errors.clear()

    def close(self) -> None:
        """Release resources held by the transport. No-op by default."""

    def __enter__(self) -> BaseTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # Helpers for subclasses

    def validate_message(self, message: Message) -> None:
        """Raise :class:`TransportError` when ``message`` cannot be sent."""
        if not message.from_:
            raise TransportError('Message must have at least one "from" address')
        if not message.to:
            raise TransportError('Message must have at least one "to" address')
        if not message.subject:
            raise TransportError("Message must have a subject")
        if not message.text_body and not message.html_body:
            raise TransportError("Message must have either a text or HTML body")

    def add_error(self, code: int, message: str, details: Any = None) -> None:
        self._errors.append(ErrorRecord(code, message, details))

    def log(self, message: str, data: Mapping[str, Any] | None = None, level: int | None = None) -> None:
        if self.mail_logger is not None:
            self.mail_logger.log(message, data, level)

    def log_send_operation(self, message: Message, successful: bool, extra: Mapping[str, Any] | None = None) -> None:
        if self.mail_logger is not None:
            self.mail_logger.log_send_operation(message, successful, self.provider_name, extra)

    def merge_options(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Overlay the configured passthrough ``options`` on a payload."""
        options = self.config.options
        return deep_merge(payload, options) if options else payload

    @abstractmethod
    def _deliver(self, message: Message) -> bool:
        """Send a validated message; record errors and return False on rejection."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(config={self.config!r})"


def _status_code(response: httpx.Response) -> int:
    status = response.status_code
    return status if isinstance(status, int) and not isinstance(status, bool) else GENERIC_ERROR_CODE


def decode_body(response: httpx.Response) -> Any:
    """Decode a JSON response body; fall back to the raw text or None.

    Example:
        >>> decode_body(httpx.Response(400, json={"message": "bad"}))
        {'message': 'bad'}
        >>> decode_body(httpx.Response(502, text="Bad Gateway"))
        'Bad Gateway'
        >>> decode_body(httpx.Response(500)) is None
        True
    """
    content = response.content
    if not content:
        return None
    try:
        return orjson.loads(content)
    except orjson.JSONDecodeError:
        return response.text


def encode_content(content: bytes) -> str:
    """Base64-encode attachment bytes for JSON payloads.

    Example:
        >>> encode_content(b"hello")
        'aGVsbG8='
    """
    return base64.b64encode(content).decode("ascii")


class HttpApiTransport(BaseTransport):
    """Transport that talks to a provider's HTTP API through ``httpx``.

    The client is created on first use and cached. A client passed in by the
    caller is used as-is and never closed by :meth:`close`.
    """

    client_errors = (httpx.HTTPError,)
    client_error_label = "HTTP client error"

    def __init__(
        self,
        config: Any,
        mail_logger: MailLogger | None = None,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        super().__init__(config, mail_logger)
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def http_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=DEFAULT_HTTP_TIMEOUT)
        return self._http_client

    def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def _deliver(self, message: Message) -> bool:
        payload = self.build_payload(message)
        request = self.create_request(payload)
        if self.mail_logger is not None:
            self.mail_logger.log_request(request, f"{self.provider_name} API Request")
        response = self.http_client.send(request)
        if self.mail_logger is not None:
            self.mail_logger.log_response(response, f"{self.provider_name} API Response")
        return self.interpret_response(message, response)

    def status_code(self, response: httpx.Response) -> int:
        """Return the response status, or 500 when it is not an integer."""
        return _status_code(response)

    def json_request(self, url: str, payload: Mapping[str, Any], headers: Mapping[str, str]) -> httpx.Request:
        return self.http_client.build_request(
            "POST",
            url,
            content=orjson.dumps(payload),
            headers={"Content-Type": "application/json", "Accept": "application/json", **headers},
        )

    def record_rejection(
        self,
        message: Message,
        status: int,
        errors: list[tuple[int, str]],
        details: Any,
    ) -> bool:
        """Record one error per entry, log the failed send, return False."""
        for code, text in errors:
            self.add_error(code, text, details)
        self.log_send_operation(message, False, {"status_code": status, "error_details": details})
        return False

    @abstractmethod
    def build_payload(self, message: Message) -> dict[str, Any]:
        """Translate ``message`` into the provider's request payload."""

    @abstractmethod
    def create_request(self, payload: dict[str, Any]) -> httpx.Request:
        """Build the HTTP request carrying ``payload``."""

    @abstractmethod
    def interpret_response(self, message: Message, response: httpx.Response) -> bool:
        """Turn the provider response into success or recorded errors."""


__all__ = [
    "DEFAULT_HTTP_TIMEOUT",
    "GENERIC_ERROR_CODE",
    "UNKNOWN_ERROR",
    "BaseTransport",
    "HttpApiTransport",
    "decode_body",
    "encode_content",
]
