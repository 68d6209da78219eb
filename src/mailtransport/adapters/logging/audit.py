"""Redacting audit logger for send operations and raw HTTP traffic.

Emits through stdlib :mod:`logging` so whatever handler the application
installed (see :func:`mailtransport.adapters.logging.setup.init_logging`)
receives the records. Every record carries its structured data in
``extra={"mail": ...}`` and a compact JSON rendering in the message text.

Contents:
    * :data:`REDACTED` - Sentinel replacing sensitive values.
    * :class:`MailLogger` - Audit logger used by the transports.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import httpx
import orjson

from mailtransport.adapters.config.models import MailLoggerConfig
from mailtransport.domain.message import Message

REDACTED = "***REDACTED***"


def _matches(name: str, denylist: Iterable[str]) -> bool:
    lowered = name.lower()
    return any(entry.lower() in lowered for entry in denylist)


def _render(data: Mapping[str, Any]) -> str:
    return orjson.dumps(data, default=str, option=orjson.OPT_NON_STR_KEYS).decode()


def _headers_to_dict(headers: httpx.Headers) -> dict[str, str]:
    """Keep the original header casing, which ``Headers.items()`` lowercases."""
    return {key.decode("latin-1"): value.decode("latin-1") for key, value in headers.raw}


class MailLogger:
    """Structured, redacting logger for mail transports.

    A disabled instance (``config.enabled is False``) ignores every call.

    Example:
        >>> audit = MailLogger(MailLoggerConfig())
        >>> audit.redact_fields({"user": {"apiKey": "k", "name": "n"}})
        {'user': {'apiKey': '***REDACTED***', 'name': 'n'}}
        >>> audit.redact_headers({"Authorization": "Bearer x", "Accept": "application/json"})
        {'Authorization': '***REDACTED***', 'Accept': 'application/json'}
    """

    def __init__(self, config: MailLoggerConfig | None = None, *, logger: logging.Logger | None = None) -> None:
        self.config = config if config is not None else MailLoggerConfig()
        self._logger = logger if logger is not None else logging.getLogger(f"mailtransport.{self.config.category}")

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    # Emission

    def log(self, message: str, data: Mapping[str, Any] | None = None, level: int | None = None) -> None:
        """Emit ``message`` with redacted ``data`` at ``level`` (default ``log_level``)."""
        if not self.config.enabled:
            return
        resolved_level = self.config.log_level if level is None else level
        payload = self._redact_payload(dict(data or {}))
        self._logger.log(resolved_level, "%s %s", message, _render(payload), extra={"mail": payload})

    def log_send_operation(
        self,
        message: Message,
        successful: bool,
        transport_name: str,
        extra: Mapping[str, Any] | None = None,
    ) -> None:
        """Log the outcome of one send attempt.

        Always includes transport, subject, recipients and the success flag.
        With ``include_message_details`` the cc/bcc/reply-to addresses, body
        presence flags, attachment count and message headers are added.
        """
        data: dict[str, Any] = {
            "transport": transport_name,
            "subject": message.subject,
            "to": list(message.to),
            "from": list(message.from_),
            "successful": successful,
        }
        if self.config.include_message_details:
            data["cc"] = list(message.cc)
            data["bcc"] = list(message.bcc)
            data["reply_to"] = list(message.reply_to)
            data["has_text_body"] = bool(message.text_body)
            data["has_html_body"] = bool(message.html_body)
            data["attachment_count"] = len(message.attachments)
            data["headers"] = dict(message.headers)
            data["headers_may_contain_sensitive_data"] = True
        if extra:
            data.update(extra)

        operation = "Email sent successfully" if successful else "Email sending failed"
        level = self.config.log_level if successful else self.config.error_log_level
        self.log(operation, data, level)

    def log_request(self, request: httpx.Request, context: str = "") -> None:
        """Log an outgoing HTTP request when raw HTTP logging is enabled."""
        if not self.config.enabled or not self.config.log_raw_http:
            return
        request_data: dict[str, Any] = {
            "url": str(request.url),
            "method": request.method,
            "headers": self.redact_headers(_headers_to_dict(request.headers)),
        }
        try:
            content = request.content
        except httpx.RequestNotRead:
            content = request.read()
        if content:
            request_data["content"] = self.prepare_content(content)
        self.log("HTTP Request", {"context": context, "request": request_data})

    def log_response(self, response: httpx.Response, context: str = "") -> None:
        """Log an incoming HTTP response when raw HTTP logging is enabled."""
        if not self.config.enabled or not self.config.log_raw_http:
            return
        response_data: dict[str, Any] = {
            "status_code": response.status_code,
            "is_ok": response.is_success,
            "headers": self.redact_headers(_headers_to_dict(response.headers)),
        }
        content = response.content
        if content:
            response_data["content"] = self.prepare_content(content)
        self.log("HTTP Response", {"context": context, "response": response_data})

    # Redaction

    def prepare_content(self, content: bytes | str) -> Any:
        """Redact decodable JSON bodies; truncate anything else.

        Example:
            >>> audit = MailLogger(MailLoggerConfig(max_raw_content_length=4))
            >>> audit.prepare_content(b'{"password": "p"}')
            {'password': '***REDACTED***'}
            >>> audit.prepare_content("plain text body")
            'plai ... [truncated, total length: 15]'
        """
        raw = content.encode() if isinstance(content, str) else content
        try:
            parsed = orjson.loads(raw)
        except orjson.JSONDecodeError:
            parsed = None
        if isinstance(parsed, (dict, list)):
            return self.redact_fields(parsed)

        limit = self.config.max_raw_content_length
        if limit > 0 and len(raw) > limit:
            head = raw[:limit].decode("utf-8", errors="replace")
            return f"{head} ... [truncated, total length: {len(raw)}]"
        return raw.decode("utf-8", errors="replace")

    def redact_headers(self, headers: Mapping[str, Any]) -> dict[str, Any]:
        return {
            name: REDACTED if _matches(str(name), self.config.sensitive_headers) else value
            for name, value in headers.items()
        }

    def redact_fields(self, data: Any) -> Any:
        """Recursively replace values whose key matches ``sensitive_fields``."""
        if isinstance(data, Mapping):
            return {
                key: REDACTED
                if isinstance(key, str) and _matches(key, self.config.sensitive_fields)
                else self.redact_fields(value)
                for key, value in data.items()
            }
        if isinstance(data, (list, tuple)):
            return [self.redact_fields(item) for item in data]
        return data

    def _redact_payload(self, data: dict[str, Any]) -> dict[str, Any]:
        if isinstance(data.get("headers"), Mapping):
            data["headers"] = self.redact_headers(data["headers"])
        return self.redact_fields(data)


__all__ = [
    "REDACTED",
    "MailLogger",
]
