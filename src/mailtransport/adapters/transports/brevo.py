"""Brevo (formerly Sendinblue) transactional email transport."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from mailtransport.adapters.config.models import BrevoConfig
from mailtransport.adapters.logging.audit import MailLogger
from mailtransport.domain.errors import ConfigurationError
from mailtransport.domain.message import Attachment, Message

from .base import GENERIC_ERROR_CODE, UNKNOWN_ERROR, HttpApiTransport, decode_body, encode_content

#: Status Brevo answers with when a message was accepted.
SUCCESS_STATUS = 201


def format_address(email: str, name: str) -> dict[str, str]:
    """Return a Brevo address object; ``name`` is omitted when empty.

    Example:
        >>> format_address("a@example.com", "")
        {'email': 'a@example.com'}
        >>> format_address("a@example.com", "Ann")
        {'email': 'a@example.com', 'name': 'Ann'}
    """
    result = {"email": email}
    if name:
        result["name"] = name
    return result


def format_addresses(addresses: Mapping[str, str]) -> list[dict[str, str]]:
    return [format_address(email, name) for email, name in addresses.items()]


def format_single_address(addresses: Mapping[str, str]) -> dict[str, str]:
    email, name = next(iter(addresses.items()))
    return format_address(email, name)


def format_attachments(attachments: Mapping[str, Attachment]) -> list[dict[str, str]]:
    result: list[dict[str, str]] = []
    for attachment in attachments.values():
        if not attachment.content:
            continue
        entry = {"name": attachment.file_name, "content": encode_content(attachment.content)}
        if attachment.content_type:
            entry["contentType"] = attachment.content_type
        result.append(entry)
    return result


def error_code(value: Any, fallback: int) -> int:
    """Return Brevo's numeric error code, or ``fallback`` when it has none.

    Brevo sends ``code`` as an integer, a string of digits, or a textual
    identifier such as ``"invalid_parameter"``.

    Example:
        >>> error_code(1001, 400), error_code("1001", 400), error_code("invalid_parameter", 400)
        (1001, 1001, 400)
        >>> error_code(True, 400)
        400
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    return fallback


class BrevoTransport(HttpApiTransport):
    """Send messages through ``POST /v3/smtp/email``.

    Inline embeddings are not supported by the Brevo API and are skipped.

    Example:
        >>> transport = BrevoTransport(BrevoConfig(api_key="xkeysib-1"))
        >>> transport.build_payload(
        ...     Message().set_from("a@example.com").set_to("b@example.com").set_subject("Hi").set_text_body("x")
        ... )
        {'to': [{'email': 'b@example.com'}], 'subject': 'Hi', 'sender': {'email': 'a@example.com'}, 'textContent': 'x'}
    """

    provider_name = "Brevo"

    def __init__(
        self,
        config: BrevoConfig,
        mail_logger: MailLogger | None = None,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not config.api_key:
            raise ConfigurationError("BrevoTransport api_key must be set.")
        super().__init__(config, mail_logger, http_client=http_client)
        self.config: BrevoConfig = config
        self.log(
            "BrevoTransport initialized",
            {"endpoint": config.endpoint, "tracking_enabled": config.enable_tracking},
        )

    def build_payload(self, message: Message) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "to": format_addresses(message.to),
            "subject": message.subject,
            "sender": format_single_address(message.from_),
        }
        if message.cc:
            payload["cc"] = format_addresses(message.cc)
        if message.bcc:
            payload["bcc"] = format_addresses(message.bcc)
        if message.reply_to:
            payload["replyTo"] = format_single_address(message.reply_to)
        if message.html_body:
            payload["htmlContent"] = message.html_body
        if message.text_body:
            payload["textContent"] = message.text_body
        if message.attachments:
            payload["attachment"] = format_attachments(message.attachments)
        if message.headers:
            payload["headers"] = dict(message.headers)
        if self.config.enable_tracking:
            payload["tracking"] = {"opens": True, "clicks": True}
        return self.merge_options(payload)

    def create_request(self, payload: dict[str, Any]) -> httpx.Request:
        return self.json_request(self.config.endpoint, payload, {"api-key": self.config.api_key})

    def interpret_response(self, message: Message, response: httpx.Response) -> bool:
        status = self.status_code(response)
        body = decode_body(response)

        if status == SUCCESS_STATUS:
            message_id = body.get("messageId") if isinstance(body, dict) else None
            self.log_send_operation(message, True, {"status_code": status, "message_id": message_id})
            return True

        if not isinstance(body, dict):
            return self.record_rejection(
                message,
                status,
                [(GENERIC_ERROR_CODE, f"Brevo API error (code: {status}): {UNKNOWN_ERROR}")],
                body,
            )

        code = error_code(body.get("code"), status)
        text = body.get("message")
        if not isinstance(text, str) or not text:
            text = UNKNOWN_ERROR
        return self.record_rejection(message, status, [(code, f"Brevo API error (code: {code}): {text}")], body)


__all__ = ["BrevoTransport", "error_code", "format_address", "format_addresses", "format_single_address"]
