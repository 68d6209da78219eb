"""SendGrid v3 mail send transport."""

from __future__ import annotations

from typing import Any

import httpx

from mailtransport.adapters.config.models import SendGridConfig
from mailtransport.adapters.logging.audit import MailLogger
from mailtransport.domain.errors import ConfigurationError
from mailtransport.domain.message import Message

from .base import UNKNOWN_ERROR, HttpApiTransport, decode_body, encode_content
from .brevo import format_addresses, format_single_address

SUCCESS_STATUS = 202
DEFAULT_ATTACHMENT_TYPE = "application/octet-stream"


def normalize_errors(entries: Any) -> list[str]:
    """Flatten SendGrid's ``errors`` array into readable strings.

    Entries without a message are dropped.

    Example:
        >>> normalize_errors([{"message": "Invalid email", "field": "from.email"}, {"field": "x"}])
        ['Invalid email (field: from.email)']
        >>> normalize_errors("nope")
        []
    """
    if not isinstance(entries, list):
        return []
    errors: list[str] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        text = entry.get("message")
        if not isinstance(text, str) or not text:
            continue
        field = entry.get("field")
        if isinstance(field, str) and field:
            text = f"{text} (field: {field})"
        errors.append(text)
    return errors


class SendGridTransport(HttpApiTransport):
    """Send messages through SendGrid's ``/v3/mail/send`` endpoint.

    Inline embeddings are sent as attachments with ``disposition: inline``
    and their content id.
    """

    provider_name = "SendGrid"

    def __init__(
        self,
        config: SendGridConfig,
        mail_logger: MailLogger | None = None,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not config.api_key:
            raise ConfigurationError("SendGridTransport api_key must be set.")
        super().__init__(config, mail_logger, http_client=http_client)
        self.config: SendGridConfig = config
        self.log(
            "SendGridTransport initialized",
            {
                "endpoint": config.resolved_endpoint,
                "use_eu_api": config.use_eu_api,
                "tracking_enabled": config.enable_tracking,
            },
        )

    def build_payload(self, message: Message) -> dict[str, Any]:
        personalization: dict[str, Any] = {"to": format_addresses(message.to)}
        if message.cc:
            personalization["cc"] = format_addresses(message.cc)
        if message.bcc:
            personalization["bcc"] = format_addresses(message.bcc)

        payload: dict[str, Any] = {
            "personalizations": [personalization],
            "from": format_single_address(message.from_),
            "subject": message.subject,
        }
        if message.reply_to:
            payload["reply_to"] = format_single_address(message.reply_to)

        content: list[dict[str, str]] = []
        if message.text_body:
            content.append({"type": "text/plain", "value": message.text_body})
        if message.html_body:
            content.append({"type": "text/html", "value": message.html_body})
        payload["content"] = content

        attachments = self._format_attachments(message)
        if attachments:
            payload["attachments"] = attachments
        if message.headers:
            payload["headers"] = dict(message.headers)
        if self.config.enable_tracking:
            payload["tracking_settings"] = {
                "click_tracking": {"enable": True},
                "open_tracking": {"enable": True},
            }
        return self.merge_options(payload)

    @staticmethod
    def _format_attachments(message: Message) -> list[dict[str, str]]:
        result: list[dict[str, str]] = []
        for attachment in message.attachments.values():
            if not attachment.content:
                continue
            result.append(
                {
                    "filename": attachment.file_name,
                    "content": encode_content(attachment.content),
                    "disposition": "attachment",
                    "type": attachment.content_type or DEFAULT_ATTACHMENT_TYPE,
                }
            )
        for content_id, embedding in message.embeddings.items():
            result.append(
                {
                    "filename": embedding.file_name,
                    "content": encode_content(embedding.content),
                    "disposition": "inline",
                    "type": embedding.content_type or DEFAULT_ATTACHMENT_TYPE,
                    "content_id": content_id,
                }
            )
        return result

    def create_request(self, payload: dict[str, Any]) -> httpx.Request:
        return self.json_request(
            self.config.resolved_endpoint,
            payload,
            {"Authorization": f"Bearer {self.config.api_key}"},
        )

    def interpret_response(self, message: Message, response: httpx.Response) -> bool:
        status = self.status_code(response)
        if status == SUCCESS_STATUS:
            self.log_send_operation(message, True, {"status_code": status})
            return True

        body = decode_body(response)
        errors = normalize_errors(body.get("errors") if isinstance(body, dict) else None) or [UNKNOWN_ERROR]
        return self.record_rejection(
            message,
            status,
            [(status, f"SendGrid API error (code: {status}): {error}") for error in errors],
            body,
        )


__all__ = ["SendGridTransport", "normalize_errors"]
