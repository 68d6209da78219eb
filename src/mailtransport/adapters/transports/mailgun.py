"""Mailgun messages API transport.

Mailgun takes form fields rather than JSON. Files travel as multipart parts
named ``attachment[<file name>]`` (regular attachments) and
``inline[<content id>]`` (embeddings). An inline part is named after its
content id, so the ``cid:`` reference returned by :meth:`Message.embed`
resolves to it and embeddings sharing a file name stay distinct.
"""

from __future__ import annotations

import base64
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

import httpx

from mailtransport import __init__conf__
from mailtransport.adapters.config.models import MailgunConfig
from mailtransport.adapters.logging.audit import MailLogger
from mailtransport.domain.errors import ConfigurationError
from mailtransport.domain.message import Attachment, Message

from .base import UNKNOWN_ERROR, HttpApiTransport, decode_body

SUCCESS_STATUS = 200
DEFAULT_ATTACHMENT_TYPE = "application/octet-stream"
USER_AGENT = f"{__init__conf__.name}-mailgun/{__init__conf__.version}"


def format_address(email: str, name: str) -> str:
    """Render one address as Mailgun expects it.

    Example:
        >>> format_address("a@example.com", "")
        'a@example.com'
        >>> format_address("a@example.com", "Ann")
        '"Ann" <a@example.com>'
    """
    return f'"{name}" <{email}>' if name else email


def format_addresses(addresses: Mapping[str, str]) -> str:
    """Join addresses with ``", "``.

    Example:
        >>> format_addresses({"a@example.com": "", "b@example.com": "Bee"})
        'a@example.com, "Bee" <b@example.com>'
    """
    return ", ".join(format_address(email, name) for email, name in addresses.items())


def format_single_address(addresses: Mapping[str, str]) -> str:
    email, name = next(iter(addresses.items()))
    return format_address(email, name)


def _basic_auth(api_key: str) -> str:
    token = base64.b64encode(f"api:{api_key}".encode()).decode("ascii")
    return f"Basic {token}"


class MailgunTransport(HttpApiTransport):
    """Send messages through ``POST <endpoint>/<domain>/messages``."""

    provider_name = "Mailgun"

    def __init__(
        self,
        config: MailgunConfig,
        mail_logger: MailLogger | None = None,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not config.api_key:
            raise ConfigurationError("MailgunTransport api_key must be set.")
        if not config.domain:
            raise ConfigurationError("MailgunTransport domain must be set.")
        super().__init__(config, mail_logger, http_client=http_client)
        self.config: MailgunConfig = config
        self.log(
            "MailgunTransport initialized",
            {
                "domain": config.domain,
                "endpoint": config.resolved_endpoint,
                "tracking_enabled": config.enable_tracking,
            },
        )

    def build_payload(self, message: Message) -> dict[str, Any]:
        """Return form fields; file parts are :class:`Attachment` values.

        Example:
            >>> transport = MailgunTransport(MailgunConfig(api_key="k", domain="mg.example.com"))
            >>> payload = transport.build_payload(
            ...     Message().set_from("a@example.com").set_to("b@example.com").set_subject("Hi").set_text_body("x")
            ... )
            >>> payload["o:tracking"], payload["text"]
            ('no', 'x')
        """
        payload: dict[str, Any] = {
            "from": format_single_address(message.from_),
            "to": format_addresses(message.to),
            "subject": message.subject,
        }
        if message.cc:
            payload["cc"] = format_addresses(message.cc)
        if message.bcc:
            payload["bcc"] = format_addresses(message.bcc)
        if message.reply_to:
            payload["h:Reply-To"] = format_single_address(message.reply_to)
        if message.html_body:
            payload["html"] = message.html_body
        if message.text_body:
            payload["text"] = message.text_body
        for name, value in message.headers.items():
            payload[f"h:{name}"] = value

        tracking = "yes" if self.config.enable_tracking else "no"
        payload["o:tracking"] = tracking
        payload["o:tracking-opens"] = tracking
        payload["o:tracking-clicks"] = tracking

        payload = self.merge_options(payload)

        for attachment in message.attachments.values():
            if attachment.content:
                payload[f"attachment[{attachment.file_name}]"] = attachment
        for content_id, embedding in message.embeddings.items():
            payload[f"inline[{content_id}]"] = replace(embedding, file_name=content_id)
        return payload

    def create_request(self, payload: dict[str, Any]) -> httpx.Request:
        data: dict[str, Any] = {}
        files: list[tuple[str, tuple[str, bytes, str]]] = []
        for key, value in payload.items():
            if isinstance(value, Attachment):
                files.append((key, (value.file_name, value.content, value.content_type or DEFAULT_ATTACHMENT_TYPE)))
            else:
                data[key] = value

        headers = {
            "Authorization": _basic_auth(self.config.api_key),
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        return self.http_client.build_request(
            "POST",
            self.config.messages_url,
            data=data,
            files=files or None,
            headers=headers,
        )

    def interpret_response(self, message: Message, response: httpx.Response) -> bool:
        status = self.status_code(response)
        body = decode_body(response)
        fields = body if isinstance(body, dict) else {}

        if status == SUCCESS_STATUS and "error" not in fields:
            message_id = fields.get("id") if isinstance(fields.get("id"), str) else None
            self.log_send_operation(message, True, {"status_code": status, "message_id": message_id})
            return True

        text = fields.get("message")
        if not isinstance(text, str) or not text:
            text = UNKNOWN_ERROR
        return self.record_rejection(message, status, [(status, f"Mailgun API error (code: {status}): {text}")], body)


__all__ = ["MailgunTransport", "format_address", "format_addresses"]
