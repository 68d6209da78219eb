"""Tests for the Mailgun transport: form fields, multipart files, auth, responses."""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING
from urllib.parse import parse_qs

import httpx
import pytest

from mailtransport.adapters.config.models import MailgunConfig
from mailtransport.adapters.transports.mailgun import USER_AGENT, MailgunTransport
from mailtransport.domain.errors import ConfigurationError
from mailtransport.domain.message import Message

if TYPE_CHECKING:
    from conftest import RecordingHandler


def _transport(http_client: httpx.Client, **overrides: object) -> MailgunTransport:
    config = MailgunConfig.model_validate({"api_key": "key-secret", "domain": "mg.example.com", **overrides})
    return MailgunTransport(config, http_client=http_client)


def _sent_form(handler: RecordingHandler) -> dict[str, list[str]]:
    return parse_qs(handler.last_request.content.decode())


# ======================== Configuration ========================


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    ("fields", "missing"),
    [({"domain": "mg.example.com"}, "api_key"), ({"api_key": "key"}, "domain")],
)
def test_api_key_and_domain_are_required(fields: dict[str, str], missing: str) -> None:
    """Mailgun needs both an API key and a sending domain."""
    with pytest.raises(ConfigurationError, match=missing):
        MailgunTransport(MailgunConfig.model_validate(fields))


# ======================== Request ========================


@pytest.mark.os_agnostic
def test_form_fields_carry_addresses_and_bodies(
    sample_message: Message,
    http_handler: RecordingHandler,
    http_client: httpx.Client,
) -> None:
    """Addresses render as comma-joined strings with quoted display names."""
    sample_message.set_reply_to("replies@example.com").add_header("X-Campaign", "spring")

    _transport(http_client).send(sample_message)

    form = _sent_form(http_handler)
    assert form["from"] == ['"Sender" <sender@example.com>']
    assert form["to"] == ['"Alice" <alice@example.com>, bob@example.com']
    assert form["subject"] == ["Quarterly report"]
    assert form["text"] == ["Plain body"]
    assert form["html"] == ["<p>HTML body</p>"]
    assert form["h:Reply-To"] == ["replies@example.com"]
    assert form["h:X-Campaign"] == ["spring"]
    assert form["o:tracking"] == ["no"]


@pytest.mark.os_agnostic
def test_tracking_flag_sets_every_tracking_option(
    sample_message: Message,
    http_handler: RecordingHandler,
    http_client: httpx.Client,
) -> None:
    """All three tracking options follow enable_tracking."""
    _transport(http_client, enable_tracking=True).send(sample_message)

    form = _sent_form(http_handler)
    assert (form["o:tracking"], form["o:tracking-opens"], form["o:tracking-clicks"]) == (["yes"], ["yes"], ["yes"])


@pytest.mark.os_agnostic
def test_options_add_form_fields(
    sample_message: Message,
    http_handler: RecordingHandler,
    http_client: httpx.Client,
) -> None:
    """Passthrough options become additional form fields."""
    _transport(http_client, options={"o:tag": "billing", "o:tracking": "htmlonly"}).send(sample_message)

    form = _sent_form(http_handler)
    assert form["o:tag"] == ["billing"]
    assert form["o:tracking"] == ["htmlonly"]


@pytest.mark.os_agnostic
def test_request_uses_basic_auth_and_domain_url(
    sample_message: Message,
    http_handler: RecordingHandler,
    http_client: httpx.Client,
) -> None:
    """The key is sent as basic auth for user ``api``."""
    _transport(http_client).send(sample_message)

    request = http_handler.last_request
    expected = base64.b64encode(b"api:key-secret").decode()
    assert str(request.url) == "https://api.mailgun.net/v3/mg.example.com/messages"
    assert request.headers["authorization"] == f"Basic {expected}"
    assert request.headers["user-agent"] == USER_AGENT


@pytest.mark.os_agnostic
def test_eu_region_changes_base_url(
    sample_message: Message,
    http_handler: RecordingHandler,
    http_client: httpx.Client,
) -> None:
    """use_eu_region points requests at the EU API host."""
    _transport(http_client, use_eu_region=True).send(sample_message)

    assert str(http_handler.last_request.url) == "https://api.eu.mailgun.net/v3/mg.example.com/messages"


@pytest.mark.os_agnostic
def test_files_are_sent_as_multipart_parts(
    sample_message: Message,
    http_handler: RecordingHandler,
    http_client: httpx.Client,
) -> None:
    """Attachments and embeddings become named multipart file parts."""
    sample_message.attach_content(b"col1,col2", file_name="data.csv", content_type="text/csv")
    reference = sample_message.embed_content(b"\x89PNG", file_name="logo.png", content_type="image/png")

    _transport(http_client).send(sample_message)

    request = http_handler.last_request
    body = request.content
    content_id = reference.removeprefix("cid:").encode()
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert b'name="attachment[data.csv]"; filename="data.csv"' in body
    assert b'name="inline[' + content_id + b']"; filename="' + content_id + b'"' in body
    assert b"col1,col2" in body
    assert b'name="subject"' in body


@pytest.mark.os_agnostic
def test_embeddings_sharing_a_file_name_stay_separate_parts(
    sample_message: Message,
    http_handler: RecordingHandler,
    http_client: httpx.Client,
) -> None:
    """Each inline part is named after the content id its cid reference points to."""
    first = sample_message.embed_content(b"first-image", file_name="logo.png", content_type="image/png")
    second = sample_message.embed_content(b"second-image", file_name="logo.png", content_type="image/png")

    _transport(http_client).send(sample_message)

    body = http_handler.last_request.content
    assert first != second
    for reference in (first, second):
        content_id = reference.removeprefix("cid:")
        assert f'name="inline[{content_id}]"; filename="{content_id}"'.encode() in body
    assert b"first-image" in body
    assert b"second-image" in body
    assert b"inline[logo.png]" not in body


# ======================== Response ========================


@pytest.mark.os_agnostic
def test_status_200_without_error_is_success(
    sample_message: Message,
    http_handler: RecordingHandler,
    http_client: httpx.Client,
) -> None:
    """Mailgun accepts a message with 200 and a queued id."""
    http_handler.json_body = {"id": "<20260101.1@mg.example.com>", "message": "Queued. Thank you."}
    transport = _transport(http_client)

    assert transport.send(sample_message) is True
    assert not transport.has_errors()


@pytest.mark.os_agnostic
def test_status_200_with_error_key_is_failure(
    sample_message: Message,
    http_handler: RecordingHandler,
    http_client: httpx.Client,
) -> None:
    """An error key in an otherwise successful response is a rejection."""
    http_handler.json_body = {"error": "forbidden", "message": "Domain not verified"}
    transport = _transport(http_client)

    assert transport.send(sample_message) is False
    error = transport.get_error()
    assert error is not None
    assert (error.code, error.message) == (200, "Mailgun API error (code: 200): Domain not verified")


@pytest.mark.os_agnostic
def test_rejection_records_status_and_body(
    sample_message: Message,
    http_handler: RecordingHandler,
    http_client: httpx.Client,
) -> None:
    """A non-200 status records the message from the body and keeps the body."""
    http_handler.status_code = 401
    http_handler.text = "Forbidden"
    transport = _transport(http_client)

    transport.send(sample_message)

    error = transport.get_error()
    assert error is not None
    assert (error.code, error.message, error.details) == (
        401,
        "Mailgun API error (code: 401): Unknown error",
        "Forbidden",
    )
