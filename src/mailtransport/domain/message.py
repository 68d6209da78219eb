"""Provider-agnostic email message model.

A :class:`Message` only accumulates data: recipients, content, attachments,
inline embeddings and headers. Address syntax is never checked here; the
transport and the provider decide what they accept.

Contents:
    * :class:`Attachment` - Immutable file payload (attachments and embeddings).
    * :class:`Message` - Mutable, chainable message builder.
    * :func:`normalize_addresses` - Address input normalization.
"""

from __future__ import annotations

import secrets
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .errors import AttachmentError

AddressInput = Union[str, Mapping[str, str], Iterable[str]]
"""A single address, a mapping of address to display name, or bare addresses."""

ContentSource = Union[str, bytes, Path]
"""A filesystem path to read, or literal content."""

DEFAULT_CHARSET = "utf-8"
DEFAULT_EMBED_FILE_NAME = "embed.dat"


@dataclass(frozen=True, slots=True)
class Attachment:
    """File payload carried by a message.

    Attributes:
        file_name: Name presented to the recipient.
        content: Raw bytes (never base64 encoded here).
        content_type: MIME type, or None to let the transport pick a default.
    """

    file_name: str
    content: bytes
    content_type: str | None = None


def normalize_addresses(addresses: AddressInput | None) -> dict[str, str]:
    """Normalize address input to an ``address -> display name`` mapping.

    Example:
        >>> normalize_addresses("a@example.com")
        {'a@example.com': ''}
        >>> normalize_addresses({"b@example.com": "Bee"})
        {'b@example.com': 'Bee'}
        >>> normalize_addresses(["c@example.com", "d@example.com"])
        {'c@example.com': '', 'd@example.com': ''}
        >>> normalize_addresses(None)
        {}
    """
    if addresses is None:
        return {}
    if isinstance(addresses, str):
        return {addresses: ""}
    if isinstance(addresses, Mapping):
        return {str(email): str(name or "") for email, name in addresses.items()}
    return {str(email): "" for email in addresses}


def _read_file(source: ContentSource) -> bytes | None:
    """Return file contents when ``source`` names an existing file, else None."""
    if isinstance(source, bytes):
        return None
    path = Path(source)
    try:
        if not path.is_file():
            return None
    except (OSError, ValueError):
        # Literal content that is not a usable path (too long, NUL bytes, ...).
        return None
    return path.read_bytes()


class Message:
    """Mutable email message built with chainable setters.

    Example:
        >>> message = (
        ...     Message()
        ...     .set_from("a@example.com")
        ...     .set_to({"b@example.com": "B"})
        ...     .set_subject("  Hi  ")
        ...     .set_text_body("hello")
        ... )
        >>> message.subject
        'Hi'
        >>> message.to
        {'b@example.com': 'B'}
        >>> message.embed_content(b"...", file_name="logo.png", cid="logo")
        'cid:logo'
    """

    def __init__(self, *, charset: str = DEFAULT_CHARSET) -> None:
        self._from: dict[str, str] = {}
        self._to: dict[str, str] = {}
        self._reply_to: dict[str, str] = {}
        self._cc: dict[str, str] = {}
        self._bcc: dict[str, str] = {}
        self._subject = ""
        self._text_body = ""
        self._html_body = ""
        self._attachments: dict[str, Attachment] = {}
        self._embeddings: dict[str, Attachment] = {}
        self._headers: dict[str, str] = {}
        self._charset = charset

    # Recipients

    @property
    def from_(self) -> dict[str, str]:
        return self._from

    def set_from(self, addresses: AddressInput) -> Message:
        self._from = normalize_addresses(addresses)
        return self

    @property
    def to(self) -> dict[str, str]:
        return self._to

    def set_to(self, addresses: AddressInput) -> Message:
        self._to = normalize_addresses(addresses)
        return self

    @property
    def reply_to(self) -> dict[str, str]:
        return self._reply_to

    def set_reply_to(self, addresses: AddressInput) -> Message:
        self._reply_to = normalize_addresses(addresses)
        return self

    @property
    def cc(self) -> dict[str, str]:
        return self._cc

    def set_cc(self, addresses: AddressInput) -> Message:
        self._cc = normalize_addresses(addresses)
        return self

    @property
    def bcc(self) -> dict[str, str]:
        return self._bcc

    def set_bcc(self, addresses: AddressInput) -> Message:
        self._bcc = normalize_addresses(addresses)
        return self

    # Content

    @property
    def subject(self) -> str:
        return self._subject

    def set_subject(self, subject: str) -> Message:
        self._subject = subject.strip()
        return self

    @property
    def text_body(self) -> str:
        return self._text_body

    def set_text_body(self, text: str) -> Message:
        self._text_body = text
        return self

    @property
    def html_body(self) -> str:
        return self._html_body

    def set_html_body(self, html: str) -> Message:
        self._html_body = html
        return self

    @property
    def charset(self) -> str:
        return self._charset

    def set_charset(self, charset: str) -> Message:
        self._charset = charset
        return self

    # Headers

    @property
    def headers(self) -> dict[str, str]:
        return self._headers

    def set_headers(self, headers: Mapping[str, str]) -> Message:
        self._headers = dict(headers)
        return self

    def add_header(self, name: str, value: str) -> Message:
        self._headers[name] = value
        return self

    # Attachments and embeddings

    @property
    def attachments(self) -> dict[str, Attachment]:
        return self._attachments

    @property
    def embeddings(self) -> dict[str, Attachment]:
        return self._embeddings

    def attach(
        self,
        source: ContentSource,
        *,
        file_name: str | None = None,
        content_type: str | None = None,
        content: str | bytes | None = None,
    ) -> Message:
        """Attach a file by path or literal content.

        Content resolution order: explicit ``content``, then the file at
        ``source`` when it exists, then ``source`` itself as literal content.
        An attachment with the same ``file_name`` is replaced.

        Raises:
            AttachmentError: When ``file_name`` is missing.
        """
        name = self._require_file_name(file_name)
        self._attachments[name] = Attachment(name, self._resolve_content(source, content), content_type)
        return self

    def attach_content(
        self,
        content: str | bytes,
        *,
        file_name: str | None = None,
        content_type: str | None = None,
    ) -> Message:
        """Attach literal content; ``file_name`` is required."""
        name = self._require_file_name(file_name)
        self._attachments[name] = Attachment(name, self._to_bytes(content), content_type)
        return self

    def embed(
        self,
        source: ContentSource,
        *,
        file_name: str | None = None,
        content_type: str | None = None,
        content: str | bytes | None = None,
        cid: str | None = None,
    ) -> str:
        """Embed a file for inline use and return its ``cid:`` reference.

        ``file_name`` defaults to the basename of ``source`` when it is a
        path, otherwise to ``embed.dat``. Without ``cid`` a random content
        id is generated; an explicit ``cid`` replaces any previous embedding
        stored under it.
        """
        if file_name is None:
            file_name = Path(source).name if isinstance(source, (str, Path)) else DEFAULT_EMBED_FILE_NAME
            file_name = file_name or DEFAULT_EMBED_FILE_NAME
        return self._store_embedding(
            Attachment(file_name, self._resolve_content(source, content), content_type),
            cid,
        )

    def embed_content(
        self,
        content: str | bytes,
        *,
        file_name: str | None = None,
        content_type: str | None = None,
        cid: str | None = None,
    ) -> str:
        """Embed literal content; ``file_name`` is required."""
        name = self._require_file_name(file_name)
        return self._store_embedding(Attachment(name, self._to_bytes(content), content_type), cid)

    def _store_embedding(self, embedding: Attachment, cid: str | None) -> str:
        content_id = cid if cid else secrets.token_hex(16)
        self._embeddings[content_id] = embedding
        return f"cid:{content_id}"

    def _resolve_content(self, source: ContentSource, content: str | bytes | None) -> bytes:
        if content is not None:
            return self._to_bytes(content)
        from_file = _read_file(source)
        if from_file is not None:
            return from_file
        return self._to_bytes(str(source) if isinstance(source, Path) else source)

    def _to_bytes(self, content: str | bytes) -> bytes:
        if isinstance(content, bytes):
            return content
        return content.encode(self._charset)

    @staticmethod
    def _require_file_name(file_name: str | None) -> str:
        if not isinstance(file_name, str) or not file_name:
            raise AttachmentError('The "file_name" option is required and must be a string.')
        return file_name

    def __str__(self) -> str:
        lines = [self._subject, f"From: {', '.join(self._from)}", f"To: {', '.join(self._to)}"]
        if self._reply_to:
            lines.append(f"Reply-To: {', '.join(self._reply_to)}")
        if self._cc:
            lines.append(f"Cc: {', '.join(self._cc)}")
        if self._bcc:
            lines.append(f"Bcc: {', '.join(self._bcc)}")
        lines.append("")
        lines.append(self._html_body or self._text_body)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"Message(subject={self._subject!r}, to={list(self._to)!r})"


__all__ = [
    "AddressInput",
    "Attachment",
    "ContentSource",
    "Message",
    "normalize_addresses",
]
