"""SMTP transport built on :mod:`smtplib` and :class:`email.message.EmailMessage`.

One connection is opened per message and closed afterwards. The connection
class (``smtplib.SMTP`` or ``smtplib.SMTP_SSL``) is resolved on first use.
"""

from __future__ import annotations

import mimetypes
import smtplib
import ssl
from collections.abc import Callable, Mapping
from email.headerregistry import Address
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from typing import Any

from mailtransport.adapters.config.models import SmtpConfig
from mailtransport.adapters.logging.audit import MailLogger
from mailtransport.domain.enums import SmtpEncryption
from mailtransport.domain.errors import ConfigurationError
from mailtransport.domain.message import Attachment, Message

from .base import BaseTransport

DEFAULT_ATTACHMENT_TYPE = "application/octet-stream"

ConnectionFactory = Callable[..., smtplib.SMTP]


def _mime_type(attachment: Attachment) -> tuple[str, str]:
    """Split the attachment's MIME type, guessing from the file name.

    Example:
        >>> _mime_type(Attachment("report.pdf", b"%PDF"))
        ('application', 'pdf')
        >>> _mime_type(Attachment("blob", b"", "image/png"))
        ('image', 'png')
    """
    content_type = attachment.content_type or mimetypes.guess_type(attachment.file_name)[0]
    if not content_type or "/" not in content_type:
        content_type = DEFAULT_ATTACHMENT_TYPE
    maintype, _, subtype = content_type.partition("/")
    return maintype, subtype


def _addresses(addresses: Mapping[str, str]) -> tuple[Address, ...]:
    return tuple(Address(display_name=name, addr_spec=email) for email, name in addresses.items())


class SmtpTransport(BaseTransport):
    """Deliver messages to an SMTP server.

    ``config.options`` is applied as extra headers on every message; headers
    set on the message itself take precedence.
    """

    provider_name = "SMTP"
    client_errors = (smtplib.SMTPException, OSError)
    client_error_label = "SMTP error"

    def __init__(
        self,
        config: SmtpConfig,
        mail_logger: MailLogger | None = None,
        *,
        connection_factory: ConnectionFactory | None = None,
    ) -> None:
        if not config.host:
            raise ConfigurationError("SmtpTransport host must be set.")
        if not 1 <= config.port <= 65535:
            raise ConfigurationError(f"SmtpTransport port must be between 1 and 65535, got {config.port}.")
        super().__init__(config, mail_logger)
        self.config: SmtpConfig = config
        self._connection_factory = connection_factory
        self.log(
            "SmtpTransport initialized",
            {
                "host": config.host,
                "port": config.port,
                "encryption": config.encryption.value if config.encryption else None,
                "uses_login": bool(config.username),
            },
        )

    @property
    def connection_factory(self) -> ConnectionFactory:
        if self._connection_factory is None:
            if self.config.encryption is SmtpEncryption.SSL:
                self._connection_factory = smtplib.SMTP_SSL
            else:
                self._connection_factory = smtplib.SMTP
        return self._connection_factory

    def build_email(self, message: Message) -> EmailMessage:
        """Render ``message`` as a MIME message ready for ``send_message``."""
        email = EmailMessage()
        email["Subject"] = message.subject
        email["From"] = _addresses(message.from_)
        email["To"] = _addresses(message.to)
        if message.cc:
            email["Cc"] = _addresses(message.cc)
        if message.bcc:
            email["Bcc"] = _addresses(message.bcc)
        if message.reply_to:
            email["Reply-To"] = _addresses(message.reply_to)
        email["Date"] = formatdate(localtime=True)
        email["Message-ID"] = make_msgid(domain=self.config.local_domain)

        for name, value in {**self.config.options, **message.headers}.items():
            del email[name]
            email[name] = str(value)

        charset = message.charset
        if message.text_body:
            email.set_content(message.text_body, charset=charset)
            if message.html_body:
                email.add_alternative(message.html_body, subtype="html", charset=charset)
        else:
            email.set_content(message.html_body, subtype="html", charset=charset)

        self._add_embeddings(email, message)
        for attachment in message.attachments.values():
            maintype, subtype = _mime_type(attachment)
            email.add_attachment(attachment.content, maintype=maintype, subtype=subtype, filename=attachment.file_name)
        return email

    @staticmethod
    def _add_embeddings(email: EmailMessage, message: Message) -> None:
        if not message.embeddings:
            return
        html_part = email.get_body(preferencelist=("html",)) if message.html_body else None
        for content_id, embedding in message.embeddings.items():
            maintype, subtype = _mime_type(embedding)
            if isinstance(html_part, EmailMessage):
                html_part.add_related(
                    embedding.content,
                    maintype=maintype,
                    subtype=subtype,
                    cid=f"<{content_id}>",
                    filename=embedding.file_name,
                    disposition="inline",
                )
            else:
                email.add_attachment(
                    embedding.content,
                    maintype=maintype,
                    subtype=subtype,
                    cid=f"<{content_id}>",
                    filename=embedding.file_name,
                    disposition="inline",
                )

    def _connect(self) -> smtplib.SMTP:
        kwargs: dict[str, Any] = {"timeout": self.config.timeout}
        if self.config.local_domain:
            kwargs["local_hostname"] = self.config.local_domain
        if self.config.encryption is SmtpEncryption.SSL:
            kwargs["context"] = ssl.create_default_context()

        connection = self.connection_factory(self.config.host, self.config.port, **kwargs)
        try:
            if self.config.encryption is SmtpEncryption.TLS:
                connection.starttls(context=ssl.create_default_context())
            if self.config.username and self.config.password:
                connection.login(self.config.username, self.config.password)
        except BaseException:
            connection.close()
            raise
        return connection

    @staticmethod
    def _disconnect(connection: smtplib.SMTP) -> None:
        try:
            connection.quit()
        except smtplib.SMTPServerDisconnected:
            connection.close()

    def _deliver(self, message: Message) -> bool:
        email = self.build_email(message)
        connection = self._connect()
        try:
            connection.send_message(email)
        finally:
            self._disconnect(connection)
        self.log_send_operation(message, True, {"message_id": email["Message-ID"]})
        return True


__all__ = ["SmtpTransport"]
