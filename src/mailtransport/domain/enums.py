"""Type-safe domain enums for providers, SMTP encryption and output formats."""

from __future__ import annotations

from enum import Enum


class Provider(str, Enum):
    """Delivery mechanisms a transport can be built for.

    The value doubles as the ``provider`` tag in transport configuration.

    Example:
        >>> Provider.SENDGRID.value
        'sendgrid'
        >>> Provider.SMTP == "smtp"
        True
    """

    BREVO = "brevo"
    SENDGRID = "sendgrid"
    MAILGUN = "mailgun"
    SMTP = "smtp"


class SmtpEncryption(str, Enum):
    """Encryption applied to an SMTP connection.

    Attributes:
        SSL: Implicit TLS from the first byte (``SMTP_SSL``, usually port 465).
        TLS: Plain connection upgraded with ``STARTTLS`` (usually port 587).

    Example:
        >>> SmtpEncryption("tls") is SmtpEncryption.TLS
        True
    """

    SSL = "ssl"
    TLS = "tls"


class OutputFormat(str, Enum):
    """Output format options for configuration display.

    Example:
        >>> OutputFormat.HUMAN.value
        'human'
        >>> OutputFormat.JSON == "json"
        True
    """

    HUMAN = "human"
    JSON = "json"


__all__ = [
    "OutputFormat",
    "Provider",
    "SmtpEncryption",
]
