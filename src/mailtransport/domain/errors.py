"""Domain-specific exceptions for typed error handling at boundaries."""

from __future__ import annotations

from typing import Any


class ConfigurationError(Exception):
    """Missing, invalid, or incomplete transport configuration.

    Raised while constructing a transport (missing API key, missing Mailgun
    domain, missing SMTP host, invalid port) and never caught by ``send``.

    Example:
        >>> from mailtransport.domain.errors import ConfigurationError
        >>> err = ConfigurationError("BrevoTransport api_key must be set.")
        >>> str(err)
        'BrevoTransport api_key must be set.'
    """


class TransportError(Exception):
    """Failure raised inside a transport before or while building a request.

    ``send`` converts it into an :class:`~mailtransport.domain.history.ErrorRecord`
    carrying the same code, message and details.

    Attributes:
        code: Numeric error code recorded with the failure.
        details: Optional raw payload or string describing the failure.

    Example:
        >>> err = TransportError("Message must have a subject")
        >>> (str(err), err.code, err.details)
        ('Message must have a subject', 0, None)
    """

    def __init__(self, message: str = "", code: int = 0, details: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.details = details


class AttachmentError(ValueError):
    """Attachment or embedding was added without the required file name.

    Example:
        >>> err = AttachmentError('The "file_name" option is required and must be a string.')
        >>> isinstance(err, ValueError)
        True
    """


__all__ = [
    "AttachmentError",
    "ConfigurationError",
    "TransportError",
]
