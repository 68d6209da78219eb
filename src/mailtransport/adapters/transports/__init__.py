"""Transport adapters - one class per delivery provider.

Contents:
    * :mod:`.base` - Shared send funnel and HTTP pipeline
    * :mod:`.brevo` - Brevo JSON API
    * :mod:`.sendgrid` - SendGrid v3 JSON API
    * :mod:`.mailgun` - Mailgun form API
    * :mod:`.smtp` - SMTP via smtplib
"""

from __future__ import annotations

from .base import BaseTransport, HttpApiTransport
from .brevo import BrevoTransport
from .mailgun import MailgunTransport
from .sendgrid import SendGridTransport
from .smtp import SmtpTransport

__all__ = [
    "BaseTransport",
    "BrevoTransport",
    "HttpApiTransport",
    "MailgunTransport",
    "SendGridTransport",
    "SmtpTransport",
]
