"""Transport, audit logger and mailer configuration models.

Provides frozen Pydantic models for every transport variant, joined in a
discriminated union on the ``provider`` tag, plus the loader that turns a
configuration dictionary into a :class:`MailerConfig`.

Presence checks that make a transport unusable (missing API key, missing
host, port out of range) are left to the transport constructors, which
raise :class:`~mailtransport.domain.errors.ConfigurationError`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mailtransport.domain.enums import SmtpEncryption
from mailtransport.domain.history import DEFAULT_MAX_ERRORS

DEFAULT_SENSITIVE_HEADERS: tuple[str, ...] = (
    "Authorization",
    "API-Key",
    "X-API-Key",
    "Password",
    "Secret",
    "Bearer",
    "Token",
    "Credentials",
)

DEFAULT_SENSITIVE_FIELDS: tuple[str, ...] = (
    "password",
    "key",
    "secret",
    "token",
    "auth",
    "credential",
    "apiKey",
    "api_key",
    "access_token",
    "accessToken",
)

SECRET_FIELDS = frozenset({"api_key", "password"})


def _coerce_log_level(value: Any) -> int:
    """Accept numeric levels or level names such as ``"warning"``.

    Examples:
        >>> _coerce_log_level("warning")
        30
        >>> _coerce_log_level(20)
        20
    """
    if isinstance(value, str):
        level = logging.getLevelName(value.strip().upper())
        if not isinstance(level, int):
            raise ValueError(f"unknown log level: {value!r}")
        return level
    return int(value)


class _TransportConfigBase(BaseModel):
    """Fields shared by every transport configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enable_tracking: bool = False
    enable_logging: bool = True
    options: dict[str, Any] = Field(default_factory=dict)
    max_errors: int | None = DEFAULT_MAX_ERRORS

    @field_validator("max_errors")
    @classmethod
    def _validate_max_errors(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError(f"max_errors must be >= 0, got {v}")
        return v

    def __repr__(self) -> str:
        """Return string representation with credentials redacted.

        Example:
            >>> "s3cr3t" in repr(BrevoConfig(api_key="s3cr3t"))
            False
        """
        fields: list[str] = []
        for name, value in self:
            if name in SECRET_FIELDS and value:
                fields.append(f"{name}='[REDACTED]'")
            else:
                fields.append(f"{name}={value!r}")
        return f"{type(self).__name__}({', '.join(fields)})"


class BrevoConfig(_TransportConfigBase):
    """Brevo transactional email API settings.

    Example:
        >>> config = BrevoConfig(api_key="xkeysib-123")
        >>> config.endpoint
        'https://api.brevo.com/v3/smtp/email'
    """

    provider: Literal["brevo"] = "brevo"
    api_key: str = ""
    endpoint: str = "https://api.brevo.com/v3/smtp/email"


class SendGridConfig(_TransportConfigBase):
    """SendGrid v3 mail send API settings.

    Example:
        >>> SendGridConfig(api_key="SG.x", use_eu_api=True).resolved_endpoint
        'https://api.eu.sendgrid.com/v3/mail/send'
    """

    provider: Literal["sendgrid"] = "sendgrid"
    api_key: str = ""
    use_eu_api: bool = False
    endpoint: str = "https://api.sendgrid.com/v3/mail/send"
    eu_endpoint: str = "https://api.eu.sendgrid.com/v3/mail/send"

    @property
    def resolved_endpoint(self) -> str:
        return self.eu_endpoint if self.use_eu_api else self.endpoint


class MailgunConfig(_TransportConfigBase):
    """Mailgun messages API settings.

    Example:
        >>> MailgunConfig(api_key="key", domain="mg.example.com").messages_url
        'https://api.mailgun.net/v3/mg.example.com/messages'
    """

    provider: Literal["mailgun"] = "mailgun"
    api_key: str = ""
    domain: str = ""
    use_eu_region: bool = False
    endpoint: str = "https://api.mailgun.net/v3"
    eu_endpoint: str = "https://api.eu.mailgun.net/v3"

    @property
    def resolved_endpoint(self) -> str:
        return self.eu_endpoint if self.use_eu_region else self.endpoint

    @property
    def messages_url(self) -> str:
        return f"{self.resolved_endpoint}/{self.domain}/messages"


class SmtpConfig(_TransportConfigBase):
    """SMTP server settings.

    ``options`` holds extra headers applied to every outgoing message.

    Example:
        >>> config = SmtpConfig(host="smtp.example.com", port=587, encryption="tls")
        >>> config.encryption
        <SmtpEncryption.TLS: 'tls'>
    """

    provider: Literal["smtp"] = "smtp"
    host: str = "localhost"
    port: int = 25
    encryption: SmtpEncryption | None = None
    username: str | None = None
    password: str | None = None
    timeout: float = 30.0
    local_domain: str | None = None

    @field_validator("username", "password", "local_domain", "encryption", mode="before")
    @classmethod
    def _coerce_empty_string_to_none(cls, v: Any) -> Any:
        """Treat empty strings from config files as "not configured"."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def _validate_timeout(self) -> SmtpConfig:
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        return self


TransportConfig = Annotated[
    Union[BrevoConfig, SendGridConfig, MailgunConfig, SmtpConfig],
    Field(discriminator="provider"),
]
"""Tagged union of all transport configurations."""


class MailLoggerConfig(BaseModel):
    """Audit logger settings.

    Example:
        >>> MailLoggerConfig(error_log_level="error").error_log_level
        40
        >>> MailLoggerConfig().max_raw_content_length
        4096
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = True
    log_level: int = logging.INFO
    error_log_level: int = logging.WARNING
    category: str = "mail"
    include_message_details: bool = False
    log_raw_http: bool = False
    max_raw_content_length: int = 4096
    sensitive_headers: tuple[str, ...] = DEFAULT_SENSITIVE_HEADERS
    sensitive_fields: tuple[str, ...] = DEFAULT_SENSITIVE_FIELDS

    @field_validator("log_level", "error_log_level", mode="before")
    @classmethod
    def _coerce_level(cls, v: Any) -> int:
        return _coerce_log_level(v)

    @field_validator("max_raw_content_length")
    @classmethod
    def _validate_max_length(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"max_raw_content_length must be >= 0, got {v}")
        return v


class MailerConfig(BaseModel):
    """Sender-level settings: transport choice and audit logging.

    ``logging_enabled`` cascades: when False, the transport gets no audit
    logger regardless of its own ``enable_logging``.

    Example:
        >>> config = MailerConfig.model_validate({"transport": {"provider": "smtp", "host": "mx"}})
        >>> type(config.transport).__name__
        'SmtpConfig'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    logging_enabled: bool = True
    logger: MailLoggerConfig = Field(default_factory=MailLoggerConfig)
    transport: TransportConfig = Field(default_factory=SmtpConfig)


def load_mailer_config_from_dict(config_dict: Mapping[str, Any]) -> MailerConfig:
    """Load MailerConfig from a configuration dictionary.

    Reads the ``[mail]`` section with its nested ``[mail.logger]`` and
    ``[mail.transport]`` tables.

    Args:
        config_dict: Full configuration dictionary (for example from
            :func:`mailtransport.adapters.config.loader.load_config`).

    Returns:
        Validated mailer configuration with defaults for missing values.

    Raises:
        pydantic.ValidationError: When values have the wrong type or the
            provider tag is unknown.

    Example:
        >>> config = load_mailer_config_from_dict(
        ...     {"mail": {"transport": {"provider": "brevo", "api_key": "k"}}}
        ... )
        >>> config.transport.provider
        'brevo'
        >>> load_mailer_config_from_dict({}).transport.provider
        'smtp'
    """
    mail_section: Any = config_dict.get("mail", {})
    if not isinstance(mail_section, Mapping):
        return MailerConfig.model_validate(mail_section)
    return MailerConfig.model_validate(dict(cast(Mapping[str, Any], mail_section)))


__all__ = [
    "DEFAULT_SENSITIVE_FIELDS",
    "DEFAULT_SENSITIVE_HEADERS",
    "SECRET_FIELDS",
    "BrevoConfig",
    "MailLoggerConfig",
    "MailerConfig",
    "MailgunConfig",
    "SendGridConfig",
    "SmtpConfig",
    "TransportConfig",
    "load_mailer_config_from_dict",
]
