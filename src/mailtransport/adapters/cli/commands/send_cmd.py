"""Send email CLI command.

Builds a :class:`~mailtransport.domain.message.Message` from the options,
hands it to the configured transport and reports the recorded errors when
delivery fails.

Contents:
    * :func:`cli_send` - The ``send`` command.
    * :func:`build_message` - Option values to Message.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from pathlib import Path

import rich_click as click
from pydantic import ValidationError

from mailtransport.application.ports import Transport
from mailtransport.domain.errors import ConfigurationError
from mailtransport.domain.message import Message

from ..constants import CLICK_CONTEXT_SETTINGS
from ..context import get_cli_context
from ..exit_codes import ExitCode

logger = logging.getLogger(__name__)


def parse_header(raw: str) -> tuple[str, str]:
    """Split ``NAME=VALUE`` into a header pair.

    Raises:
        ValueError: When ``=`` is missing or the name is empty.

    Example:
        >>> parse_header("X-Campaign=spring=2024")
        ('X-Campaign', 'spring=2024')
    """
    name, sep, value = raw.partition("=")
    if not sep or not name.strip():
        raise ValueError(f"Invalid header {raw!r}: expected NAME=VALUE")
    return name.strip(), value


def build_message(
    *,
    from_address: str,
    recipients: Sequence[str],
    subject: str,
    body: str = "",
    body_html: str = "",
    cc: Sequence[str] = (),
    bcc: Sequence[str] = (),
    reply_to: str | None = None,
    attachments: Sequence[Path] = (),
    headers: Sequence[str] = (),
) -> Message:
    """Assemble a message from CLI option values.

    Raises:
        FileNotFoundError: When an attachment path is not a file.
        ValueError: When a header is not ``NAME=VALUE``.

    Example:
        >>> message = build_message(from_address="a@example.com", recipients=["b@example.com"], subject="Hi")
        >>> message.to
        {'b@example.com': ''}
    """
    message = (
        Message()
        .set_from(from_address)
        .set_to(list(recipients))
        .set_subject(subject)
        .set_text_body(body)
        .set_html_body(body_html)
    )
    if cc:
        message.set_cc(list(cc))
    if bcc:
        message.set_bcc(list(bcc))
    if reply_to:
        message.set_reply_to(reply_to)
    for raw in headers:
        message.add_header(*parse_header(raw))
    for path in attachments:
        if not path.is_file():
            raise FileNotFoundError(f"Attachment not found: {path}")
        message.attach(path, file_name=path.name)
    return message


def _fail(exc: BaseException, log_message: str, user_message: str, exit_code: ExitCode, *, trace: bool = False) -> None:
    logger.error(log_message, extra={"error": str(exc), "error_type": type(exc).__name__}, exc_info=trace)
    click.echo(f"\nError: {user_message} - {exc}", err=True)
    raise SystemExit(exit_code)


def _report_result(transport: Transport, successful: bool, recipients: Sequence[str]) -> None:
    if successful:
        click.echo("\nEmail sent successfully!")
        logger.info("Email sent via CLI", extra={"recipients": list(recipients)})
        return
    click.echo("\nEmail sending failed.", err=True)
    for record in transport.get_errors():
        click.echo(f"  [{record.code}] {record.message}", err=True)
    raise SystemExit(ExitCode.DELIVERY_FAILURE)


def execute_with_error_handling(operation: Callable[[], None]) -> None:
    """Run ``operation`` and translate its exceptions into exit codes.

    Exception priority (most specific first):

    1. ConfigurationError / ValidationError -> CONFIG_ERROR (78)
    2. FileNotFoundError -> FILE_NOT_FOUND (2)
    3. ValueError -> INVALID_ARGUMENT (22)
    4. Exception -> GENERAL_ERROR (1), re-raised when ``DEVELOPMENT_MODE`` is set
    """
    try:
        operation()
    except (ConfigurationError, ValidationError) as exc:
        _fail(exc, "Mail configuration error", "Configuration error", ExitCode.CONFIG_ERROR)
    except FileNotFoundError as exc:
        _fail(exc, "Attachment file not found", "Attachment file not found", ExitCode.FILE_NOT_FOUND)
    except ValueError as exc:
        _fail(exc, "Invalid email parameters", "Invalid email parameters", ExitCode.INVALID_ARGUMENT)
    except Exception as exc:
        if os.environ.get("DEVELOPMENT_MODE"):
            raise
        _fail(exc, "Unexpected error sending email", "Unexpected error", ExitCode.GENERAL_ERROR, trace=True)


@click.command("send", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--to", "recipients", multiple=True, required=True, help="Recipient address (repeatable)")
@click.option("--cc", multiple=True, help="Carbon-copy address (repeatable)")
@click.option("--bcc", multiple=True, help="Blind carbon-copy address (repeatable)")
@click.option("--reply-to", default=None, help="Reply-To address")
@click.option("--from", "from_address", required=True, help="Sender address")
@click.option("--subject", required=True, help="Email subject line")
@click.option("--body", default="", help="Plain-text email body")
@click.option("--body-html", default="", help="HTML email body")
@click.option(
    "--attachment",
    "attachments",
    multiple=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="File to attach (repeatable)",
)
@click.option("--header", "headers", multiple=True, metavar="NAME=VALUE", help="Extra header (repeatable)")
@click.pass_context
def cli_send(
    ctx: click.Context,
    recipients: tuple[str, ...],
    cc: tuple[str, ...],
    bcc: tuple[str, ...],
    reply_to: str | None,
    from_address: str,
    subject: str,
    body: str,
    body_html: str,
    attachments: tuple[Path, ...],
    headers: tuple[str, ...],
) -> None:
    """Send an email through the configured transport."""
    cli_ctx = get_cli_context(ctx)

    def operation() -> None:
        mailer_config = cli_ctx.services.load_mailer_config_from_dict(cli_ctx.config.as_dict())
        message = build_message(
            from_address=from_address,
            recipients=recipients,
            subject=subject,
            body=body,
            body_html=body_html,
            cc=cc,
            bcc=bcc,
            reply_to=reply_to,
            attachments=attachments,
            headers=headers,
        )
        logger.info(
            "Sending email",
            extra={
                "provider": mailer_config.transport.provider,
                "recipients": list(recipients),
                "subject": subject,
                "attachment_count": len(attachments),
            },
        )
        transport = cli_ctx.services.build_transport(mailer_config)
        try:
            successful = transport.send(message)
        finally:
            transport.close()
        _report_result(transport, successful, recipients)

    execute_with_error_handling(operation)


__all__ = ["build_message", "cli_send", "execute_with_error_handling", "parse_header"]
