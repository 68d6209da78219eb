"""In-memory transport for testing.

Contents:
    * :class:`TransportSpy` - Captures sent messages for test assertions.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ...domain.history import ErrorHistory, ErrorRecord
from ...domain.message import Message

if TYPE_CHECKING:
    import httpx

    from ..config.models import MailerConfig


def _empty_message_list() -> list[Message]:
    return []


@dataclass
class TransportSpy:
    """Captures send operations for test assertions.

    Each test should create its own TransportSpy instance to avoid
    cross-test pollution. The spy satisfies the Transport protocol and its
    :meth:`build` method satisfies BuildTransport.

    Attributes:
        sent_messages: Messages passed to :meth:`send`, in order.
        should_fail: When True, sends are rejected and an error is recorded.
        raise_exception: When set, :meth:`send` raises this exception.
        mailer_config: Configuration the spy was last built with.

    Example:
        >>> spy = TransportSpy()
        >>> spy.send(Message().set_to("a@example.com"))
        True
        >>> len(spy.sent_messages)
        1
    """

    sent_messages: list[Message] = field(default_factory=_empty_message_list)
    should_fail: bool = False
    raise_exception: Exception | None = None
    mailer_config: Any = None
    closed: bool = False
    errors: ErrorHistory = field(default_factory=ErrorHistory)

    def build(self, mailer_config: MailerConfig, *, http_client: httpx.Client | None = None) -> TransportSpy:
        """Return this spy in place of a real transport."""
        self.mailer_config = mailer_config
        return self

    def clear(self) -> None:
        """Reset captured data for next test."""
        self.sent_messages.clear()
        self.errors.clear()
        self.raise_exception = None

    def send(self, message: Message) -> bool:
        self.sent_messages.append(message)
        if self.raise_exception is not None:
            raise self.raise_exception
        if self.should_fail:
            self.errors.append(ErrorRecord(500, "Simulated delivery failure"))
            return False
        return True

    def send_multiple(self, messages: Iterable[Message]) -> int:
        return sum(1 for message in messages if self.send(message))

    def get_error(self) -> ErrorRecord | None:
        return self.errors.last

    def get_errors(self) -> list[ErrorRecord]:
        return self.errors.to_list()

    def has_errors(self) -> bool:
        return bool(self.errors)

    def clear_errors(self) -> None:
        self.errors.clear()

    def close(self) -> None:
        self.closed = True


__all__ = ["TransportSpy"]
