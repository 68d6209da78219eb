"""Application ports - Protocol definitions for transports and adapter functions.

:class:`Transport` describes the object every delivery adapter provides.
The callable protocols define a ``__call__`` whose signature matches the
corresponding adapter function, so module-level functions satisfy them via
structural subtyping (PEP 544).

System Role:
    Sits between domain and adapters. Infrastructure types (``Config``,
    ``MailerConfig``) are imported under ``TYPE_CHECKING`` only so this
    module has no runtime adapter dependency.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from ..domain.enums import OutputFormat
from ..domain.history import ErrorRecord
from ..domain.message import Message

if TYPE_CHECKING:
    import httpx
    from lib_layered_config import Config

    from ..adapters.config.models import MailerConfig


class Transport(Protocol):
    """A delivery backend: sends messages and remembers what went wrong."""

    def send(self, message: Message) -> bool: ...

    def send_multiple(self, messages: Iterable[Message]) -> int: ...

    def get_error(self) -> ErrorRecord | None: ...

    def get_errors(self) -> list[ErrorRecord]: ...

    def has_errors(self) -> bool: ...

    def clear_errors(self) -> None: ...

    def close(self) -> None: ...


class BuildTransport(Protocol):
    """Create the transport selected by a mailer configuration."""

    def __call__(self, mailer_config: MailerConfig, *, http_client: httpx.Client | None = ...) -> Transport: ...


class LoadConfig(Protocol):
    """Load layered configuration with application defaults."""

    def __call__(
        self,
        config_file: Path | None = ...,
        *,
        profile: str | None = ...,
        start_dir: str | None = ...,
    ) -> Config: ...


class LoadMailerConfigFromDict(Protocol):
    """Load MailerConfig from a configuration dictionary."""

    def __call__(self, config_dict: Mapping[str, Any]) -> MailerConfig: ...


class DisplayConfig(Protocol):
    """Display the provided configuration in the requested format."""

    def __call__(
        self, config: Config, *, output_format: OutputFormat = ..., section: str | None = ..., profile: str | None = ...
    ) -> None: ...


class InitLogging(Protocol):
    """Initialize lib_log_rich runtime with the provided configuration."""

    def __call__(self, config: Config) -> None: ...


__all__ = [
    "BuildTransport",
    "DisplayConfig",
    "InitLogging",
    "LoadConfig",
    "LoadMailerConfigFromDict",
    "Transport",
]
