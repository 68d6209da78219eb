"""In-memory adapter implementations for testing.

Provides lightweight implementations of all application ports that operate
entirely in memory -- no filesystem, no network, no lib_log_rich runtime.

Contents:
    * :mod:`.config` - In-memory configuration adapters
    * :mod:`.transport` - In-memory transport (TransportSpy class)
    * :mod:`.logging` - In-memory logging adapter
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .config import display_config_in_memory, load_config_in_memory, load_mailer_config_from_dict_in_memory
from .logging import init_logging_in_memory
from .transport import TransportSpy

# Static conformance assertions
if TYPE_CHECKING:
    from mailtransport.application.ports import (
        BuildTransport,
        DisplayConfig,
        InitLogging,
        LoadConfig,
        LoadMailerConfigFromDict,
        Transport,
    )

    _assert_load_config: LoadConfig = load_config_in_memory
    _assert_load_mailer_config: LoadMailerConfigFromDict = load_mailer_config_from_dict_in_memory
    _assert_init_logging: InitLogging = init_logging_in_memory
    _assert_display_config: DisplayConfig = display_config_in_memory
    _assert_transport: Transport = TransportSpy()
    _assert_build_transport: BuildTransport = TransportSpy().build

__all__ = [
    "TransportSpy",
    "display_config_in_memory",
    "init_logging_in_memory",
    "load_config_in_memory",
    "load_mailer_config_from_dict_in_memory",
]
