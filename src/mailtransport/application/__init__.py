"""Application layer - port definitions implemented by the adapters.

Contents:
    * :mod:`.ports` - Transport protocol and callable adapter protocols
"""

from __future__ import annotations

from .ports import (
    BuildTransport,
    DisplayConfig,
    InitLogging,
    LoadConfig,
    LoadMailerConfigFromDict,
    Transport,
)

__all__ = [
    "BuildTransport",
    "DisplayConfig",
    "InitLogging",
    "LoadConfig",
    "LoadMailerConfigFromDict",
    "Transport",
]
