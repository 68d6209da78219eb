"""Centralized logging initialization for all entry points.

Provides a single source of truth for the lib_log_rich runtime
configuration, so the console script, ``python -m mailtransport`` and tests
initialise logging the same way and exactly once.

Contents:
    * :class:`LoggingConfigModel` - ``[lib_log_rich]`` section validation.
    * :func:`init_logging` - Idempotent logging initialization.
"""

from __future__ import annotations

from typing import cast

import lib_log_rich.config
import lib_log_rich.runtime
from lib_layered_config import Config
from pydantic import BaseModel, ConfigDict

from mailtransport import __init__conf__


class LoggingConfigModel(BaseModel):
    """Pydantic model for ``[lib_log_rich]`` config section validation.

    Extra fields pass through to ``lib_log_rich.runtime.RuntimeConfig``.

    Example:
        >>> model = LoggingConfigModel(service="mailer", environment="staging")
        >>> model.service, model.environment
        ('mailer', 'staging')
        >>> LoggingConfigModel().environment
        'prod'
    """

    service: str | None = None
    environment: str = "prod"

    model_config = ConfigDict(extra="allow")


def _build_runtime_config(config: Config) -> lib_log_rich.runtime.RuntimeConfig:
    """Map the ``[lib_log_rich]`` section onto a RuntimeConfig.

    The service name falls back to the package name when unset.
    """
    log_raw: object = config.get("lib_log_rich", default={})
    parsed = LoggingConfigModel.model_validate(cast("dict[str, object]", log_raw) if log_raw else {})

    extra_config = parsed.model_dump(exclude={"service", "environment"}, exclude_none=True)
    return lib_log_rich.runtime.RuntimeConfig(
        service=parsed.service or __init__conf__.name,
        environment=parsed.environment,
        **extra_config,
    )


def init_logging(config: Config) -> None:
    """Initialize the lib_log_rich runtime from ``config``.

    Loads ``.env`` so ``LOG_*`` variables are visible, initialises the
    runtime and bridges standard :mod:`logging` into it, so the audit
    logger and CLI loggers share one pipeline. Later calls return at once.

    Args:
        config: Loaded configuration; only ``[lib_log_rich]`` is read.

    Example:
        >>> init_logging(Config({"lib_log_rich": {"environment": "test"}}, {}))  # doctest: +SKIP
    """
    if lib_log_rich.runtime.is_initialised():
        return
    lib_log_rich.config.enable_dotenv()
    lib_log_rich.runtime.init(_build_runtime_config(config))
    lib_log_rich.runtime.attach_std_logging()


__all__ = [
    "LoggingConfigModel",
    "init_logging",
]
