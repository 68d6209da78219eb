"""Configuration loader with caching and profile/``--config`` support.

Layers, lowest precedence first: bundled ``defaultconfig.toml``, the
app/host/user configuration files, ``.env``, ``MAILTRANSPORT___SECTION__KEY``
environment variables (all resolved by lib_layered_config), then the file
passed with ``--config``. CLI ``--set`` overrides are applied afterwards by
:mod:`.overrides`.
"""

from __future__ import annotations

import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from lib_layered_config import (
    DEFAULT_MAX_PROFILE_LENGTH,
    Config,
    read_config,
    validate_profile_name,
)

from mailtransport import __init__conf__
from mailtransport.domain.errors import ConfigurationError


def validate_profile(profile: str, max_length: int | None = None) -> None:
    """Validate a profile name using lib_layered_config.

    Raises:
        ValueError: If the name is empty, too long, contains invalid
            characters or attempts path traversal.

    Examples:
        >>> validate_profile("production")

        >>> validate_profile("../etc/passwd")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ...
        ValueError: profile contains invalid characters: ../etc/passwd
    """
    length = max_length if max_length is not None else DEFAULT_MAX_PROFILE_LENGTH
    validate_profile_name(profile, max_length=length)


@lru_cache(maxsize=1)
def get_default_config_path() -> Path:
    """Return the path to the bundled default configuration file.

    Example:
        >>> path = get_default_config_path()
        >>> path.name
        'defaultconfig.toml'
        >>> path.exists()
        True
    """
    return Path(__file__).parent / "defaultconfig.toml"


# Loaded once per (profile, start_dir) for the lifetime of the CLI process.
@lru_cache(maxsize=4)
def _read_layers(*, profile: str | None = None, start_dir: str | None = None) -> Config:
    return read_config(
        vendor=__init__conf__.LAYEREDCONF_VENDOR,
        app=__init__conf__.LAYEREDCONF_APP,
        slug=__init__conf__.LAYEREDCONF_SLUG,
        profile=profile,
        default_file=get_default_config_path(),
        start_dir=start_dir,
    )


def clear_config_cache() -> None:
    """Forget cached layers so the next :func:`load_config` re-reads them.

    Example:
        >>> clear_config_cache()
    """
    _read_layers.cache_clear()


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse the TOML file given with ``--config``.

    Raises:
        ConfigurationError: When the file is missing or not valid TOML.
    """
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Configuration file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc


def load_config(
    config_file: Path | None = None,
    *,
    profile: str | None = None,
    start_dir: str | None = None,
) -> Config:
    """Load layered configuration with application defaults.

    Args:
        config_file: Optional TOML file deep-merged over every other layer.
        profile: Optional profile name; inserts ``profile/<name>/`` into
            the configuration search paths.
        start_dir: Directory that seeds ``.env`` discovery; the current
            working directory when None.

    Returns:
        Immutable configuration object with provenance tracking.

    Raises:
        ConfigurationError: When ``config_file`` is missing or invalid.
        ValueError: When ``profile`` is not a valid profile name.

    Example:
        >>> config = load_config()
        >>> config.get("mail", default={})["logger"]["max_raw_content_length"]
        4096
    """
    if profile is not None:
        validate_profile(profile)
    config = _read_layers(profile=profile, start_dir=start_dir)
    if config_file is None:
        return config
    return config.with_overrides(read_config_file(config_file))


__all__ = [
    "clear_config_cache",
    "get_default_config_path",
    "load_config",
    "read_config_file",
    "validate_profile",
]
