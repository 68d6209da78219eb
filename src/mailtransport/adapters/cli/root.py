"""Root CLI command group and global option handling.

Defines the top-level Click command group that serves as the entry point for
all subcommands. Handles the global ``--traceback``, ``--profile``,
``--config`` and ``--set`` flags.

Contents:
    * :func:`cli` - Root command group with global options.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import rich_click as click
from lib_layered_config import Config

from mailtransport import __init__conf__
from mailtransport.adapters.config.overrides import apply_overrides
from mailtransport.domain.errors import ConfigurationError

from .constants import CLICK_CONTEXT_SETTINGS
from .context import apply_traceback_preferences, store_cli_context
from .exit_codes import ExitCode

if TYPE_CHECKING:
    from mailtransport.composition import AppServices


def _apply_cli_overrides(config: Config, set_overrides: tuple[str, ...]) -> Config:
    """Apply ``--set`` overrides, raising UsageError on malformed input."""
    try:
        return apply_overrides(config, set_overrides)
    except (ValueError, TypeError) as exc:
        raise click.UsageError(str(exc)) from exc


def _load_config(services: AppServices, config_file: Path | None, profile: str | None) -> Config:
    """Load the layered configuration, exiting with CONFIG_ERROR when the file is unusable."""
    try:
        return services.load_config(config_file, profile=profile)
    except ConfigurationError as exc:
        click.echo(f"\nError: {exc}", err=True)
        raise SystemExit(ExitCode.CONFIG_ERROR) from exc


@click.group(
    help=__init__conf__.title,
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=True,
)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.option(
    "--profile",
    type=str,
    default=None,
    help="Load configuration from a named profile (e.g., 'production', 'test')",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="TOML file merged over every other configuration layer",
)
@click.option(
    "--set",
    "set_overrides",
    multiple=True,
    default=(),
    metavar="SECTION.KEY=VALUE",
    help="Override a configuration setting (repeatable).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    traceback: bool,
    profile: str | None,
    config_file: Path | None,
    set_overrides: tuple[str, ...],
) -> None:
    """Root command storing global flags and syncing shared traceback state.

    Loads configuration once, applies any ``--set`` overrides, initialises
    logging and stores everything in the Click context for subcommands.
    Mirrors the traceback flag into ``lib_cli_exit_tools.config``.
    """
    # ctx.obj is always the services factory (production or test)
    if not callable(ctx.obj):
        raise RuntimeError("Services factory not provided. This is a bug.")
    apply_traceback_preferences(traceback)
    services: AppServices = ctx.obj()  # type: ignore[assignment]  # Click's obj is typed as Any
    config = _load_config(services, config_file, profile)
    config = _apply_cli_overrides(config, set_overrides)
    services.init_logging(config)
    store_cli_context(
        ctx,
        traceback=traceback,
        config=config,
        services=services,
        profile=profile,
        config_file=config_file,
        set_overrides=set_overrides,
    )

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Deferred import: command modules import from package ancestors, so they
# register themselves after ``cli`` exists.
def _register_commands() -> None:
    from .commands import cli_config, cli_info, cli_send

    for cmd in (cli_config, cli_info, cli_send):
        cli.add_command(cmd)


_register_commands()


__all__ = ["cli"]
