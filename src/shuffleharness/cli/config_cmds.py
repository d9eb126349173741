# src/shuffleharness/cli/config_cmds.py

from pathlib import Path

import click
import structlog
from rich.pretty import pretty_repr

from shuffleharness.cli.utils import config_path_option, logging_options, setup_logging_from_context
from shuffleharness.config import build_mpd_config, load_config
from shuffleharness.exceptions import ConfigurationError
from shuffleharness.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.config")


@click.group(name="config")
def config_cli():
    """Commands for inspecting harness profiles."""
    pass


@config_cli.command(name="show")
@config_path_option
@logging_options
@click.pass_context
def show_config(ctx: click.Context, config_path: Path, **kwargs):
    """Load, validate, and display the harness profile."""
    setup_logging_from_context(ctx, kwargs)
    log.info("Executing 'config show' command", config_path=str(config_path))

    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        log.error("Failed to load or validate configuration", error=str(e))
        click.echo(f"Error: Configuration problem in '{config_path}':\n{e}", err=True)
        ctx.exit(1)

    click.echo(pretty_repr(config, expand_all=True))

    if not config.server.library_root.is_dir():
        log.warning("Library root does not exist", library_root=str(config.server.library_root))


@config_cli.command(name="render")
@config_path_option
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("/tmp/mpd-harness"),
    show_default=True,
    help="Workspace directory the rendered paths should point into.",
)
@logging_options
@click.pass_context
def render_config(ctx: click.Context, config_path: Path, root: Path, **kwargs):
    """Print the mpd.conf the harness would generate for this profile."""
    setup_logging_from_context(ctx, kwargs)
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        click.echo(f"Error: Configuration problem in '{config_path}':\n{e}", err=True)
        ctx.exit(1)

    text, address = build_mpd_config(config.server, root)
    click.echo(text, nl=False)
    log.debug("Rendered MPD configuration", address=str(address))

# 🔼⚙️
