# src/shuffleharness/cli/server_cmds.py

import asyncio
import logging
import signal
import sys
from pathlib import Path

import click
import structlog

from shuffleharness.cli.utils import config_path_option, logging_options, setup_logging_from_context
from shuffleharness.config import HarnessConfig, load_config
from shuffleharness.exceptions import ConfigurationError, HarnessError
from shuffleharness.runtime import RunContext
from shuffleharness.server import MPDServer
from shuffleharness.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.server")


async def _serve(config: HarnessConfig) -> None:
    """Starts MPD, prints its address and keeps it up until interrupted."""
    ctx = RunContext("serve")
    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGTERM, ctx.cancel)

    server = await MPDServer.start(ctx, config.server)
    click.echo(str(server.address()))
    cancelled = asyncio.create_task(ctx.wait())
    try:
        await asyncio.wait([cancelled, server.process.completion], return_when=asyncio.FIRST_COMPLETED)
        if server.process.exited and not ctx.cancelled:
            log.error("MPD exited on its own", returncode=server.process.returncode, emoji_key="fail")
    finally:
        cancelled.cancel()
        loop.remove_signal_handler(signal.SIGTERM)
        await server.shutdown()


def _run_server(config: HarnessConfig) -> int:
    try:
        asyncio.run(_serve(config))
        return 0
    except KeyboardInterrupt:
        log.warning("Shutdown initiated by KeyboardInterrupt (CTRL-C).")
        return 130  # Standard exit code for SIGINT
    except HarnessError as e:
        log.error("MPD server failed", error=str(e), emoji_key="fail")
        click.echo(f"Error: {e}", err=True)
        return 1
    finally:
        logging.shutdown()


@click.command(name="server")
@config_path_option
@logging_options
@click.pass_context
def server_cli(ctx: click.Context, config_path: Path, **kwargs):
    """Start a throwaway MPD from the profile and keep it running until interrupted."""
    setup_logging_from_context(ctx, kwargs)
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        click.echo(f"Error: Configuration problem in '{config_path}':\n{e}", err=True)
        ctx.exit(1)

    # The profile level applies unless one was given on the command line.
    setup_logging_from_context(ctx, kwargs, default_log_level=config.global_config.log_level)

    exit_code = _run_server(config)
    if exit_code != 0:
        sys.exit(exit_code)

# 🔼⚙️
