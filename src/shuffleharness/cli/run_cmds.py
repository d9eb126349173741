# src/shuffleharness/cli/run_cmds.py

import asyncio
import logging
import sys
from pathlib import Path

import click
import structlog
from attrs import evolve

from shuffleharness.cli.utils import config_path_option, logging_options, setup_logging_from_context
from shuffleharness.client import ClientOptions, ShuffleClient
from shuffleharness.config import HarnessConfig, load_config
from shuffleharness.exceptions import ConfigurationError, HarnessError
from shuffleharness.runtime import RunContext
from shuffleharness.server import MPDServer
from shuffleharness.state import ShutdownType
from shuffleharness.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.run")


async def _run_once(config: HarnessConfig, extra_args: tuple[str, ...]) -> bool:
    """
    Starts MPD and the client, waits for the client to exit by itself, and
    reports what it left in the queue. Returns True on a clean run.
    """
    ctx = RunContext("run")
    server = await MPDServer.start(ctx, config.server)
    try:
        options = evolve(
            ClientOptions.from_config(config.client, server=server),
            args=config.client.args + extra_args,
        )
        client = await ShuffleClient.start(ctx, config.client.bin_path, options)
        outcome = await client.shutdown_outcome(ShutdownType.SOFT)

        click.echo("--- client stdout ---")
        click.echo(client.stdout.decode("utf-8", errors="replace"), nl=False)
        click.echo("--- client stderr ---")
        click.echo(client.stderr.decode("utf-8", errors="replace"), nl=False)
        click.echo("--- result ---")
        click.echo(f"client: {outcome.kind.name.lower()}")
        if outcome.error is not None:
            click.echo(f"error: {outcome.error}")

        queue = await server.queue()
        click.echo(f"state: {(await server.play_state()).value}")
        click.echo(f"queue ({len(queue)}):")
        for uri in queue:
            click.echo(f"  {uri}")

        if options.enable_heap_profile and outcome.ok:
            profile = client.heap_profile()
            click.echo(f"peak heap: {profile.peak_usage() / (1 << 20):.2f} MiB")

        if not server.is_ok():
            log.error("MPD communication errors", errors=[str(e) for e in server.errors])
        return outcome.ok and server.is_ok()
    finally:
        await server.shutdown()


def _run(config: HarnessConfig, extra_args: tuple[str, ...]) -> int:
    try:
        return 0 if asyncio.run(_run_once(config, extra_args)) else 1
    except KeyboardInterrupt:
        log.warning("Run interrupted by KeyboardInterrupt (CTRL-C).")
        return 130
    except HarnessError as e:
        log.error("Harness run failed", error=str(e), emoji_key="fail")
        click.echo(f"Error: {e}", err=True)
        return 1
    finally:
        logging.shutdown()


@click.command(name="run", context_settings={"ignore_unknown_options": True})
@config_path_option
@logging_options
@click.argument("client_args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run_cli(ctx: click.Context, config_path: Path, client_args: tuple[str, ...], **kwargs):
    """Run the client under test once against a fresh MPD.

    CLIENT_ARGS are appended to the client arguments from the profile.
    """
    setup_logging_from_context(ctx, kwargs)
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        click.echo(f"Error: Configuration problem in '{config_path}':\n{e}", err=True)
        ctx.exit(1)

    # The profile level applies unless one was given on the command line.
    setup_logging_from_context(ctx, kwargs, default_log_level=config.global_config.log_level)

    if config.client is None:
        click.echo(f"Error: '{config_path}' has no [client] section.", err=True)
        ctx.exit(1)

    exit_code = _run(config, client_args)
    if exit_code != 0:
        sys.exit(exit_code)

# 🔼⚙️
