# src/shuffleharness/cli/utils.py

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import click

from shuffleharness.telemetry.logger import setup_logging as core_setup_logging
from shuffleharness.telemetry.logger.processors import level_number


LOG_LEVEL_CHOICES = click.Choice(list(logging.getLevelNamesMapping().keys()), case_sensitive=False)


def logging_options(f):
    """Decorator to add logging options to any command."""
    f = click.option(
        "-l",
        "--log-level",
        type=LOG_LEVEL_CHOICES,
        default=None,
        envvar="SHUFFLEHARNESS_LOG_LEVEL",
        help="Set the logging level (overrides the profile).",
    )(f)
    f = click.option(
        "--log-file",
        type=click.Path(dir_okay=False, writable=True, resolve_path=True),
        default=None,
        envvar="SHUFFLEHARNESS_LOG_FILE",
        help="Path to write logs to a file (JSON format).",
    )(f)
    f = click.option(
        "--json-logs",
        is_flag=True,
        default=None,
        envvar="SHUFFLEHARNESS_JSON_LOGS",
        help="Output console logs as JSON.",
    )(f)
    return f


def config_path_option(f):
    """Decorator adding the harness profile option."""
    return click.option(
        "-c",
        "--config-path",
        type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path),
        default=Path("harness.toml"),
        show_default=True,
        envvar="SHUFFLEHARNESS_CONF",
        help="Path to the harness profile (env var SHUFFLEHARNESS_CONF).",
        show_envvar=True,
    )(f)


def setup_logging_from_context(
    ctx: click.Context,
    options: Mapping[str, Any] | None = None,
    default_log_level: str = "INFO",
) -> None:
    """
    Configures logging for a command.

    `options` are the command's own `logging_options` values; where unset,
    the group's values in `ctx.obj` apply, then `default_log_level`.
    """
    ctx.ensure_object(dict)
    options = options or {}
    level_name = options.get("log_level") or ctx.obj.get("LOG_LEVEL") or default_log_level
    log_file = options.get("log_file") or ctx.obj.get("LOG_FILE")
    json_logs = options.get("json_logs")
    if json_logs is None:
        json_logs = ctx.obj.get("JSON_LOGS", False)

    core_setup_logging(level=level_number(level_name), json_logs=json_logs, log_file=log_file)

# ⚙️🛠️
