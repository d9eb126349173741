# src/shuffleharness/telemetry/logger/base.py

"""
structlog configuration for the harness.

Harness logs go to stderr, so that stdout of the CLI carries only command
output (addresses, rendered configs, client output). An optional log file
always receives JSON.
"""

import logging
import sys

import structlog
from structlog.typing import FilteringBoundLogger

from shuffleharness.telemetry.logger.processors import (
    add_emoji_processor,
    remove_extra_keys_processor,
)

BASE_LOGGER_NAME = "shuffleharness"

SHARED_PROCESSORS: tuple[structlog.types.Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    add_emoji_processor,
    remove_extra_keys_processor,
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
)


def _json_formatter() -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(processor=structlog.processors.JSONRenderer(sort_keys=True))


def _console_handler(json_logs: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    if json_logs:
        handler.setFormatter(_json_formatter())
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer))
    return handler


def setup_logging(
    level: int = logging.INFO,
    json_logs: bool = False,
    log_file: str | None = None,
) -> None:
    """
    Routes structlog through the stdlib root logger, replacing any handlers
    a previous call installed. Safe to call again, e.g. once the harness
    profile has supplied its log level.
    """
    structlog.configure(
        processors=list(SHARED_PROCESSORS),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)
    root_logger.addHandler(_console_handler(json_logs))

    slog = structlog.get_logger(BASE_LOGGER_NAME)
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            slog.error("Cannot open log file, logging to stderr only", log_file=log_file, error=str(e))
        else:
            file_handler.setFormatter(_json_formatter())
            file_handler.setLevel(level)
            root_logger.addHandler(file_handler)

    slog.debug(
        "Logging configured",
        log_level=logging.getLevelName(level),
        json_logs=json_logs,
        log_file=log_file,
    )


StructLogger = FilteringBoundLogger

# 🔼⚙️
