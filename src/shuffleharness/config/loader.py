# src/shuffleharness/config/loader.py

"""
Loads a TOML harness profile into the attrs configuration models.
"""

import tomllib
from pathlib import Path
from typing import Any

import structlog

from shuffleharness.config.models import ClientConfig, GlobalConfig, HarnessConfig, MPDOptions
from shuffleharness.exceptions import ConfigurationError
from shuffleharness.telemetry import StructLogger

log: StructLogger = structlog.get_logger("config.loader")


def _section(data: dict[str, Any], name: str, required: bool = False) -> dict[str, Any] | None:
    section = data.get(name)
    if section is None:
        if required:
            raise ConfigurationError(f"Missing required [{name}] section")
        return None
    if not isinstance(section, dict):
        raise ConfigurationError(f"[{name}] must be a table, got {type(section).__name__}")
    return section


def _build(model: type, section_name: str, values: dict[str, Any], base_dir: Path) -> Any:
    try:
        if model is MPDOptions and "library_root" in values:
            values = {**values, "library_root": base_dir / Path(values["library_root"]).expanduser()}
        return model(**values)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid [{section_name}] section: {e}", e) from e


def parse_config(data: dict[str, Any], base_dir: Path | None = None) -> HarnessConfig:
    """Builds a HarnessConfig from already-decoded TOML data."""
    base_dir = base_dir or Path.cwd()
    global_section = _section(data, "global") or {}
    server_section = _section(data, "server", required=True)
    client_section = _section(data, "client")

    unknown = set(data) - {"global", "server", "client"}
    if unknown:
        log.warning("Ignoring unknown configuration sections", sections=sorted(unknown))

    return HarnessConfig(
        server=_build(MPDOptions, "server", server_section, base_dir),
        client=_build(ClientConfig, "client", client_section, base_dir) if client_section else None,
        global_config=_build(GlobalConfig, "global", global_section, base_dir),
    )


def load_config(config_path: Path) -> HarnessConfig:
    """
    Loads and validates the harness profile at `config_path`.

    Relative `library_root` paths are resolved against the profile's directory.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid TOML, or
            does not describe a valid harness.
    """
    config_path = Path(config_path)
    log.debug("Loading harness profile", path=str(config_path), emoji_key="path")
    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file '{config_path}'", e) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in '{config_path}'", e) from e

    config = parse_config(data, base_dir=config_path.parent.resolve())
    log.info(
        "Harness profile loaded",
        path=str(config_path),
        library_root=str(config.server.library_root),
        has_client=config.client is not None,
    )
    return config


# 🔼⚙️
