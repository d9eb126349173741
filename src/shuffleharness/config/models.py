#
# config/models.py
#
"""
Attrs-based data models for harness configuration.
"""

import logging
from pathlib import Path
from typing import Any

from attrs import define, field

MPD_PERMISSIONS = frozenset({"read", "add", "control", "admin", "player"})

DEFAULT_CONNECT_BACKOFF = 0.5
DEFAULT_CONNECT_TIMEOUT = 30.0
DEFAULT_UPDATE_DB_BACKOFF = 0.1
DEFAULT_UPDATE_DB_TIMEOUT = 30.0
DEFAULT_CLIENT_SHUTDOWN_TIMEOUT = 5.0


# --- Validators ---
def _validate_log_level(inst: Any, attr: Any, value: str) -> None:
    """Validator for standard logging level names."""
    valid = logging.getLevelNamesMapping().keys()
    if value.upper() not in valid:
        raise ValueError(f"Invalid log_level '{value}'. Must be one of {list(valid)}.")


def _validate_permissions(inst: Any, attr: Any, value: tuple[str, ...]) -> None:
    unknown = [p for p in value if p not in MPD_PERMISSIONS]
    if unknown:
        raise ValueError(
            f"Field '{attr.name}' has unknown permission(s) {unknown}. "
            f"Must be drawn from {sorted(MPD_PERMISSIONS)}."
        )


def _validate_secret(inst: Any, attr: Any, value: str) -> None:
    if not value:
        raise ValueError("Password must not be empty")
    if "@" in value:
        raise ValueError("Password must not contain '@', MPD uses it as the permission separator")


def _validate_optional_positive(inst: Any, attr: Any, value: float | None) -> None:
    if value is not None and value <= 0:
        raise ValueError(f"Field '{attr.name}' must be positive, got {value}")


def _validate_positive(inst: Any, attr: Any, value: float) -> None:
    if value <= 0:
        raise ValueError(f"Field '{attr.name}' must be positive, got {value}")


def _to_path(value: Any) -> Path:
    return value if isinstance(value, Path) else Path(value)


def _to_str_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value or ())


def _to_passwords(value: Any) -> tuple["Password", ...]:
    result = []
    for item in value or ():
        if isinstance(item, Password):
            result.append(item)
        elif isinstance(item, dict):
            result.append(Password(**item))
        else:
            raise TypeError(f"Cannot build a Password from {item!r}")
    return tuple(result)


# --- MPD server options ---
@define(frozen=True, slots=True)
class Password:
    """An MPD password and the permissions it grants."""

    password: str = field(validator=_validate_secret)
    permissions: tuple[str, ...] = field(converter=_to_str_tuple, validator=_validate_permissions)


@define(frozen=True, slots=True)
class MPDOptions:
    """
    Options for one MPD instance.

    `max_output_buffer_size` is in bytes and is rendered in KiB. Leave
    `bind_address` unset to listen on a UNIX socket inside the workspace.
    """

    library_root: Path = field(converter=_to_path)
    bin_path: str = field(default="mpd")
    bind_address: str | None = field(default=None)
    port: int | None = field(default=None, validator=_validate_optional_positive)
    default_permissions: tuple[str, ...] = field(
        factory=tuple, converter=_to_str_tuple, validator=_validate_permissions
    )
    passwords: tuple[Password, ...] = field(factory=tuple, converter=_to_passwords)
    max_output_buffer_size: int | None = field(default=None, validator=_validate_optional_positive)
    connect_backoff: float = field(default=DEFAULT_CONNECT_BACKOFF, validator=_validate_positive)
    connect_timeout: float = field(default=DEFAULT_CONNECT_TIMEOUT, validator=_validate_positive)
    update_db_backoff: float = field(default=DEFAULT_UPDATE_DB_BACKOFF, validator=_validate_positive)
    update_db_timeout: float = field(default=DEFAULT_UPDATE_DB_TIMEOUT, validator=_validate_positive)
    shutdown_timeout: float = field(default=DEFAULT_CLIENT_SHUTDOWN_TIMEOUT, validator=_validate_positive)


# --- Client under test ---
@define(frozen=True, slots=True)
class ClientConfig:
    """How the client under test is launched from a harness profile."""

    bin_path: str = field()
    args: tuple[str, ...] = field(factory=tuple, converter=_to_str_tuple)
    enable_heap_profile: bool = field(default=False)
    shutdown_timeout: float = field(default=DEFAULT_CLIENT_SHUTDOWN_TIMEOUT, validator=_validate_positive)


# --- Global and root ---
@define(frozen=True, slots=True)
class GlobalConfig:
    """Global default settings for shuffleharness."""

    log_level: str = field(default="INFO", validator=_validate_log_level)

    @property
    def numeric_log_level(self) -> int:
        return logging.getLevelNamesMapping()[self.log_level.upper()]


@define(frozen=True, slots=True)
class HarnessConfig:
    """Root configuration object loaded from a harness profile."""

    server: MPDOptions = field()
    client: ClientConfig | None = field(default=None)
    global_config: GlobalConfig = field(factory=GlobalConfig, metadata={"toml_name": "global"})


# 🔼⚙️
