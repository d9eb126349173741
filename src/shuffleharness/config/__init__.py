#
# config/__init__.py
#
"""
Configuration handling sub-package for shuffleharness.

Exports the loading function, the MPD config renderer and the core
configuration models.
"""

from .loader import load_config, parse_config
from .models import (
    ClientConfig,
    GlobalConfig,
    HarnessConfig,
    MPDOptions,
    Password,
)
from .render import build_mpd_config

__all__ = [
    "ClientConfig",
    "GlobalConfig",
    "HarnessConfig",
    "MPDOptions",
    "Password",
    "build_mpd_config",
    "load_config",
    "parse_config",
]

# 🔼⚙️
