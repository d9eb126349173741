#
# src/shuffleharness/telemetry/__init__.py
#
"""
Logging setup for shuffleharness.
"""
from .logger import StructLogger, setup_logging

__all__ = ["StructLogger", "setup_logging"]

# 🔼⚙️
