#
# src/shuffleharness/server/__init__.py
#
"""
Throwaway MPD instances for integration tests.
"""
from .instance import MPDServer, PlayState, connect_client

__all__ = ["MPDServer", "PlayState", "connect_client"]

# 🔼⚙️
