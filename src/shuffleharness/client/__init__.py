#
# src/shuffleharness/client/__init__.py
#
"""
Harness for the client process under test.
"""
from .heap_profile import HeapProfile, Snapshot, parse_massif, read_massif
from .instance import ClientOptions, ShuffleClient, client_environment

__all__ = [
    "ClientOptions",
    "HeapProfile",
    "ShuffleClient",
    "Snapshot",
    "client_environment",
    "parse_massif",
    "read_massif",
]

# 🔼⚙️
