#
# src/shuffleharness/__init__.py
#
"""
shuffleharness: a harness for driving an MPD server and a client under test
through configuration, spawn, readiness synchronization and shutdown.
"""
from .exceptions import (
    ConfigurationError,
    HarnessError,
    HeapProfileError,
    PermanentProbeError,
    ProcessExitError,
    ReadinessTimeoutError,
    ShutdownTimeoutError,
    SpawnError,
    TransportError,
    WorkspaceError,
)
from .protocols import Address, AddressProvider, LiteralAddress
from .state import ExitOutcome, OutcomeKind, ShutdownPhase, ShutdownType
from .workspace import Workspace

__all__ = [
    "Address",
    "AddressProvider",
    "ConfigurationError",
    "ExitOutcome",
    "HarnessError",
    "HeapProfileError",
    "LiteralAddress",
    "OutcomeKind",
    "PermanentProbeError",
    "ProcessExitError",
    "ReadinessTimeoutError",
    "ShutdownPhase",
    "ShutdownTimeoutError",
    "ShutdownType",
    "SpawnError",
    "TransportError",
    "Workspace",
    "WorkspaceError",
]

# 🔼⚙️
