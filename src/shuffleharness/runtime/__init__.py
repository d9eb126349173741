#
# src/shuffleharness/runtime/__init__.py
#
"""
Process lifecycle: contexts, spawning, readiness gates and shutdown.
"""
from .context import RunContext
from .exit_status import DegenerateExitClassifier, ExitClassifier, PosixExitClassifier, default_classifier
from .instance import KILL_SIGNAL, ProcessInstance
from .readiness import wait_indexed, wait_ready
from .shutdown import DEFAULT_SHUTDOWN_TIMEOUT, ShutdownController, shutdown
from .spawner import MASSIF, Instrumentation, spawn

__all__ = [
    "DEFAULT_SHUTDOWN_TIMEOUT",
    "KILL_SIGNAL",
    "MASSIF",
    "DegenerateExitClassifier",
    "ExitClassifier",
    "Instrumentation",
    "PosixExitClassifier",
    "ProcessInstance",
    "RunContext",
    "ShutdownController",
    "default_classifier",
    "shutdown",
    "spawn",
    "wait_indexed",
    "wait_ready",
]

# 🔼⚙️
