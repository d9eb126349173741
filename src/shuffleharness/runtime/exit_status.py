# src/shuffleharness/runtime/exit_status.py

"""
Decides whether a process death was our own doing.

This is the only place that decodes signals. Everything above it deals in
ExitOutcome and stays platform-agnostic.
"""

import os
import signal
from typing import Protocol

from shuffleharness.exceptions import ProcessExitError
from shuffleharness.state import ExitOutcome, ShutdownType


class ExitClassifier(Protocol):
    def classify(self, shutdown_type: ShutdownType, error: ProcessExitError | None) -> ExitOutcome:
        """Turns the error from waiting on a process into an ExitOutcome."""
        ...


class PosixExitClassifier:
    """
    Treats death by the harness kill signal as expected, unless the shutdown
    was SOFT: a soft shutdown promises the process exits on its own, so a
    signal-assisted exit is a failure even if we sent the signal.
    """

    def __init__(self, kill_signal: int = signal.SIGKILL):
        self.kill_signal = kill_signal

    def classify(self, shutdown_type: ShutdownType, error: ProcessExitError | None) -> ExitOutcome:
        if error is None:
            return ExitOutcome.success()
        if shutdown_type.signals and error.signal == self.kill_signal:
            return ExitOutcome.expected_kill()
        if error.success:
            return ExitOutcome.success()
        return ExitOutcome.failure(error)


class DegenerateExitClassifier:
    """For platforms without distinguishable signals: no kill is ever expected."""

    def classify(self, shutdown_type: ShutdownType, error: ProcessExitError | None) -> ExitOutcome:
        if error is None or error.success:
            return ExitOutcome.success()
        return ExitOutcome.failure(error)


def exit_error(binary: str, returncode: int, stderr: bytes = b"") -> ProcessExitError | None:
    """The error a wait on a process yields: None for status 0."""
    if returncode == 0:
        return None
    return ProcessExitError(binary, returncode, stderr)


def default_classifier() -> ExitClassifier:
    if os.name == "posix":
        return PosixExitClassifier()
    return DegenerateExitClassifier()


# 🔼⚙️
