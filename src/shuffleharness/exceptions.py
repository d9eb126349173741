# src/shuffleharness/exceptions.py

"""
Exception hierarchy for the process harness.

Setup-time errors are raised straight to the caller. Steady-state transport
errors are recorded on the instance instead of raised. Shutdown-time errors
travel inside an ExitOutcome and are raised by the instance's shutdown().
"""

import signal


class HarnessError(Exception):
    """Base class for all harness errors."""

    def __init__(self, message: str, details: Exception | None = None):
        self.details = details
        super().__init__(message)
        if details is not None:
            self.add_note(f"Original error: {type(details).__name__}: {details}")


class ConfigurationError(HarnessError):
    """Invalid harness profile or server options."""


class WorkspaceError(HarnessError):
    """A workspace could not be created, or was cleaned up twice."""


class SpawnError(HarnessError):
    """The OS refused to start the process (missing binary, permissions)."""

    def __init__(self, binary: str, details: Exception | None = None):
        self.binary = binary
        super().__init__(f"Failed to start process '{binary}'", details)


class ReadinessTimeoutError(HarnessError):
    """The readiness probe never succeeded within its time budget."""

    def __init__(
        self,
        what: str,
        max_wait: float,
        attempts: int,
        details: Exception | None = None,
        reason: str = "not established",
    ):
        self.what = what
        self.max_wait = max_wait
        self.attempts = attempts
        super().__init__(
            f"{what} {reason} within {max_wait:.3g}s ({attempts} attempt(s))", details
        )


class PermanentProbeError(HarnessError):
    """A readiness predicate failed outright; retrying would not help."""


class ShutdownTimeoutError(HarnessError):
    """The process outlived its shutdown budget and was force-killed."""

    def __init__(self, binary: str, timeout: float):
        self.binary = binary
        self.timeout = timeout
        super().__init__(f"{binary} took too long to exit (>{timeout:.3g}s). It has been killed")


class ProcessExitError(HarnessError):
    """The process terminated with a non-zero status or by a signal."""

    STDERR_TAIL_BYTES = 2048

    def __init__(self, binary: str, returncode: int, stderr: bytes = b""):
        self.binary = binary
        self.returncode = returncode
        self.stderr = stderr
        if returncode < 0:
            try:
                name = signal.Signals(-returncode).name
            except ValueError:
                name = f"signal {-returncode}"
            message = f"{binary} was terminated by {name}"
        else:
            message = f"{binary} exited with status {returncode}"
        super().__init__(message)
        if stderr:
            tail = stderr[-self.STDERR_TAIL_BYTES :].decode("utf-8", errors="replace")
            self.add_note(f"stderr (tail):\n{tail}")

    @property
    def signal(self) -> int | None:
        """The terminating signal number, if the process died by a signal."""
        return -self.returncode if self.returncode < 0 else None

    @property
    def success(self) -> bool:
        return self.returncode == 0


class TransportError(HarnessError):
    """A query against a running instance failed."""


class HeapProfileError(HarnessError):
    """A heap profile could not be produced or parsed."""


# 🔼⚙️
