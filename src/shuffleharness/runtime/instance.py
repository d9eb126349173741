# src/shuffleharness/runtime/instance.py
#
"""
The handle for one harness-managed external process.
"""

import asyncio
import signal
from pathlib import Path

import structlog
from attrs import define, field

from shuffleharness.protocols import Address
from shuffleharness.runtime.context import RunContext
from shuffleharness.state import ExitOutcome, ShutdownPhase

log: structlog.stdlib.BoundLogger = structlog.get_logger("runtime.instance")

# Cancelling a process's context delivers this signal. It cannot be caught,
# so processes that ignore SIGTERM still go down.
KILL_SIGNAL = signal.SIGKILL


@define(slots=True, eq=False)
class ProcessInstance:
    """
    One spawned process plus its captured I/O.

    The process handle is owned by this instance alone. The completion task is
    started at spawn time, waits for the process exactly once, and is only
    ever observed (shielded), never restarted, so any number of callers can
    wait on it.
    """

    process: asyncio.subprocess.Process = field()
    argv: tuple[str, ...] = field(converter=tuple)
    context: RunContext = field()
    address: Address | None = field(default=None)
    profile_path: Path | None = field(default=None)
    errors: list[Exception] = field(factory=list)
    phase: ShutdownPhase = field(default=ShutdownPhase.RUNNING)
    outcome: ExitOutcome | None = field(default=None)

    _stdout: bytearray = field(factory=bytearray, init=False, repr=False)
    _stderr: bytearray = field(factory=bytearray, init=False, repr=False)
    _completion: "asyncio.Task[int] | None" = field(default=None, init=False, repr=False)

    @property
    def binary(self) -> str:
        return self.argv[0]

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def returncode(self) -> int | None:
        return self.process.returncode

    @property
    def stdout(self) -> bytes:
        """Everything the process has written to stdout so far."""
        return bytes(self._stdout)

    @property
    def stderr(self) -> bytes:
        """Everything the process has written to stderr so far."""
        return bytes(self._stderr)

    @property
    def completion(self) -> "asyncio.Task[int]":
        if self._completion is None:
            raise RuntimeError("ProcessInstance was not started by the spawner")
        return self._completion

    @property
    def exited(self) -> bool:
        return self._completion is not None and self._completion.done()

    def start_capture(self) -> None:
        """Starts pumping the process's output and the single completion task."""
        if self._completion is not None:
            return
        pumps = []
        if self.process.stdout is not None:
            pumps.append(asyncio.create_task(_pump(self.process.stdout, self._stdout)))
        if self.process.stderr is not None:
            pumps.append(asyncio.create_task(_pump(self.process.stderr, self._stderr)))
        self._completion = asyncio.create_task(
            self._wait_for_exit(pumps), name=f"wait-{self.binary}-{self.pid}"
        )
        # A process that is gone has nothing left to cancel; closing its
        # context also aborts readiness waits still polling it.
        self._completion.add_done_callback(lambda _: self.context.cancel())

    async def _wait_for_exit(self, pumps: list[asyncio.Task]) -> int:
        returncode = await self.process.wait()
        # Drain what is left in the pipes so the buffers are complete (and
        # frozen) by the time anyone sees the exit status.
        await asyncio.gather(*pumps, return_exceptions=True)
        log.debug(
            "Process exited",
            binary=self.binary,
            pid=self.pid,
            returncode=returncode,
            emoji_key="exit",
        )
        return returncode

    async def wait(self) -> int:
        """Waits for the process to exit and returns its return code."""
        return await asyncio.shield(self.completion)

    def cancel(self) -> bool:
        """Cancels the process's context, killing it if still running."""
        return self.context.cancel()

    def set_phase(self, phase: ShutdownPhase) -> None:
        if phase is self.phase:
            return
        log.debug(
            "Shutdown phase changed",
            binary=self.binary,
            pid=self.pid,
            old_phase=self.phase.name,
            new_phase=phase.name,
        )
        self.phase = phase

    def record_error(self, error: Exception) -> None:
        """Appends a non-fatal operational error to this instance's log."""
        log.warning("Recorded instance error", binary=self.binary, pid=self.pid, error=str(error))
        self.errors.append(error)

    def is_ok(self) -> bool:
        """True if no errors have been recorded on this instance."""
        return not self.errors


async def _pump(stream: asyncio.StreamReader, buffer: bytearray) -> None:
    while chunk := await stream.read(65536):
        buffer.extend(chunk)


# 🔼⚙️
