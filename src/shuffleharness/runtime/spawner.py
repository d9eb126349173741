# src/shuffleharness/runtime/spawner.py

"""
Starts external processes under a RunContext and captures their output.
"""

import asyncio
import os
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path

import structlog
from attrs import define, field

from shuffleharness.exceptions import SpawnError
from shuffleharness.runtime.context import RunContext
from shuffleharness.runtime.instance import KILL_SIGNAL, ProcessInstance
from shuffleharness.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.spawner")


@define(frozen=True, slots=True)
class Instrumentation:
    """
    A tool that wraps the real binary, e.g. a heap profiler.

    The wrapped command line is `tool *args <output_flag><profile> binary ...`.
    Profiles are written to `<prefix>.<unique>` in the temp directory.
    """

    tool: str = field()
    args: tuple[str, ...] = field(factory=tuple, converter=tuple)
    output_flag: str = field(default="")
    prefix: str | None = field(default=None)

    def allocate_output(self, binary: str) -> Path:
        prefix = self.prefix or f"{Path(binary).name}.{Path(self.tool).name}"
        fd, name = tempfile.mkstemp(prefix=f"{prefix}.")
        os.close(fd)
        return Path(name)

    def wrap(self, argv: Sequence[str], output: Path) -> list[str]:
        return [self.tool, *self.args, f"{self.output_flag}{output}", *argv]


MASSIF = Instrumentation(
    tool="valgrind",
    args=("--tool=massif",),
    output_flag="--massif-out-file=",
    prefix="massif",
)


def _killer(process: asyncio.subprocess.Process, binary: str):
    def kill() -> None:
        if process.returncode is not None:
            return
        try:
            process.send_signal(KILL_SIGNAL)
        except ProcessLookupError:
            return
        log.info("Killed process", binary=binary, pid=process.pid, emoji_key="kill")

    return kill


async def spawn(
    ctx: RunContext,
    binary: str,
    args: Sequence[str] = (),
    env: Mapping[str, str] | None = None,
    instrumentation: Instrumentation | None = None,
    cwd: str | os.PathLike[str] | None = None,
) -> ProcessInstance:
    """
    Starts `binary` with `args` in a context derived from `ctx`.

    Cancelling the returned instance's context (directly, or by cancelling any
    ancestor) kills the process. stdout and stderr are captured from the start.

    Raises:
        SpawnError: If the OS cannot start the process. The derived context is
            cancelled and any profile artifact is removed.
    """
    run_ctx = ctx.child(name=f"{ctx.name}/{Path(binary).name}")
    argv = [str(binary), *map(str, args)]
    profile_path = None
    if instrumentation is not None:
        profile_path = instrumentation.allocate_output(binary)
        argv = instrumentation.wrap(argv, profile_path)

    spawn_log = log.bind(binary=binary, argv=" ".join(argv))
    if run_ctx.cancelled:
        _discard(profile_path)
        raise SpawnError(binary, RuntimeError("context already cancelled"))

    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=dict(env) if env is not None else None,
            cwd=cwd,
        )
    except OSError as e:
        spawn_log.error("Failed to start process", error=str(e), emoji_key="fail")
        run_ctx.cancel()
        _discard(profile_path)
        raise SpawnError(binary, e) from e

    instance = ProcessInstance(process=process, argv=argv, context=run_ctx, profile_path=profile_path)
    instance.start_capture()
    run_ctx.add_cancel_callback(_killer(process, binary))
    spawn_log.info("Process started", pid=process.pid, emoji_key="spawn")
    return instance


def _discard(path: Path | None) -> None:
    if path is not None:
        path.unlink(missing_ok=True)


# 🔼⚙️
