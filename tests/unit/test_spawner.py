# tests/unit/test_spawner.py

"""Tests for starting processes under a RunContext."""

import signal
import sys
import tempfile
from pathlib import Path

import pytest

from shuffleharness.exceptions import SpawnError
from shuffleharness.runtime.context import RunContext
from shuffleharness.runtime.spawner import MASSIF, Instrumentation, spawn
from shuffleharness.state import ShutdownPhase

SLEEPER = "import time; print('up', flush=True); time.sleep(60)"


class TestInstrumentation:
    def test_wrap_puts_tool_in_front(self):
        argv = MASSIF.wrap(["ashuffle", "--only", "3"], Path("/tmp/massif.abc"))
        assert argv == [
            "valgrind",
            "--tool=massif",
            "--massif-out-file=/tmp/massif.abc",
            "ashuffle",
            "--only",
            "3",
        ]

    def test_allocate_output_uses_prefix(self, tmp_path, monkeypatch):
        monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
        path = MASSIF.allocate_output("ashuffle")
        assert path.parent == tmp_path
        assert path.name.startswith("massif.")
        assert path.exists()

    def test_allocate_output_default_prefix(self, tmp_path, monkeypatch):
        monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
        path = Instrumentation(tool="/usr/bin/heaptrack").allocate_output("/usr/bin/ashuffle")
        assert path.name.startswith("ashuffle.heaptrack.")


@pytest.mark.asyncio
class TestSpawn:
    async def test_captures_output_and_exit(self):
        ctx = RunContext()
        code = "import sys; print('hello'); print('oops', file=sys.stderr)"
        instance = await spawn(ctx, sys.executable, ["-c", code])

        assert await instance.wait() == 0
        assert instance.stdout == b"hello\n"
        assert instance.stderr == b"oops\n"
        assert instance.exited
        assert instance.phase is ShutdownPhase.RUNNING
        assert instance.context.cancelled

    async def test_env_is_passed(self):
        instance = await spawn(
            RunContext(),
            sys.executable,
            ["-c", "import os; print(os.environ['HARNESS_VALUE'])"],
            env={"HARNESS_VALUE": "42"},
        )
        await instance.wait()
        assert instance.stdout.strip() == b"42"

    async def test_missing_binary_raises_and_leaves_no_children(self):
        ctx = RunContext()
        with pytest.raises(SpawnError) as excinfo:
            await spawn(ctx, "/nonexistent/ashuffle", ["--help"])
        assert excinfo.value.binary == "/nonexistent/ashuffle"
        assert isinstance(excinfo.value.details, FileNotFoundError)
        assert ctx.children == ()

    async def test_failed_spawn_removes_profile(self, tmp_path, monkeypatch):
        monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
        broken = Instrumentation(tool="/nonexistent/valgrind", output_flag="--out=", prefix="profile")
        with pytest.raises(SpawnError):
            await spawn(RunContext(), sys.executable, instrumentation=broken)
        assert list(tmp_path.iterdir()) == []

    async def test_cancelled_context_refuses_to_spawn(self):
        ctx = RunContext()
        ctx.cancel()
        with pytest.raises(SpawnError):
            await spawn(ctx, sys.executable, ["-c", "pass"])

    async def test_cancelling_parent_kills_process(self):
        ctx = RunContext()
        instance = await spawn(ctx, sys.executable, ["-c", SLEEPER])

        ctx.cancel()

        assert await instance.wait() == -signal.SIGKILL
        assert instance.context.cancelled

    async def test_wait_is_shared_by_many_callers(self):
        instance = await spawn(RunContext(), sys.executable, ["-c", "raise SystemExit(3)"])
        first, second = await instance.wait(), await instance.wait()
        assert first == second == 3

    async def test_record_error(self):
        instance = await spawn(RunContext(), sys.executable, ["-c", "pass"])
        assert instance.is_ok()
        instance.record_error(RuntimeError("lost connection"))
        assert not instance.is_ok()
        await instance.wait()
