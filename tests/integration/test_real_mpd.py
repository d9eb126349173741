# tests/integration/test_real_mpd.py

"""
End-to-end checks against a real mpd binary. Skipped when mpd is not installed.
"""

import shutil
import signal
from pathlib import Path

import pytest
from attrs import evolve

from shuffleharness.config import MPDOptions
from shuffleharness.runtime import RunContext
from shuffleharness.server import MPDServer, PlayState
from shuffleharness.testing import run_trials

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("mpd") is None, reason="mpd is not installed"),
]


@pytest.fixture
def mpd_options(tmp_path: Path) -> MPDOptions:
    library = tmp_path / "library"
    library.mkdir()
    return MPDOptions(library_root=library, connect_backoff=0.1, update_db_backoff=0.05)


@pytest.mark.asyncio
class TestRealMPD:
    async def test_empty_library(self, mpd_options: MPDOptions):
        async with await MPDServer.start(RunContext(), mpd_options) as server:
            assert await server.db() == []
            assert await server.queue() == []
            assert await server.play_state() is PlayState.STOP
            assert server.is_ok()
        assert server.process.returncode == -signal.SIGKILL

    async def test_default_permissions_and_password(self, mpd_options: MPDOptions):
        options = evolve(
            mpd_options,
            default_permissions=["read"],
            passwords=[{"password": "good", "permissions": ["read", "add", "control"]}],
        )
        async with await MPDServer.start(RunContext(), options) as server:
            await server.password("good")
            await server.play()
            assert server.is_ok()

    @pytest.mark.slow
    async def test_many_instances_in_parallel(self, mpd_options: MPDOptions):
        ctx = RunContext("trials")

        async def trial(index: int) -> None:
            async with await MPDServer.start(ctx, mpd_options) as server:
                assert await server.queue() == []

        results = await run_trials(trial, count=8, parallelism=4)
        assert all(r.success for r in results), [str(r.error) for r in results if r.error]
