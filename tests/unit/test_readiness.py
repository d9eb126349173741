# tests/unit/test_readiness.py

"""Timing and error-path tests for the readiness waiters."""

import asyncio
import time

import pytest

from shuffleharness.exceptions import PermanentProbeError, ReadinessTimeoutError
from shuffleharness.runtime.context import RunContext
from shuffleharness.runtime.readiness import wait_indexed, wait_ready


class CountingProbe:
    """Fails `failures` times, then succeeds."""

    def __init__(self, failures: int = 0, error: Exception | None = None):
        self.failures = failures
        self.error = error
        self.calls = 0

    async def __call__(self) -> bool:
        self.calls += 1
        if self.calls <= self.failures:
            if self.error is not None:
                raise self.error
            return False
        return True


@pytest.mark.asyncio
class TestWaitReady:
    async def test_immediate_success_returns_quickly(self):
        probe = CountingProbe()
        start = time.monotonic()
        await wait_ready(probe, backoff_interval=0.25, max_wait=0.1)
        assert time.monotonic() - start < 0.09
        assert probe.calls == 1

    async def test_never_ready_times_out_near_budget(self):
        probe = CountingProbe(failures=1000, error=ConnectionRefusedError("refused"))
        start = time.monotonic()
        with pytest.raises(ReadinessTimeoutError) as excinfo:
            await wait_ready(probe, backoff_interval=0.01, max_wait=0.1)
        elapsed = time.monotonic() - start

        assert 0.09 <= elapsed < 0.3
        assert excinfo.value.attempts == probe.calls
        assert probe.calls > 1
        assert isinstance(excinfo.value.__cause__, ConnectionRefusedError)

    async def test_retries_until_probe_succeeds(self):
        probe = CountingProbe(failures=3, error=OSError("not yet"))
        await wait_ready(probe, backoff_interval=0.01, max_wait=1.0)
        assert probe.calls == 4

    async def test_falsy_result_is_retried(self):
        probe = CountingProbe(failures=2)
        await wait_ready(probe, backoff_interval=0.01, max_wait=1.0)
        assert probe.calls == 3

    async def test_slow_probe_is_bounded_by_budget(self):
        async def hang() -> bool:
            await asyncio.sleep(10)
            return True

        start = time.monotonic()
        with pytest.raises(ReadinessTimeoutError):
            await wait_ready(hang, backoff_interval=0.01, max_wait=0.1)
        assert time.monotonic() - start < 0.5

    async def test_cancelled_context_aborts(self):
        ctx = RunContext()
        probe = CountingProbe(failures=1000)
        waiter = asyncio.create_task(wait_ready(probe, backoff_interval=0.01, max_wait=10, ctx=ctx))
        await asyncio.sleep(0.05)
        ctx.cancel()

        with pytest.raises(ReadinessTimeoutError, match="aborted"):
            await asyncio.wait_for(waiter, timeout=1)


@pytest.mark.asyncio
class TestWaitIndexed:
    async def test_returns_once_indexing_done(self):
        remaining = [True, True, False]

        async def still_indexing() -> bool:
            return remaining.pop(0)

        await wait_indexed(still_indexing, backoff_interval=0.01, max_wait=1.0)
        assert remaining == []

    async def test_predicate_error_is_permanent(self):
        calls = 0

        async def broken() -> bool:
            nonlocal calls
            calls += 1
            raise ConnectionResetError("gone")

        start = time.monotonic()
        with pytest.raises(PermanentProbeError) as excinfo:
            await wait_indexed(broken, backoff_interval=0.5, max_wait=5.0)

        assert calls == 1
        assert time.monotonic() - start < 0.1
        assert isinstance(excinfo.value.details, ConnectionResetError)

    async def test_times_out_when_always_indexing(self):
        async def always() -> bool:
            return True

        with pytest.raises(ReadinessTimeoutError, match="still in progress"):
            await wait_indexed(always, backoff_interval=0.01, max_wait=0.1)

    async def test_hanging_predicate_is_bounded_by_budget(self):
        async def hang() -> bool:
            await asyncio.sleep(3)
            return False

        start = time.monotonic()
        with pytest.raises(ReadinessTimeoutError, match="still in progress"):
            await wait_indexed(hang, backoff_interval=0.01, max_wait=0.1)
        assert time.monotonic() - start < 0.5
