# tests/unit/test_testing_helpers.py

"""Tests for trial running and optimistic waiting helpers."""

import asyncio
import time

import pytest

from shuffleharness.testing import Trial, percentile, run_trials, try_wait_for


class TestPercentile:
    def test_interpolates(self):
        assert percentile([1, 2, 3, 4], 50) == 2.5
        assert percentile([10, 20, 30], 100) == 30
        assert percentile([10, 20, 30], 0) == 10
        assert percentile([5.0], 99) == 5.0

    def test_unordered_input(self):
        assert percentile([3, 1, 2], 50) == 2

    def test_rejects_bad_input(self):
        with pytest.raises(ValueError):
            percentile([], 50)
        with pytest.raises(ValueError):
            percentile([1], 101)


@pytest.mark.asyncio
class TestRunTrials:
    async def test_parallelism_is_bounded(self):
        running = 0
        peak = 0

        async def trial(index: int) -> None:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1

        assert isinstance(trial, Trial)
        results = await run_trials(trial, count=10, parallelism=3)

        assert peak == 3
        assert [r.index for r in results] == list(range(10))
        assert all(r.success for r in results)

    async def test_failures_are_collected(self):
        async def trial(index: int) -> None:
            if index % 2:
                raise RuntimeError(f"trial {index} broke")

        results = await run_trials(trial, count=4, parallelism=2)

        assert [r.success for r in results] == [True, False, True, False]
        assert str(results[1].error) == "trial 1 broke"

    async def test_rejects_zero_parallelism(self):
        async def trial(index: int) -> None:
            pass

        with pytest.raises(ValueError):
            await run_trials(trial, count=1, parallelism=0)


@pytest.mark.asyncio
class TestTryWaitFor:
    async def test_condition_becomes_true(self):
        state = {"calls": 0}

        def cond() -> bool:
            state["calls"] += 1
            return state["calls"] >= 2

        assert await try_wait_for(cond, backoff=0.01, max_wait=1.0)
        assert state["calls"] == 2

    async def test_async_condition(self):
        async def cond() -> bool:
            return True

        assert await try_wait_for(cond)

    async def test_gives_up_quietly(self):
        start = time.monotonic()
        assert not await try_wait_for(lambda: False, backoff=0.01, max_wait=0.05)
        assert time.monotonic() - start < 0.5
