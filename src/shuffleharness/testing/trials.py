#
# src/shuffleharness/testing/trials.py
#
"""
Runs many trials concurrently, bounded by a caller-supplied limit.
"""
import asyncio
import math
import time
from collections.abc import Sequence

import structlog

from shuffleharness.testing.protocols import Trial, TrialResult

log = structlog.get_logger("testing.trials")


async def run_trials(trial: Trial, count: int, parallelism: int) -> list[TrialResult]:
    """
    Runs `trial` `count` times with at most `parallelism` running at once.

    Failures do not stop the other trials; they are reported in the results,
    which come back ordered by trial index.
    """
    if parallelism <= 0:
        raise ValueError(f"parallelism must be positive, got {parallelism}")
    semaphore = asyncio.Semaphore(parallelism)

    async def run_one(index: int) -> TrialResult:
        async with semaphore:
            start = time.monotonic()
            try:
                await trial(index)
            except Exception as e:
                log.warning("Trial failed", index=index, error=str(e))
                return TrialResult(index, time.monotonic() - start, e)
            return TrialResult(index, time.monotonic() - start)

    results = await asyncio.gather(*(run_one(i) for i in range(count)))
    failed = sum(1 for r in results if not r.success)
    log.info("Trials finished", count=count, parallelism=parallelism, failed=failed)
    return list(results)


def percentile(values: Sequence[float], pct: float) -> float:
    """
    The `pct`-th percentile of `values` by linear interpolation between
    closest ranks.
    """
    if not values:
        raise ValueError("percentile of an empty sequence")
    if not 0 <= pct <= 100:
        raise ValueError(f"percentile must be within [0, 100], got {pct}")
    ordered = sorted(values)
    rank = (len(ordered) - 1) * pct / 100
    low, high = math.floor(rank), math.ceil(rank)
    return ordered[low] + (ordered[high] - ordered[low]) * (rank - low)

# 🔼⚙️
