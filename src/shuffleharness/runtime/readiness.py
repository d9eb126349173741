# src/shuffleharness/runtime/readiness.py

"""
Bounded, fixed-interval readiness gates for freshly spawned servers.

The waiters know nothing about any protocol: callers supply the probe.
"""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from shuffleharness.exceptions import PermanentProbeError, ReadinessTimeoutError
from shuffleharness.runtime.context import RunContext
from shuffleharness.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.readiness")

Probe = Callable[[], Awaitable[bool]]


async def wait_ready(
    probe: Probe,
    backoff_interval: float,
    max_wait: float,
    what: str = "connection",
    ctx: RunContext | None = None,
) -> None:
    """
    Calls `probe` every `backoff_interval` seconds until it returns a truthy
    value, returning as soon as it does.

    A probe that raises or returns a falsy value is retried. Each call is
    bounded by what is left of `max_wait`.

    Raises:
        ReadinessTimeoutError: If no probe succeeded within `max_wait`, or
            `ctx` was cancelled first. Chained from the last probe error.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + max_wait
    attempts = 0
    last_error: Exception | None = None
    wait_log = log.bind(what=what, backoff_interval=backoff_interval, max_wait=max_wait)

    while True:
        if ctx is not None and ctx.cancelled:
            raise ReadinessTimeoutError(what, max_wait, attempts, last_error, reason="aborted, context cancelled")

        attempts += 1
        remaining = deadline - loop.time()
        try:
            if await asyncio.wait_for(probe(), timeout=max(remaining, 0.001)):
                wait_log.debug("Readiness probe succeeded", attempts=attempts, emoji_key="ready")
                return
            last_error = None
        except Exception as e:
            last_error = e
            wait_log.debug("Readiness probe failed", attempts=attempts, error=str(e))

        remaining = deadline - loop.time()
        if remaining <= 0:
            wait_log.warning("Readiness wait timed out", attempts=attempts, emoji_key="wait")
            raise ReadinessTimeoutError(what, max_wait, attempts, last_error) from last_error
        await asyncio.sleep(min(backoff_interval, remaining))


async def wait_indexed(
    still_indexing: Probe,
    backoff_interval: float,
    max_wait: float,
    what: str = "database update",
    ctx: RunContext | None = None,
) -> None:
    """
    Polls `still_indexing` until it returns a falsy value.

    Raises:
        PermanentProbeError: Immediately, if the predicate itself raises.
            That is a connectivity fault, not indexing in progress.
        ReadinessTimeoutError: If indexing did not finish within `max_wait`,
            including a predicate call that is still pending at the deadline.
    """

    async def finished() -> bool:
        try:
            return not await still_indexing()
        except Exception as e:
            raise PermanentProbeError(f"Failed to check {what} state", e) from e

    loop = asyncio.get_running_loop()
    deadline = loop.time() + max_wait
    attempts = 0
    while True:
        if ctx is not None and ctx.cancelled:
            raise ReadinessTimeoutError(what, max_wait, attempts, reason="aborted, context cancelled")
        attempts += 1
        try:
            done = await asyncio.wait_for(finished(), timeout=max(deadline - loop.time(), 0.001))
        except TimeoutError:
            raise ReadinessTimeoutError(what, max_wait, attempts, reason="still in progress") from None
        if done:
            log.debug("Indexing finished", what=what, attempts=attempts, emoji_key="ready")
            return
        remaining = deadline - loop.time()
        if remaining <= 0:
            raise ReadinessTimeoutError(what, max_wait, attempts, reason="still in progress")
        await asyncio.sleep(min(backoff_interval, remaining))


# 🔼⚙️
