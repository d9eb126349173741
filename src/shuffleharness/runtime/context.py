# src/shuffleharness/runtime/context.py

"""
Cancellation contexts.

A RunContext is the only way to forcibly stop a spawned process: the spawner
derives a child context per process and kills the process when that child is
cancelled. Cancelling a parent cancels every context derived from it, which
is how a whole test run tears down all of its processes at once.
"""

import asyncio
from collections.abc import Callable

import structlog

from shuffleharness.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.context")


class RunContext:
    """A node in a tree of cancellable contexts."""

    def __init__(self, name: str = "root", parent: "RunContext | None" = None):
        self.name = name
        self._parent = parent
        self._children: list[RunContext] = []
        self._callbacks: list[Callable[[], None]] = []
        self._cancelled = False
        self._event: asyncio.Event | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def children(self) -> tuple["RunContext", ...]:
        return tuple(self._children)

    def child(self, name: str | None = None) -> "RunContext":
        """Derives a context that is cancelled whenever this one is."""
        ctx = RunContext(name or f"{self.name}/{len(self._children)}", parent=self)
        if self._cancelled:
            ctx.cancel()
        else:
            self._children.append(ctx)
        return ctx

    def add_cancel_callback(self, callback: Callable[[], None]) -> None:
        """Registers `callback` to run on cancellation (now, if already cancelled)."""
        if self._cancelled:
            callback()
        else:
            self._callbacks.append(callback)

    def cancel(self) -> bool:
        """
        Cancels this context and all of its descendants.

        Returns True if this call did the cancelling, False if the context was
        already cancelled.
        """
        if self._cancelled:
            return False
        self._cancelled = True
        log.debug("Context cancelled", context=self.name, children=len(self._children))

        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                log.exception("Cancel callback failed", context=self.name)

        children, self._children = self._children, []
        for child in children:
            child.cancel()

        if self._parent is not None and self in self._parent._children:
            self._parent._children.remove(self)
        if self._event is not None:
            self._event.set()
        return True

    async def wait(self) -> None:
        """Blocks until this context is cancelled."""
        if self._cancelled:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()

    def __repr__(self) -> str:
        return f"RunContext(name={self.name!r}, cancelled={self._cancelled})"


# 🔼⚙️
