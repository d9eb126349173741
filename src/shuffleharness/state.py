# src/shuffleharness/state.py
#
"""
Shutdown types, shutdown phases and exit outcomes for harness-managed processes.
"""

from enum import Enum, auto

from attrs import define, field


class ShutdownType(Enum):
    """How a process should be brought down."""

    UNSPECIFIED = auto()  # Same as HARD.
    HARD = auto()  # Signal cancellation immediately.
    SOFT = auto()  # Do not signal; wait for a natural exit within the timeout.

    @property
    def signals(self) -> bool:
        return self is not ShutdownType.SOFT


class ShutdownPhase(Enum):
    """States of the shutdown state machine for one process."""

    RUNNING = auto()
    SIGNAL_SENT = auto()
    NOT_SIGNALED = auto()
    WAITING_FOR_EXIT = auto()
    EXITED_NATURALLY = auto()
    FORCED_KILL_TIMEOUT = auto()
    CLASSIFIED = auto()


class OutcomeKind(Enum):
    SUCCESS = auto()
    EXPECTED_KILL = auto()
    FAILURE = auto()


@define(frozen=True, slots=True)
class ExitOutcome:
    """
    Tagged result of a shutdown attempt.

    EXPECTED_KILL is not an error: the process died from the harness's own
    kill signal during a shutdown that asked for one.
    """

    kind: OutcomeKind = field()
    error: Exception | None = field(default=None)

    @classmethod
    def success(cls) -> "ExitOutcome":
        return cls(OutcomeKind.SUCCESS)

    @classmethod
    def expected_kill(cls) -> "ExitOutcome":
        return cls(OutcomeKind.EXPECTED_KILL)

    @classmethod
    def failure(cls, error: Exception) -> "ExitOutcome":
        return cls(OutcomeKind.FAILURE, error)

    @property
    def ok(self) -> bool:
        return self.kind is not OutcomeKind.FAILURE

    def raise_for_failure(self) -> None:
        """Raises the carried error if this outcome is a failure."""
        if self.kind is OutcomeKind.FAILURE:
            if self.error is None:
                raise RuntimeError("Failure outcome without an error")
            raise self.error


# 🔼⚙️
