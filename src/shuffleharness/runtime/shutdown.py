# src/shuffleharness/runtime/shutdown.py

"""
Controlled shutdown of harness-managed processes.

    RUNNING -> SIGNAL_SENT | NOT_SIGNALED -> WAITING_FOR_EXIT
            -> EXITED_NATURALLY | FORCED_KILL_TIMEOUT -> CLASSIFIED

External processes under test do not always honor a cooperative shutdown.
The wait is raced against a timer so a test never hangs on one, and the exit
is classified so that stopping a healthy process is not reported as a
failure.
"""

import asyncio

import structlog

from shuffleharness.exceptions import ShutdownTimeoutError
from shuffleharness.runtime.exit_status import ExitClassifier, default_classifier, exit_error
from shuffleharness.runtime.instance import ProcessInstance
from shuffleharness.state import ExitOutcome, ShutdownPhase, ShutdownType
from shuffleharness.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.shutdown")

DEFAULT_SHUTDOWN_TIMEOUT = 5.0


class ShutdownController:
    """Brings processes down and classifies how they went."""

    def __init__(
        self,
        timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
        classifier: ExitClassifier | None = None,
    ):
        self.timeout = timeout
        self.classifier = classifier or default_classifier()

    async def shutdown(
        self,
        instance: ProcessInstance,
        shutdown_type: ShutdownType = ShutdownType.UNSPECIFIED,
        timeout: float | None = None,
    ) -> ExitOutcome:
        """
        Shuts `instance` down.

        Unless `shutdown_type` is SOFT, the instance's context is cancelled
        first (killing the process). Then the process's exit is raced against
        `timeout`. If the timer wins the process is killed and the outcome is
        a ShutdownTimeoutError failure; the completion task keeps reaping the
        process in the background.

        The first outcome is kept on the instance. Calling this again returns
        that same outcome, whatever `shutdown_type` is passed, and does not
        signal anything.
        """
        if instance.outcome is not None:
            return instance.outcome
        timeout = self.timeout if timeout is None else timeout
        shutdown_log = log.bind(
            binary=instance.binary,
            pid=instance.pid,
            shutdown_type=shutdown_type.name,
            timeout=timeout,
        )

        if shutdown_type.signals and instance.cancel():
            instance.set_phase(ShutdownPhase.SIGNAL_SENT)
        elif instance.phase is ShutdownPhase.RUNNING:
            instance.set_phase(ShutdownPhase.NOT_SIGNALED)

        if instance.phase is not ShutdownPhase.CLASSIFIED:
            instance.set_phase(ShutdownPhase.WAITING_FOR_EXIT)
        try:
            returncode = await asyncio.wait_for(instance.wait(), timeout=timeout)
        except TimeoutError:
            instance.set_phase(ShutdownPhase.FORCED_KILL_TIMEOUT)
            instance.cancel()
            # The completion task still reaps the process.
            instance.completion.add_done_callback(lambda _: instance.set_phase(ShutdownPhase.CLASSIFIED))
            shutdown_log.error("Process did not exit in time, killed it", emoji_key="kill")
            return _settle(instance, ExitOutcome.failure(ShutdownTimeoutError(instance.binary, timeout)))

        if instance.phase is ShutdownPhase.WAITING_FOR_EXIT:
            instance.set_phase(ShutdownPhase.EXITED_NATURALLY)

        outcome = self.classifier.classify(
            shutdown_type, exit_error(instance.binary, returncode, instance.stderr)
        )
        instance.set_phase(ShutdownPhase.CLASSIFIED)
        # Once exited, the context has no more work to do.
        instance.context.cancel()
        shutdown_log.info(
            "Process shut down",
            returncode=returncode,
            outcome=outcome.kind.name,
            emoji_key="exit",
        )
        return _settle(instance, outcome)


def _settle(instance: ProcessInstance, outcome: ExitOutcome) -> ExitOutcome:
    """Records `outcome` unless a concurrent call already recorded one."""
    if instance.outcome is None:
        instance.outcome = outcome
    return instance.outcome


async def shutdown(
    instance: ProcessInstance,
    shutdown_type: ShutdownType = ShutdownType.UNSPECIFIED,
    timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
) -> ExitOutcome:
    """Shuts `instance` down with a default-configured controller."""
    return await ShutdownController(timeout=timeout).shutdown(instance, shutdown_type)


# 🔼⚙️
