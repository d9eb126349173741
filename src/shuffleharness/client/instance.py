# src/shuffleharness/client/instance.py

"""
Runs the client under test (ashuffle) against a server address.

The client gets no readiness gate, only the spawner and the shutdown
controller. Its business logic is opaque; tests observe it through the server
and through its captured output.
"""

import os
from collections.abc import Mapping

import structlog
from attrs import define, field

from shuffleharness.client.heap_profile import HeapProfile, read_massif
from shuffleharness.config.models import DEFAULT_CLIENT_SHUTDOWN_TIMEOUT, ClientConfig
from shuffleharness.exceptions import HeapProfileError
from shuffleharness.protocols import AddressProvider
from shuffleharness.runtime.context import RunContext
from shuffleharness.runtime.instance import ProcessInstance
from shuffleharness.runtime.shutdown import ShutdownController
from shuffleharness.runtime.spawner import MASSIF, spawn
from shuffleharness.state import ExitOutcome, ShutdownType
from shuffleharness.telemetry import StructLogger

log: StructLogger = structlog.get_logger("client.instance")

HOST_ENV = "MPD_HOST"
PORT_ENV = "MPD_PORT"


@define(frozen=True, slots=True)
class ClientOptions:
    server: AddressProvider | None = field(default=None)
    args: tuple[str, ...] = field(factory=tuple, converter=tuple)
    enable_heap_profile: bool = field(default=False)
    shutdown_timeout: float = field(default=DEFAULT_CLIENT_SHUTDOWN_TIMEOUT)

    @classmethod
    def from_config(cls, config: ClientConfig, server: AddressProvider | None = None) -> "ClientOptions":
        return cls(
            server=server,
            args=config.args,
            enable_heap_profile=config.enable_heap_profile,
            shutdown_timeout=config.shutdown_timeout,
        )


def client_environment(
    server: AddressProvider | None, base: Mapping[str, str] | None = None
) -> dict[str, str]:
    """
    The environment for a client talking to `server`: `base` (default: our
    own environment) plus MPD_HOST and MPD_PORT. Empty values are left out.
    """
    env = dict(os.environ if base is None else base)
    if server is not None:
        address = server.address()
        if address.host:
            env[HOST_ENV] = address.host
        if address.port:
            env[PORT_ENV] = address.port
    return env


class ShuffleClient:
    """A running client under test. Construct it with `await ShuffleClient.start(...)`."""

    def __init__(self, process: ProcessInstance, controller: ShutdownController):
        self.process = process
        self.controller = controller

    @classmethod
    async def start(
        cls,
        ctx: RunContext,
        path: str,
        options: ClientOptions | None = None,
        controller: ShutdownController | None = None,
    ) -> "ShuffleClient":
        """
        Starts the client binary at `path`.

        Raises:
            SpawnError: If the binary (or valgrind, when profiling) cannot be started.
        """
        options = options or ClientOptions()
        controller = controller or ShutdownController(timeout=options.shutdown_timeout)
        process = await spawn(
            ctx,
            path,
            options.args,
            env=client_environment(options.server),
            instrumentation=MASSIF if options.enable_heap_profile else None,
        )
        if options.server is not None:
            process.address = options.server.address()
        return cls(process, controller)

    @property
    def stdout(self) -> bytes:
        return self.process.stdout

    @property
    def stderr(self) -> bytes:
        return self.process.stderr

    async def shutdown(self, shutdown_type: ShutdownType = ShutdownType.UNSPECIFIED) -> None:
        """
        Shuts the client down.

        UNSPECIFIED and HARD kill the client right away; being killed is then
        not an error. SOFT waits for the client to exit by itself and fails if
        it has to be killed, or exits unsuccessfully.

        Raises:
            ShutdownTimeoutError: If a SOFT shutdown ran out of time.
            ProcessExitError: If the client exited unsuccessfully.
        """
        outcome = await self.shutdown_outcome(shutdown_type)
        outcome.raise_for_failure()

    async def shutdown_outcome(self, shutdown_type: ShutdownType = ShutdownType.UNSPECIFIED) -> ExitOutcome:
        return await self.controller.shutdown(self.process, shutdown_type)

    def heap_profile(self) -> HeapProfile:
        """
        Reads the massif profile of a finished, profiled run. The profile file
        is deleted after a successful read.

        Raises:
            HeapProfileError: If profiling was not enabled, or the profile is
                missing or malformed.
        """
        path = self.process.profile_path
        if path is None:
            raise HeapProfileError("heap profiling not enabled for this run")
        profile = read_massif(path)
        path.unlink(missing_ok=True)
        log.debug("Read heap profile", path=str(path), peak_bytes=profile.peak_usage())
        return profile


# 🔼⚙️
