# src/shuffleharness/server/instance.py

"""
Starts and observes a throwaway MPD instance.

Each MPDServer owns a private workspace (config, database, state, socket),
waits until MPD accepts connections and has finished its initial database
scan, and exposes the player state tests want to assert on.
"""

from enum import Enum
from typing import Any

import structlog
from mpd import MPDError
from mpd.asyncio import MPDClient

from shuffleharness.config.models import MPDOptions
from shuffleharness.config.render import build_mpd_config
from shuffleharness.exceptions import TransportError
from shuffleharness.protocols import Address
from shuffleharness.runtime.context import RunContext
from shuffleharness.runtime.instance import ProcessInstance
from shuffleharness.runtime.readiness import wait_indexed, wait_ready
from shuffleharness.runtime.shutdown import ShutdownController
from shuffleharness.runtime.spawner import spawn
from shuffleharness.state import ExitOutcome, ShutdownType
from shuffleharness.telemetry import StructLogger
from shuffleharness.workspace import Workspace

log: StructLogger = structlog.get_logger("server.instance")

WORKSPACE_PREFIX = "mpd-harness"
CONFIG_PREFIX = "generated-conf"


class PlayState(Enum):
    UNKNOWN = "unknown"
    PLAY = "play"
    PAUSE = "pause"
    STOP = "stop"


async def connect_client(address: Address) -> MPDClient:
    """Dials MPD at `address` (a UNIX socket path, or host and port)."""
    client = MPDClient()
    if address.port:
        await client.connect(address.host, int(address.port))
    else:
        await client.connect(address.host)
    return client


class MPDServer:
    """
    A running MPD instance. Construct it with `await MPDServer.start(...)`.

    Query accessors never raise on transport failures; the failure is appended
    to `errors` and a neutral value is returned. Check `is_ok()` at teardown.
    """

    def __init__(
        self,
        options: MPDOptions,
        workspace: Workspace,
        process: ProcessInstance,
        client: MPDClient,
        controller: ShutdownController,
    ):
        self.options = options
        self.workspace = workspace
        self.process = process
        self.client = client
        self.controller = controller
        self._outcome: ExitOutcome | None = None
        self._log = log.bind(pid=process.pid, address=str(process.address))

    @classmethod
    async def start(
        cls,
        ctx: RunContext,
        options: MPDOptions,
        controller: ShutdownController | None = None,
    ) -> "MPDServer":
        """
        Creates the workspace, writes the config, starts MPD and waits for it
        to become usable.

        Raises:
            SpawnError: If MPD could not be started.
            ReadinessTimeoutError: If MPD did not accept a connection, or did
                not finish updating its database, in time.
            PermanentProbeError: If MPD stopped answering during the update wait.
        """
        controller = controller or ShutdownController(timeout=options.shutdown_timeout)
        workspace = Workspace.create(prefix=WORKSPACE_PREFIX)
        process: ProcessInstance | None = None
        client: MPDClient | None = None
        try:
            conf_text, address = build_mpd_config(options, workspace.root)
            conf_path = workspace.write(CONFIG_PREFIX, conf_text)
            log.debug("Wrote MPD configuration", path=str(conf_path), emoji_key="path")

            process = await spawn(ctx, options.bin_path, ["--no-daemon", "--stderr", str(conf_path)])
            process.address = address

            async def dial() -> bool:
                nonlocal client
                client = await connect_client(address)
                return True

            await wait_ready(
                dial,
                backoff_interval=options.connect_backoff,
                max_wait=options.connect_timeout,
                what=f"connection to mpd at {address}",
                ctx=process.context,
            )

            async def updating_db() -> bool:
                status = await client.status()
                return status.get("updating_db") is not None and status.get("updating_db") != "0"

            await wait_indexed(
                updating_db,
                backoff_interval=options.update_db_backoff,
                max_wait=options.update_db_timeout,
                what="mpd database update",
                ctx=process.context,
            )
        except BaseException as e:
            # Cancellation included: nothing started here may outlive start().
            log.debug("MPD startup failed, cleaning up", error=type(e).__name__)
            try:
                if client is not None:
                    client.disconnect()
                if process is not None:
                    await controller.shutdown(process, ShutdownType.HARD)
                    log.debug("MPD output at failed startup", stderr=process.stderr.decode(errors="replace"))
            finally:
                workspace.cleanup()
            raise

        server = cls(options, workspace, process, client, controller)
        server._log.info("MPD is ready", version=getattr(client, "mpd_version", None), emoji_key="ready")
        return server

    # --- Addressing and captured output ---
    def address(self) -> Address:
        return self.process.address

    @property
    def stdout(self) -> bytes:
        return self.process.stdout

    @property
    def stderr(self) -> bytes:
        return self.process.stderr

    @property
    def errors(self) -> list[Exception]:
        return self.process.errors

    def is_ok(self) -> bool:
        """True if no errors have occurred talking to this instance."""
        return self.process.is_ok()

    # --- Accessors ---
    async def _call(self, command: str, *args: Any, default: Any = None) -> Any:
        """Runs an MPD command, recording (not raising) transport failures."""
        try:
            return await getattr(self.client, command)(*args)
        except (MPDError, OSError) as e:
            self.process.record_error(TransportError(f"mpd command '{command}' failed", e))
            return default

    async def play(self) -> None:
        """Resumes playback of the current song."""
        await self._call("pause", 0)

    async def pause(self) -> None:
        await self._call("pause", 1)

    async def next(self) -> None:
        """Skips the current song."""
        await self._call("next")

    async def prev(self) -> None:
        await self._call("previous")

    async def password(self, secret: str) -> None:
        """Authenticates this connection with `secret`."""
        await self._call("password", secret)

    async def db(self) -> list[str]:
        """All URIs in the database."""
        entries = await self._call("list", "file", default=[])
        return [e["file"] if isinstance(e, dict) else str(e) for e in entries]

    async def queue(self) -> list[str]:
        """URIs of the songs currently in the queue, in order."""
        songs = await self._call("playlistinfo", default=[])
        return [song["file"] for song in songs]

    async def queue_pos(self) -> int:
        """Queue position of the current song, or -1."""
        status = await self._call("status")
        if status is None:
            return -1
        try:
            return int(status["song"])
        except (KeyError, ValueError) as e:
            self.process.record_error(TransportError("mpd status has no usable 'song' field", e))
            return -1

    async def play_state(self) -> PlayState:
        status = await self._call("status")
        if status is None:
            return PlayState.UNKNOWN
        try:
            return PlayState(status.get("state"))
        except ValueError:
            return PlayState.UNKNOWN

    # --- Teardown ---
    async def shutdown(self) -> None:
        """
        Stops MPD and removes its workspace.

        Safe to call more than once: later calls re-raise the first result
        without touching the process or the workspace again.

        Raises:
            ShutdownTimeoutError, ProcessExitError: If MPD did not go down cleanly.
        """
        if self._outcome is None:
            self.client.disconnect()
            try:
                self._outcome = await self.controller.shutdown(self.process, ShutdownType.HARD)
            finally:
                self.workspace.cleanup()
            self._log.debug("MPD shut down", outcome=self._outcome.kind.name)
        self._outcome.raise_for_failure()

    async def __aenter__(self) -> "MPDServer":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.shutdown()


# 🔼⚙️
