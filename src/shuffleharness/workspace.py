# src/shuffleharness/workspace.py

"""
Isolated temporary directories backing one harness instance's private state.
"""

import os
import shutil
import tempfile
from pathlib import Path

import structlog

from shuffleharness.exceptions import WorkspaceError
from shuffleharness.telemetry import StructLogger

log: StructLogger = structlog.get_logger("workspace")


class Workspace:
    """
    A directory owned by one harness instance.

    The directory is removed exactly once, by cleanup(). A second cleanup()
    raises WorkspaceError instead of silently succeeding.
    """

    def __init__(self, root: Path, prev_dir: Path | None = None):
        self.root = root
        self._prev_dir = prev_dir
        self._cleaned = False

    @classmethod
    def create(cls, prefix: str = "workspace-", chdir: bool = False) -> "Workspace":
        """
        Creates a fresh, uniquely named workspace.

        With chdir=True the current directory is moved into the workspace and
        moved back by cleanup(). Leave it off whenever several workspaces may
        be alive at once, the current directory is process-global.
        """
        try:
            root = Path(tempfile.mkdtemp(prefix=prefix)).resolve()
        except OSError as e:
            raise WorkspaceError("Failed to create workspace directory", e) from e

        prev_dir = None
        if chdir:
            try:
                prev_dir = Path.cwd()
                os.chdir(root)
            except OSError as e:
                shutil.rmtree(root, ignore_errors=True)
                raise WorkspaceError(f"Failed to enter workspace '{root}'", e) from e

        log.debug("Workspace created", root=str(root), chdir=chdir)
        return cls(root, prev_dir)

    @property
    def cleaned(self) -> bool:
        return self._cleaned

    def path(self, *segments: str | os.PathLike[str]) -> Path:
        """Joins the given segments under the workspace root."""
        return self.root.joinpath(*segments)

    def write(self, prefix: str, text: str) -> Path:
        """Writes text to a new, uniquely named file in the workspace root."""
        fd, name = tempfile.mkstemp(prefix=prefix, dir=self.root)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        return Path(name)

    def cleanup(self) -> None:
        """
        Restores the previous directory and removes the workspace tree.

        A removal that fails raises WorkspaceError and may be retried.
        """
        if self._cleaned:
            raise WorkspaceError(f"workspace already cleaned up: '{self.root}'")

        if self._prev_dir is not None:
            prev_dir, self._prev_dir = self._prev_dir, None
            try:
                os.chdir(prev_dir)
            except OSError as e:
                log.warning(
                    "Unable to move back to previous directory",
                    prev_dir=str(prev_dir),
                    error=str(e),
                )

        try:
            shutil.rmtree(self.root)
        except FileNotFoundError:
            log.debug("Workspace already gone from disk", root=str(self.root))
        except OSError as e:
            raise WorkspaceError(f"Failed to remove workspace '{self.root}'", e) from e
        self._cleaned = True
        log.debug("Workspace cleaned up", root=str(self.root))

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(self, *exc_info) -> None:
        if not self._cleaned:
            self.cleanup()

    def __repr__(self) -> str:
        return f"Workspace(root={str(self.root)!r}, cleaned={self._cleaned})"


# 🔼⚙️
