# src/shuffleharness/client/heap_profile.py

"""
Reader for valgrind massif output files.

Only the per-snapshot totals are kept; the allocation trees are skipped.
"""

from collections.abc import Iterable
from pathlib import Path

from attrs import define, field

from shuffleharness.exceptions import HeapProfileError

_SNAPSHOT_INTS = {
    "time": "time",
    "mem_heap_B": "heap_bytes",
    "mem_heap_extra_B": "heap_extra_bytes",
    "mem_stacks_B": "stack_bytes",
}


@define(frozen=True, slots=True)
class Snapshot:
    index: int = field()
    time: int = field(default=0)
    heap_bytes: int = field(default=0)
    heap_extra_bytes: int = field(default=0)
    stack_bytes: int = field(default=0)
    tree: str = field(default="empty")

    @property
    def total_heap_bytes(self) -> int:
        """Heap in use including allocator bookkeeping."""
        return self.heap_bytes + self.heap_extra_bytes


@define(frozen=True, slots=True)
class HeapProfile:
    description: str = field(default="")
    command: str = field(default="")
    time_unit: str = field(default="i")
    snapshots: tuple[Snapshot, ...] = field(factory=tuple, converter=tuple)

    def peak_usage(self) -> int:
        """Largest heap + heap-extra total over all snapshots, in bytes."""
        return max((s.total_heap_bytes for s in self.snapshots), default=0)


def parse_massif(lines: Iterable[str]) -> HeapProfile:
    """
    Parses massif output.

    Raises:
        HeapProfileError: If a snapshot field is malformed or the file has no
            snapshots.
    """
    header: dict[str, str] = {}
    snapshots: list[Snapshot] = []
    current: dict[str, object] | None = None

    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip("\n")
        # Comment separators and heap tree nodes ("n2: ...", indented children).
        if not line or line.startswith("#") or line[0] in " n":
            continue
        key, sep, value = line.partition("=")
        # Header values ("desc: --massif-out-file=...") may contain '='.
        if not sep or ":" in key:
            key, sep, value = line.partition(": ")
            if sep and current is None:
                header[key] = value
                continue
            raise HeapProfileError(f"Unrecognized massif line {lineno}: {line!r}")

        if key == "snapshot":
            if current is not None:
                snapshots.append(Snapshot(**current))
            current = {"index": _int(value, lineno)}
        elif current is None:
            raise HeapProfileError(f"Massif field '{key}' outside a snapshot (line {lineno})")
        elif key in _SNAPSHOT_INTS:
            current[_SNAPSHOT_INTS[key]] = _int(value, lineno)
        elif key == "heap_tree":
            current["tree"] = value

    if current is not None:
        snapshots.append(Snapshot(**current))
    if not snapshots:
        raise HeapProfileError("Massif output contains no snapshots")

    return HeapProfile(
        description=header.get("desc", ""),
        command=header.get("cmd", ""),
        time_unit=header.get("time_unit", "i"),
        snapshots=snapshots,
    )


def read_massif(path: Path) -> HeapProfile:
    try:
        with Path(path).open(encoding="utf-8", errors="replace") as f:
            return parse_massif(f)
    except OSError as e:
        raise HeapProfileError(f"Cannot read heap profile '{path}'", e) from e


def _int(value: str, lineno: int) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise HeapProfileError(f"Expected an integer on massif line {lineno}, got {value!r}", e) from e


# 🔼⚙️
