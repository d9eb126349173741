# tests/unit/test_heap_profile.py

"""Tests for the massif profile reader."""

from pathlib import Path

import pytest

from shuffleharness.client.heap_profile import parse_massif, read_massif
from shuffleharness.exceptions import HeapProfileError

MASSIF_OUTPUT = (Path(__file__).parents[1] / "fakes" / "massif.out").read_text()


class TestParseMassif:
    def test_header_and_snapshots(self):
        profile = parse_massif(MASSIF_OUTPUT.splitlines(keepends=True))

        assert profile.description == "--massif-out-file=/tmp/massif.x1y2z3"
        assert profile.command == "/usr/local/bin/ashuffle --only 3"
        assert profile.time_unit == "i"
        assert [s.index for s in profile.snapshots] == [0, 1, 2]
        assert profile.snapshots[1].tree == "peak"
        assert profile.snapshots[2].time == 2100

    def test_peak_usage_includes_extra_bytes(self):
        profile = parse_massif(MASSIF_OUTPUT.splitlines())
        assert profile.peak_usage() == 4096 + 64

    def test_no_snapshots(self):
        with pytest.raises(HeapProfileError, match="no snapshots"):
            parse_massif(["desc: (none)", "cmd: ashuffle", "time_unit: i"])

    def test_malformed_number(self):
        lines = ["snapshot=0", "mem_heap_B=lots"]
        with pytest.raises(HeapProfileError, match="integer"):
            parse_massif(lines)

    def test_field_outside_snapshot(self):
        with pytest.raises(HeapProfileError, match="outside a snapshot"):
            parse_massif(["desc: x", "mem_heap_B=1"])


class TestReadMassif:
    def test_reads_file(self, tmp_path: Path):
        path = tmp_path / "massif.out"
        path.write_text(MASSIF_OUTPUT)
        assert read_massif(path).peak_usage() == 4160

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(HeapProfileError, match="Cannot read"):
            read_massif(tmp_path / "missing")
