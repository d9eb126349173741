# tests/conftest.py

import os
import stat
import sys
from pathlib import Path

import pytest

from shuffleharness.config import MPDOptions

FAKE_MPD_SCRIPT = Path(__file__).parent / "fakes" / "fake_mpd.py"


@pytest.fixture
def fake_mpd(tmp_path: Path) -> Path:
    """An executable that behaves like `mpd --no-daemon --stderr CONF`."""
    wrapper = tmp_path / "mpd"
    wrapper.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{FAKE_MPD_SCRIPT}" "$@"\n')
    wrapper.chmod(wrapper.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return wrapper


@pytest.fixture
def music_library(tmp_path: Path) -> Path:
    root = tmp_path / "music"
    (root / "album").mkdir(parents=True)
    for name in ("album/one.mp3", "album/two.mp3", "three.flac"):
        (root / name).write_bytes(b"\0")
    return root


@pytest.fixture
def fake_mpd_options(fake_mpd: Path, music_library: Path) -> MPDOptions:
    return MPDOptions(
        library_root=music_library,
        bin_path=str(fake_mpd),
        connect_backoff=0.05,
        connect_timeout=10.0,
        update_db_backoff=0.02,
        update_db_timeout=5.0,
        shutdown_timeout=5.0,
    )


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in [n for n in os.environ if n.startswith("FAKE_MPD_")]:
        monkeypatch.delenv(name)
