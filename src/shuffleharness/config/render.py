# src/shuffleharness/config/render.py

"""
Renders an mpd.conf for one MPD instance from its options.
"""

from pathlib import Path

from shuffleharness.config.models import MPDOptions
from shuffleharness.protocols import Address

SOCKET_NAME = "socket"


def _quote(value: str | Path) -> str:
    """Double-quotes a value using MPD's backslash escapes."""
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def _line(key: str, value: str | Path | int) -> str:
    return f"{key:<19} {_quote(str(value))}"


def build_mpd_config(options: MPDOptions, root: Path) -> tuple[str, Address]:
    """
    Builds the configuration text for `options`, with all private state
    (playlists, database, pid/state/sticker files and the default socket)
    rooted under `root`.

    Returns the configuration text and the address MPD will listen on.
    """
    root = Path(root)
    if options.bind_address:
        address = Address(options.bind_address, options.port)
    else:
        address = Address(str(root / SOCKET_NAME))

    lines = [
        _line("music_directory", options.library_root),
        _line("playlist_directory", root / "playlists"),
        _line("db_file", root / "database"),
        _line("pid_file", root / "pid"),
        _line("state_file", root / "state"),
        _line("sticker_file", root / "sticker.sql"),
        _line("bind_to_address", address.host),
    ]
    if address.port:
        lines.append(_line("port", address.port))
    if options.max_output_buffer_size:
        lines.append(_line("max_output_buffer_size", options.max_output_buffer_size // 1024))

    lines += [
        "audio_output {",
        '\ttype\t\t"null"',
        '\tname\t\t"null"',
        "}",
    ]

    if options.default_permissions:
        lines.append(_line("default_permissions", ",".join(options.default_permissions)))

    for password in options.passwords:
        grant = f"{password.password}@{','.join(password.permissions)}"
        lines.append(_line("password", grant))

    return "\n".join(lines) + "\n", address


# 🔼⚙️
