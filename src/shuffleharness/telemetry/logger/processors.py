# src/shuffleharness/telemetry/logger/processors.py

"""
Custom structlog processors.
"""

import logging
from typing import Any

from structlog.typing import EventDict, WrappedLogger

LEVEL_EMOJIS: dict[str, str] = {
    "debug": "🐛",
    "info": "ℹ️",
    "warning": "⚠️",
    "error": "❌",
    "critical": "💥",
}

# Events tagged with `emoji_key=` get these instead of the level emoji.
KEY_EMOJIS: dict[str, str] = {
    "spawn": "🚀",
    "ready": "✅",
    "wait": "⏱️",
    "kill": "💀",
    "exit": "🏁",
    "path": "📁",
    "fail": "🚫",
}

# Keys that only matter to the file/JSON renderers.
_CONSOLE_NOISE_KEYS = ("emoji_key",)


def add_emoji_processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Prefixes the event message with an emoji for its key or level."""
    key = event_dict.get("emoji_key")
    emoji = KEY_EMOJIS.get(key) if key else None
    if emoji is None:
        level = event_dict.get("level", method_name)
        emoji = LEVEL_EMOJIS.get(str(level).lower(), "➡️")
    event = event_dict.get("event")
    if isinstance(event, str):
        event_dict["event"] = f"{emoji} {event}"
    return event_dict


def remove_extra_keys_processor(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Drops bookkeeping keys that should not be rendered."""
    for key in _CONSOLE_NOISE_KEYS:
        event_dict.pop(key, None)
    return event_dict


def level_number(level_name: Any) -> int:
    value = logging.getLevelName(str(level_name).upper())
    return value if isinstance(value, int) else logging.INFO


# 🔼⚙️
