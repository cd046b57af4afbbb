# src/picotest_explorer/telemetry/logger/processors.py

"""
Custom structlog processors.
"""

import logging
from typing import Any

from structlog.typing import EventDict, WrappedLogger

LOG_EMOJIS: dict[str | int, str] = {
    logging.DEBUG: "🐛",
    logging.INFO: "ℹ️",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
    "load": "📄",
    "run": "🏃",
    "fail": "🚫",
    "path": "📁",
    "success": "🎉",
    "general": "➡️",
}


def add_emoji_processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Prefixes the event message with an emoji chosen by `emoji_key` or log level."""
    emoji_key: Any = event_dict.get("emoji_key")
    if emoji_key is None:
        emoji_key = logging.getLevelName(event_dict.get("level", "info").upper())
    emoji = LOG_EMOJIS.get(emoji_key, LOG_EMOJIS["general"])
    event = event_dict.get("event")
    if isinstance(event, str):
        event_dict["event"] = f"{emoji} {event}"
    return event_dict


def remove_extra_keys_processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Drops helper keys used only by earlier processors."""
    event_dict.pop("emoji_key", None)
    return event_dict

# 🔼⚙️
