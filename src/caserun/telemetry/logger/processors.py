# src/caserun/telemetry/logger/processors.py

"""
Custom structlog processors.
"""

import logging
from typing import Any

from structlog.typing import EventDict

LOG_EMOJIS = {
    logging.DEBUG: "🐛",
    logging.INFO: "ℹ️",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
}

# Keys that only matter to stdlib integration and clutter console output.
EXTRA_KEYS = ("_record", "_from_structlog")


def add_emoji_processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Prefixes the event with an emoji for its level."""
    level = logging.getLevelNamesMapping().get(str(event_dict.get("level", "")).upper())
    emoji = LOG_EMOJIS.get(level) if level is not None else None
    event = event_dict.get("event")
    if emoji and isinstance(event, str):
        event_dict["event"] = f"{emoji} {event}"
    return event_dict


def remove_extra_keys_processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    for key in EXTRA_KEYS:
        event_dict.pop(key, None)
    return event_dict


# 🔼⚙️
