"""Reward and observation policy constants."""

from __future__ import annotations

# Category whose numeric value drives mode transitions unless the challenge type overrides it
DEFAULT_PRIMARY_CATEGORY = "cigarette_count"

# Built-in observation categories; challenge types may override or extend them
DEFAULT_OBSERVATION_CATEGORIES: list[dict] = [
    {"key": "cigarette_count", "label": "Daily cigarettes", "input_type": "numeric", "unit": "db", "min": 0},
    {"key": "craving_level", "label": "Craving level", "input_type": "scale", "min": 1, "max": 10},
    {"key": "weight", "label": "Weight", "input_type": "numeric", "unit": "kg", "min": 0},
    {"key": "mood", "label": "Mood", "input_type": "scale", "min": 1, "max": 5},
    {"key": "energy", "label": "Energy", "input_type": "scale", "min": 1, "max": 5},
    {"key": "sleep", "label": "Sleep quality", "input_type": "scale", "min": 1, "max": 5},
    {"key": "note", "label": "Note", "input_type": "text"},
]

# Idempotency key prefixes stored in point_entries.idempotency_key
MILESTONE_KEY_PREFIX = "milestone"
EVENT_KEY_PREFIX = "event"
DAILY_KEY_PREFIX = "daily"
ONCE_KEY_PREFIX = "once"
UPLOAD_KEY_PREFIX = "upload"

MAX_VALUE_LENGTH = 255
