"""Constants for the Habit Loop integration."""
from __future__ import annotations

from enum import StrEnum
from typing import Final

DOMAIN: Final = "habit_loop"

# ── Configuration keys ──────────────────────────────────────────────
CONF_STARTER_HABITS: Final = "starter_habits"
CONF_HISTORY_DAYS: Final = "history_days"

# ── Persisted schema ────────────────────────────────────────────────
SCHEMA_VERSION: Final = 3

# Raw keys inside the key-value store.  The legacy key only ever holds the
# history object and is mirrored on every save for older readers.
KEY_HABITS: Final = "habit-loop:habits"
KEY_HISTORY_LEGACY: Final = "habit-loop:history"


class SchemaVariant(StrEnum):
    """Which stored shape a payload was decoded from.

    Listed in decode priority order.
    """

    V1 = "v1"
    V3 = "v3"
    V2 = "v2"
    DEFAULT = "default"


# ── Home Assistant storage (.storage/habit_loop) ────────────────────
STORAGE_KEY: Final = DOMAIN
STORAGE_VERSION: Final = 1
STORAGE_SAVE_DELAY: Final = 1

# ── Events ──────────────────────────────────────────────────────────
EVENT_HABIT_LOOP_UPDATED: Final = f"{DOMAIN}.updated"

# ── Services ────────────────────────────────────────────────────────
SERVICE_ADD_HABIT: Final = "add_habit"
SERVICE_TOGGLE_HABIT: Final = "toggle_habit"
SERVICE_REMOVE_HABIT: Final = "remove_habit"
SERVICE_RENAME_HABIT: Final = "rename_habit"
SERVICE_ENSURE_TODAY: Final = "ensure_today"

# ── Attributes ──────────────────────────────────────────────────────
ATTR_HABIT_ID: Final = "habit_id"
ATTR_NAME: Final = "name"
ATTR_LAST_DATE: Final = "last_date"
ATTR_TOTAL: Final = "total"
ATTR_DONE: Final = "done"
ATTR_COMPLETION_RATE: Final = "completion_rate"
ATTR_CURRENT_STREAK: Final = "current_streak"
ATTR_BEST_STREAK: Final = "best_streak"

# ── Dates ───────────────────────────────────────────────────────────
# Indexed by date.weekday() (Monday == 0).
WEEKDAY_LABELS: Final = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
FALLBACK_YEAR: Final = 1970

# ── Defaults ────────────────────────────────────────────────────────
DEFAULT_HISTORY_DAYS: Final = 90
MAX_HISTORY_DAYS: Final = 3650
DEFAULT_STARTER_HABITS: Final = (
    "Morning stretch",
    "Drink 1L of water",
    "Read for 15 minutes",
)
