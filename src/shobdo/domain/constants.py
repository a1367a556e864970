"""Centralized constants for the shobdo scheduler.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- SM-2 ----------
INITIAL_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
PASSING_QUALITY = 3  # quality below this resets repetitions
MAX_QUALITY = 5
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 3  # classic SM-2 uses 6
FAILED_INTERVAL_DAYS = 1

# ---------- Difficulty buttons ----------
DIFFICULTY_QUALITY = {
    "hard": 1,
    "medium": 3,
    "easy": 5,
}
DEFAULT_QUALITY = 3
DEFAULT_DIFFICULTY = "medium"

# ---------- Progress ----------
PROGRESS_WINDOW_DAYS = 7
RECENT_WORDS_LIMIT = 5

# ---------- HTTP ----------
REQUEST_TIMEOUT = 30.0
