"""Centralized constants for the scheduler.

Every layer imports SM-2 constants and level tags from here.
"""

# ---------- SM-2 ----------
DEFAULT_EASE = 2.5
MIN_EASE = 1.3
FRICTION_PENALTY = 0.3
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6
SECOND_INTERVAL_FRICTION = 3
LAPSE_INTERVAL = 1
PASSING_QUALITY = 3
MIN_QUALITY = 1
MAX_QUALITY = 5

# ---------- Friction ----------
LOOKUP_FRICTION_THRESHOLD = 2  # friction applies when lookups exceed this

# ---------- Ratings ----------
RATING_TO_QUALITY = {
    "again": 1,
    "hard": 2,
    "good": 4,
    "easy": 5,
}

# ---------- Levels ----------
HSK_LEVELS = ["1", "2", "3", "4", "5", "6", "7-9"]
ADVANCED_LEVEL = "7-9"
DEFAULT_LEVEL = "1"
