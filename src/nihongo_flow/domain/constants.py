"""Centralized constants for nihongo-flow.

Scheduler thresholds, file names and defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Scheduler ----------
MASTERED_INTERVAL = 999.0
EASY_FIRST_INTERVAL = 1.0
EASY_MULTIPLIER = 2.5
HARD_FIRST_INTERVAL = 0.5
HARD_MULTIPLIER = 1.2

# Stage boundaries (strict ">" comparisons)
LEARNING_MAX_INTERVAL = 2.0
MASTERY_INTERVAL = 21.0

# ---------- Sessions ----------
DEFAULT_SESSION_LIMIT = 20

# ---------- Storage ----------
FILE_NAMES = {
    "vocab": "vocab.csv",
    "kanji": "kanji.csv",
    "grammar": "grammar.csv",
    "stats": "stats.csv",
}
EVENT_LOG_HEADER = ["date", "category", "itemId", "result"]

# ---------- Dashboard ----------
ACTIVITY_WINDOW_DAYS = 364
JLPT_LEVELS = ["N5", "N4", "N3", "N2", "N1"]
