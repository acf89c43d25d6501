"""Centralized constants for flashdrill.

All scheduling numbers and storage keys live here so every layer
imports from a single source of truth.
"""

# ---------- Time ----------
MS_PER_MINUTE = 60 * 1000
MS_PER_DAY = 24 * 60 * MS_PER_MINUTE

# ---------- SM-2 ----------
INITIAL_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
EASE_BONUS_CORRECT = 0.1
EASE_PENALTY_INCORRECT = 0.2
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 3
RELEARN_DELAY_MS = 5 * MS_PER_MINUTE

# ---------- Mastery ----------
MASTERED_MIN_REPETITIONS = 5
MASTERED_MIN_EASE = 2.3

# ---------- Session Queue ----------
MIN_REQUEUE_OFFSET = 5
DEFAULT_MISS_DELAY = 5.0  # seconds

# ---------- Storage Keys ----------
STATE_KEY = "spaced_repetition_state"
CORRECT_ANSWERS_KEY = "correctAnswers"
LAST_SESSION_DATE_KEY = "lastSessionDate"
