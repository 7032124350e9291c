"""Centralized constants for openingdeck.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Grades ----------
GRADE_AGAIN = 1
GRADE_HARD = 2
GRADE_GOOD = 3
GRADE_EASY = 4
VALID_GRADES = (GRADE_AGAIN, GRADE_HARD, GRADE_GOOD, GRADE_EASY)

# Grade recorded when the user skips a position without answering.
SKIP_GRADE = GRADE_HARD
# Grade that triggers auto-advance to the next due card.
ADVANCE_GRADE = GRADE_EASY

# ---------- FSRS ----------
DEFAULT_DESIRED_RETENTION = 0.9
DEFAULT_MAXIMUM_INTERVAL = 36500  # days
DEFAULT_ENABLE_FUZZ = True

# ---------- Trees ----------
STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

# ---------- Persistence ----------
DECK_INDEX_FILE = "index.json"
