# Application Package
from .deck_builder import build_from_tree
from .deck_store import DeckStore
from .practice_session import PracticeSession, Prompt
from .review_scheduler import ReviewScheduler, card_status, compute_stats

__all__ = [
    "DeckStore",
    "PracticeSession",
    "Prompt",
    "ReviewScheduler",
    "build_from_tree",
    "card_status",
    "compute_stats",
]
