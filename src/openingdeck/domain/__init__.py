# Domain Package
from .errors import (
    CardIndexError,
    DeckFormatError,
    InvalidGradeError,
    OpeningDeckError,
    ResetAborted,
    TreeSourceError,
)
from .models import (
    Card,
    Deck,
    DeckKey,
    Grade,
    LogEntry,
    Outcome,
    Path,
    Schedule,
    Side,
    Stats,
    to_utc,
)
from .ports import DeckRepository, MoveTree, SchedulingEngine
from .tree import GameTree, TreeNode, is_prefix

__all__ = [
    "Card",
    "CardIndexError",
    "Deck",
    "DeckFormatError",
    "DeckKey",
    "DeckRepository",
    "GameTree",
    "Grade",
    "InvalidGradeError",
    "LogEntry",
    "MoveTree",
    "OpeningDeckError",
    "Outcome",
    "Path",
    "ResetAborted",
    "Schedule",
    "SchedulingEngine",
    "Side",
    "Stats",
    "TreeNode",
    "TreeSourceError",
    "is_prefix",
    "to_utc",
]
