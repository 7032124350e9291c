"""
Domain models for opening practice decks.

These are pure data structures with no I/O or external dependencies.
Every aggregate is immutable: updates build a new value instead of
mutating shared structure.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any

Path = tuple[int, ...]


def to_utc(moment: datetime) -> datetime:
    """Normalise to aware UTC; naive values are taken as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


class Side(str, Enum):
    """The side whose moves are quizzed."""

    WHITE = "white"
    BLACK = "black"

    def to_move_at(self, half_moves: int) -> bool:
        """True if this side is to move after `half_moves` plies."""
        if self is Side.WHITE:
            return half_moves % 2 == 0
        return half_moves % 2 == 1


class Grade(IntEnum):
    """Self-assessed recall quality (1=Again, 2=Hard/skip, 3=Good, 4=Easy/success)."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4


@dataclass(frozen=True)
class Schedule:
    """
    Scheduling state of a card.

    Only `due` and `reps` are read outside the scheduling engine.

    Attributes:
        due: Timezone-aware timestamp after which the card may be reviewed.
        reps: Number of recorded reviews (0 = unseen).
        memory: Opaque engine payload (stability, difficulty, state, ...).
    """

    due: datetime
    reps: int = 0
    memory: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class Card:
    """One practice position: show `fen`, expect `answer`."""

    fen: str
    answer: str
    schedule: Schedule

    def with_schedule(self, schedule: Schedule) -> "Card":
        return replace(self, schedule=schedule)


@dataclass(frozen=True)
class LogEntry:
    """
    Append-only record of one grading event.

    Attributes:
        fen: Position that was graded.
        due: Due timestamp produced by the grade.
        rating: Grade value 1-4.
        review: Opaque engine fields carried through persistence.
    """

    fen: str
    due: datetime
    rating: int
    review: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class Outcome:
    """The engine's result for one grade: next schedule plus review record."""

    schedule: Schedule
    review: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Deck:
    """
    Persisted aggregate for one (file, game) identity.

    `positions` keeps first-encountered build order; `logs` is chronological.
    """

    positions: tuple[Card, ...] = ()
    logs: tuple[LogEntry, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.positions

    def index_of(self, fen: str) -> int | None:
        for i, card in enumerate(self.positions):
            if card.fen == fen:
                return i
        return None


@dataclass(frozen=True)
class DeckKey:
    """Deck identity: source file path (may be empty) and game number."""

    file: str = ""
    game: int = 0

    def __str__(self) -> str:
        return f"{self.file or '<unsaved>'}#{self.game}"


@dataclass
class Stats:
    """Derived deck counters; recomputed on demand, never persisted."""

    unseen: int = 0
    due: int = 0
    practiced: int = 0
    total: int = 0
    next_due: datetime | None = None

    @property
    def has_work(self) -> bool:
        """False when review actions should be disabled."""
        return self.due > 0 or self.unseen > 0
