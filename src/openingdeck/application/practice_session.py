"""
Practice session: drives one review context over a deck.

Surfaces the next due position, checks answers, and advances on its own
after a fully correct attempt.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from openingdeck.domain.constants import ADVANCE_GRADE, GRADE_AGAIN
from openingdeck.domain.models import Card, Deck, DeckKey, LogEntry, Path, Side, Stats
from openingdeck.domain.ports import MoveTree

from .deck_store import DeckStore

logger = logging.getLogger(__name__)


def move_label(half_moves: int) -> str:
    """Move number as written before a move, e.g. "3." or "3..."."""
    number = half_moves // 2 + 1
    return f"{number}." if half_moves % 2 == 0 else f"{number}..."


@dataclass(frozen=True)
class Prompt:
    """A card surfaced for review, located in the move tree."""

    card: Card
    index: int
    path: Path
    half_moves: int

    @property
    def move_label(self) -> str:
        return move_label(self.half_moves)


class PracticeSession:
    """
    The single active reviewer of one deck.

    Every grade of rating 4 recorded for this deck triggers exactly one
    advance to the next due card.
    """

    def __init__(
        self,
        store: DeckStore,
        key: DeckKey,
        tree: MoveTree,
        side: Side | str = Side.WHITE,
        start: Path = (),
        random: bool = False,
    ):
        self.store = store
        self.key = key
        self.tree = tree
        self.side = Side(side)
        self.start = tuple(start)
        self.random = random
        self.current: Prompt | None = None
        self._now: datetime | None = None
        self._unsubscribe = store.subscribe(self._on_grade)

    @property
    def deck(self) -> Deck:
        return self.store.get(self.key)

    def start_session(self, now: datetime | None = None) -> Deck:
        """Seed the deck if it has no cards yet."""
        return self.store.seed_if_empty(self.key, self.tree, self.side, self.start, now=now)

    def close(self) -> None:
        self._unsubscribe()

    def stats(self, now: datetime | None = None) -> Stats:
        return self.store.scheduler.compute_stats(self.deck.positions, now)

    def next(self, now: datetime | None = None) -> Prompt | None:
        """Select the next card and make it current. None when nothing is due."""
        positions = self.deck.positions
        card = self.store.scheduler.select_next(positions, random=self.random, now=now)
        if card is None:
            self.current = None
            return None

        path = self.store.position_index(self.key, self.tree).get(card.fen, ())
        node = self.tree.node_at(path)
        self.current = Prompt(
            card=card,
            index=positions.index(card),
            path=path,
            half_moves=node.half_moves,
        )
        logger.debug(f"Next position {self.current.move_label} at {list(path)}")
        return self.current

    def reveal(self) -> str | None:
        """The expected move for the current card; grading is left to the caller."""
        return self.current.card.answer if self.current else None

    def grade(self, grade: int, now: datetime | None = None) -> Deck:
        """Record an explicit self-assessment for the current card."""
        index = self._current_index()
        self._now = now or datetime.now(timezone.utc)
        try:
            return self.store.record_grade(self.key, index, grade, self._now)
        finally:
            self._now = None

    def answer(self, move: str, now: datetime | None = None) -> bool:
        """
        Check `move` against the current card.

        A correct move is graded 4 (and advances); a wrong one is graded 1.
        """
        expected = self.reveal()
        correct = expected is not None and move.strip() == expected
        self.grade(ADVANCE_GRADE if correct else GRADE_AGAIN, now)
        return correct

    def skip(self, now: datetime | None = None) -> Prompt | None:
        """Grade the current card as skipped and move to the next due card."""
        index = self._current_index()
        now = now or datetime.now(timezone.utc)
        self.store.skip(self.key, index, now)
        return self.next(now)

    def _current_index(self) -> int:
        if self.current is None:
            raise LookupError("No current position; call next() first")
        # The card list may have been replaced since the prompt was surfaced
        index = self.store.index_of(self.key, self.current.card.fen)
        if index is None:
            raise LookupError(f"Position {self.current.card.fen!r} is no longer in the deck")
        return index

    def _on_grade(self, key: DeckKey, deck: Deck, entry: LogEntry) -> None:
        if key != self.key or entry.rating != ADVANCE_GRADE:
            return
        self.next(self._now)
