"""
Deck store: Application layer owner of persisted decks.

Keeps one Deck per (file, game) key, seeds it from the move tree, and
applies grades. Every mutation swaps in a new Deck value, so a reader
holding the previous value never sees a half-applied update.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from openingdeck.domain.constants import SKIP_GRADE
from openingdeck.domain.errors import CardIndexError, ResetAborted
from openingdeck.domain.models import Card, Deck, DeckKey, LogEntry, Path, Side
from openingdeck.domain.ports import DeckRepository, MoveTree, SchedulingEngine

from .deck_builder import build_from_tree
from .review_scheduler import ReviewScheduler

logger = logging.getLogger(__name__)

GradeListener = Callable[[DeckKey, Deck, LogEntry], None]


class DeckStore:
    """
    Application service for deck lifecycle and grading.

    Follows Dependency Inversion: depends on the DeckRepository and
    SchedulingEngine abstractions, not concrete adapters.
    """

    def __init__(
        self,
        repository: DeckRepository,
        scheduler: ReviewScheduler,
        engine: SchedulingEngine | None = None,
    ):
        """
        Args:
            repository: Where decks are loaded from and saved to.
            scheduler: Applies grades to cards.
            engine: Supplies fresh schedules when seeding; the scheduler's if not provided.
        """
        self._repo = repository
        self._scheduler = scheduler
        self._engine = engine or scheduler.engine
        self._decks: dict[DeckKey, Deck] = {}
        self._listeners: list[GradeListener] = []
        # key -> (positions, tree, fen -> path)
        self._position_cache: dict[DeckKey, tuple[tuple[Card, ...], MoveTree, dict[str, Path]]] = {}

    @property
    def scheduler(self) -> ReviewScheduler:
        return self._scheduler

    def get(self, key: DeckKey) -> Deck:
        deck = self._decks.get(key)
        if deck is None:
            deck = self._repo.load(key)
            self._decks[key] = deck
        return deck

    def _commit(self, key: DeckKey, deck: Deck) -> Deck:
        # Cache only what the repository accepted
        self._repo.save(key, deck)
        self._decks[key] = deck
        return deck

    def seed_if_empty(
        self,
        key: DeckKey,
        tree: MoveTree,
        side: Side | str,
        start: Path = (),
        now: datetime | None = None,
    ) -> Deck:
        """
        Fill an empty deck from the tree. No-op when the deck already has cards
        or the tree yields none. Existing logs are kept.
        """
        deck = self.get(key)
        if not deck.is_empty:
            return deck

        cards = build_from_tree(tree, side, start, engine=self._engine, now=now)
        if not cards:
            logger.info(f"No practice positions in {key}; deck left empty")
            return deck

        logger.info(f"Seeded {key} with {len(cards)} positions")
        return self._commit(key, Deck(positions=tuple(cards), logs=deck.logs))

    def reset(
        self,
        key: DeckKey,
        tree: MoveTree,
        side: Side | str,
        start: Path = (),
        confirm: Callable[[], bool] | None = None,
        now: datetime | None = None,
    ) -> Deck:
        """
        Discard all cards and logs of a deck and rebuild it from the tree.

        Args:
            confirm: Asked before anything is discarded.

        Raises:
            ResetAborted: If confirmation is missing or declined.
        """
        if confirm is None or not confirm():
            raise ResetAborted(f"Reset of {key} was not confirmed")

        previous = self.get(key)
        cards = build_from_tree(tree, side, start, engine=self._engine, now=now)
        logger.info(
            f"Reset {key}: dropped {len(previous.positions)} positions and "
            f"{len(previous.logs)} logs, rebuilt {len(cards)} positions"
        )
        return self._commit(key, Deck(positions=tuple(cards), logs=()))

    def record_grade(
        self,
        key: DeckKey,
        index: int,
        grade: int,
        now: datetime | None = None,
    ) -> Deck:
        """
        Apply `grade` to the card at `index` and append its log entry.

        Raises:
            CardIndexError: If index does not address a card.
            InvalidGradeError: If grade is not 1-4.
        """
        deck = self.get(key)
        if not 0 <= index < len(deck.positions):
            raise CardIndexError(index, len(deck.positions))

        card = deck.positions[index]
        schedule, entry = self._scheduler.grade(card, grade, now or datetime.now(timezone.utc))

        positions = list(deck.positions)
        positions[index] = card.with_schedule(schedule)
        updated = self._commit(key, Deck(positions=tuple(positions), logs=deck.logs + (entry,)))

        logger.info(f"Recorded grade {entry.rating} for position {index} of {key}")
        for listener in list(self._listeners):
            listener(key, updated, entry)
        return updated

    def skip(self, key: DeckKey, index: int, now: datetime | None = None) -> Card | None:
        """Grade the card at `index` as skipped, then return the next due card."""
        now = now or datetime.now(timezone.utc)
        deck = self.record_grade(key, index, SKIP_GRADE, now)
        return self._scheduler.select_next(deck.positions, now=now)

    def index_of(self, key: DeckKey, fen: str) -> int | None:
        return self.get(key).index_of(fen)

    def position_index(self, key: DeckKey, tree: MoveTree) -> dict[str, Path]:
        """
        Map each card's fen to its path in `tree`.

        Cached until the deck's card list or the tree object changes. Fens
        not present in the tree map to the root path.
        """
        positions = self.get(key).positions
        cached = self._position_cache.get(key)
        if cached is not None and cached[0] is positions and cached[1] is tree:
            return cached[2]

        wanted = {card.fen for card in positions}
        index: dict[str, Path] = {}
        for path, node in tree.iter_positions():
            if node.fen in wanted and node.fen not in index:
                index[node.fen] = path
        for fen in wanted:
            index.setdefault(fen, ())

        self._position_cache[key] = (positions, tree, index)
        return index

    def subscribe(self, listener: GradeListener) -> Callable[[], None]:
        """
        Call `listener` once for every recorded grade.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
