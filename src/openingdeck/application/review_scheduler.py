"""
Review scheduler: picks the next card to practice and applies grades.

This is a pure computation module with no I/O. Persisting the results of
a grade is the DeckStore's job.
"""

import logging
import random as _random
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Literal

from openingdeck.domain.constants import VALID_GRADES
from openingdeck.domain.errors import InvalidGradeError
from openingdeck.domain.models import Card, Grade, LogEntry, Schedule, Stats, to_utc
from openingdeck.domain.ports import SchedulingEngine

logger = logging.getLogger(__name__)

CardStatus = Literal["unseen", "due", "practiced"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def card_status(card: Card, now: datetime) -> CardStatus:
    """Classify a card the same way stats do."""
    if card.schedule.reps == 0:
        return "unseen"
    if card.schedule.due <= to_utc(now):
        return "due"
    return "practiced"


def validate_grade(grade: int) -> Grade:
    if isinstance(grade, bool) or grade not in VALID_GRADES:
        raise InvalidGradeError(grade)
    return Grade(grade)


class ReviewScheduler:
    """
    Selects cards for review and computes post-grade schedules.

    Depends on the SchedulingEngine abstraction; only `reps` and `due` of a
    schedule are ever inspected here.
    """

    def __init__(self, engine: SchedulingEngine, rng: _random.Random | None = None):
        """
        Args:
            engine: The spaced-repetition engine (port).
            rng: Random source for drill mode; a fresh Random if not provided.
        """
        self._engine = engine
        self._rng = rng or _random.Random()

    @property
    def engine(self) -> SchedulingEngine:
        return self._engine

    def select_next(
        self,
        cards: Sequence[Card],
        random: bool = False,
        now: datetime | None = None,
    ) -> Card | None:
        """
        Pick the card to review next.

        Deterministic mode returns the first card in list order that is due,
        not the one with the earliest due date. Random mode ignores due state.
        """
        if not cards:
            return None
        if random:
            return cards[self._rng.randrange(len(cards))]

        now = to_utc(now) if now else _utcnow()
        for card in cards:
            if card.schedule.due <= now:
                return card
        return None

    def grade(
        self,
        card: Card,
        grade: int,
        now: datetime | None = None,
    ) -> tuple[Schedule, LogEntry]:
        """
        Compute the card's next schedule for `grade` and the matching log entry.

        Raises:
            InvalidGradeError: If grade is not 1, 2, 3 or 4.
        """
        g = validate_grade(grade)
        now = now or _utcnow()

        outcomes = self._engine.repeat(card.schedule, now)
        outcome = outcomes[g]

        entry = LogEntry(
            fen=card.fen,
            due=outcome.schedule.due,
            rating=int(g),
            review=dict(outcome.review),
        )
        logger.debug(f"Graded {card.fen!r} as {g.name}; next due {outcome.schedule.due.isoformat()}")
        return outcome.schedule, entry

    def compute_stats(self, cards: Sequence[Card], now: datetime | None = None) -> Stats:
        """Count unseen, due and practiced cards in a single pass."""
        return compute_stats(cards, now)


def compute_stats(cards: Sequence[Card], now: datetime | None = None) -> Stats:
    # One timestamp for the whole pass
    now = to_utc(now) if now else _utcnow()
    stats = Stats(total=len(cards))

    for card in cards:
        status = card_status(card, now)
        if status == "unseen":
            stats.unseen += 1
            continue
        if status == "due":
            stats.due += 1
        else:
            stats.practiced += 1

        if stats.next_due is None or card.schedule.due < stats.next_due:
            stats.next_due = card.schedule.due

    return stats
