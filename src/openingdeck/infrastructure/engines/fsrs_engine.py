"""
FSRS engine: Infrastructure adapter for the `fsrs` package.

Implements SchedulingEngine by reviewing a copy of the card once per
rating and translating the results back into domain schedules.
"""

import copy
import logging
from datetime import datetime

from fsrs import Card as FsrsCard
from fsrs import Rating, Scheduler

from openingdeck.domain.constants import (
    DEFAULT_DESIRED_RETENTION,
    DEFAULT_ENABLE_FUZZ,
    DEFAULT_MAXIMUM_INTERVAL,
)
from openingdeck.domain.errors import DeckFormatError
from openingdeck.domain.models import Grade, Outcome, Schedule, to_utc
from openingdeck.domain.ports import SchedulingEngine

logger = logging.getLogger(__name__)


class FsrsEngine(SchedulingEngine):
    """
    Free Spaced Repetition Scheduler backed by `fsrs.Scheduler`.

    The fsrs card (minus `due`) is kept in `Schedule.memory`; `reps` is
    counted here since fsrs does not track it.
    """

    def __init__(
        self,
        desired_retention: float = DEFAULT_DESIRED_RETENTION,
        maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL,
        enable_fuzz: bool = DEFAULT_ENABLE_FUZZ,
        scheduler: Scheduler | None = None,
    ):
        self._scheduler = scheduler or Scheduler(
            desired_retention=desired_retention,
            maximum_interval=maximum_interval,
            enable_fuzzing=enable_fuzz,
        )

    def create_default(self, now: datetime) -> Schedule:
        # The fsrs card is created lazily on the first review
        return Schedule(due=to_utc(now), reps=0)

    def repeat(self, schedule: Schedule, now: datetime) -> dict[Grade, Outcome]:
        now = to_utc(now)
        base = self._to_fsrs_card(schedule)

        outcomes: dict[Grade, Outcome] = {}
        for grade in Grade:
            card, review_log = self._scheduler.review_card(
                copy.deepcopy(base), Rating(int(grade)), review_datetime=now
            )
            memory = card.to_dict()
            memory.pop("due", None)
            review = review_log.to_dict()
            review.pop("rating", None)
            outcomes[grade] = Outcome(
                schedule=Schedule(due=to_utc(card.due), reps=schedule.reps + 1, memory=memory),
                review=review,
            )
        return outcomes

    def _to_fsrs_card(self, schedule: Schedule) -> FsrsCard:
        """
        Rebuild the fsrs card kept in `schedule.memory`.

        Raises:
            DeckFormatError: If the stored state cannot be read back.
        """
        memory = schedule.memory
        if not memory.get("card_id") or "state" not in memory:
            logger.debug("No fsrs state stored yet, starting a new card")
            return FsrsCard(due=to_utc(schedule.due))
        try:
            return FsrsCard.from_dict({**memory, "due": to_utc(schedule.due).isoformat()})
        except (KeyError, TypeError, ValueError) as e:
            raise DeckFormatError(f"Unreadable fsrs state {memory!r}: {e}") from e
