"""
Deck builder for opening practice.

Builds the initial card set by:
1. Walking the move tree in pre-order
2. Keeping branch points where `side` is to move and a reply exists
3. Skipping the mastered prefix and transposed duplicates
"""

import logging
from datetime import datetime, timezone

from openingdeck.domain.models import Card, Path, Schedule, Side
from openingdeck.domain.ports import MoveTree, SchedulingEngine
from openingdeck.domain.tree import is_prefix

logger = logging.getLogger(__name__)


def build_from_tree(
    tree: MoveTree,
    side: Side | str,
    start: Path = (),
    engine: SchedulingEngine | None = None,
    now: datetime | None = None,
) -> list[Card]:
    """
    Build practice cards from every eligible branch point of `tree`.

    Args:
        tree: The move tree to scan
        side: Side whose moves are quizzed
        start: Mastered prefix; nodes whose path is a prefix of it are skipped
        engine: Supplies the fresh schedule; a bare unseen schedule if None
        now: Creation timestamp (default: current UTC time)

    Returns:
        Cards in traversal encounter order, possibly empty
    """
    side = Side(side)
    start = tuple(start)
    now = now or datetime.now(timezone.utc)

    cards: list[Card] = []
    seen: set[str] = set()

    for path, node in tree.iter_positions():
        if (
            not node.children
            or is_prefix(path, start)
            or not node.children[0].san
            or node.fen in seen
        ):
            continue
        if not side.to_move_at(node.half_moves):
            continue

        schedule = engine.create_default(now) if engine else Schedule(due=now)
        cards.append(Card(fen=node.fen, answer=node.children[0].san, schedule=schedule))
        seen.add(node.fen)

    logger.debug(f"Built {len(cards)} cards for {side.value} (start={list(start)})")
    return cards
