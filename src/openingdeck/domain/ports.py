"""
Ports (interfaces) for the practice core.

These define the contract that collaborators must implement. Application
services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from datetime import datetime
from typing import TYPE_CHECKING

from .models import Deck, DeckKey, Grade, Outcome, Path, Schedule

if TYPE_CHECKING:
    from .tree import TreeNode


class MoveTree(ABC):
    """
    Port for a read-only move tree.

    Implementations:
        - GameTree: In-memory tree (built by hand or from PGN).
    """

    @abstractmethod
    def iter_positions(self) -> Iterator[tuple[Path, "TreeNode"]]:
        """
        Yield every node exactly once as `(path, node)`, pre-order.

        Siblings are visited in their stored order.
        """
        pass

    @abstractmethod
    def find_position_by_fen(self, fen: str) -> Path:
        """
        Path of the first node in traversal order showing `fen`.

        Returns the empty path (the root) if no node matches.
        """
        pass

    @abstractmethod
    def node_at(self, path: Path) -> "TreeNode":
        """Node addressed by `path`."""
        pass


class SchedulingEngine(ABC):
    """
    Port for a spaced-repetition algorithm.

    Implementations:
        - FsrsEngine: Free Spaced Repetition Scheduler via the `fsrs` package.
    """

    @abstractmethod
    def create_default(self, now: datetime) -> Schedule:
        """A fresh schedule: zero repetitions, due at `now`."""
        pass

    @abstractmethod
    def repeat(self, schedule: Schedule, now: datetime) -> dict[Grade, Outcome]:
        """
        Compute the outcome of every grade for a review at `now`.

        Returns:
            Mapping with an entry for each of the four grades.
        """
        pass


class DeckRepository(ABC):
    """
    Port for deck persistence.

    Implementations:
        - JsonDeckRepository: One JSON document per deck on disk.
        - InMemoryDeckRepository: Process-local dictionary.
    """

    @abstractmethod
    def load(self, key: DeckKey) -> Deck:
        """Stored deck for `key`, or an empty deck if none exists."""
        pass

    @abstractmethod
    def save(self, key: DeckKey, deck: Deck) -> None:
        pass

    @abstractmethod
    def keys(self) -> list[DeckKey]:
        """Identities of all stored decks."""
        pass
