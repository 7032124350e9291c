"""Exceptions raised by openingdeck.

Empty builds, missing due cards and empty stats are normal results, not
errors. Only contract violations and malformed persisted data raise.
"""


class OpeningDeckError(Exception):
    """Base class for all openingdeck errors."""


class InvalidGradeError(OpeningDeckError, ValueError):
    """A grade outside 1-4 was supplied."""

    def __init__(self, grade: object):
        super().__init__(f"Grade must be one of 1, 2, 3, 4 (got {grade!r})")
        self.grade = grade


class CardIndexError(OpeningDeckError, IndexError):
    """A card index does not address a card in the deck."""

    def __init__(self, index: int, size: int):
        super().__init__(f"Card index {index} out of range for deck of {size} cards")
        self.index = index
        self.size = size


class ResetAborted(OpeningDeckError):
    """The user declined the confirmation for a destructive reset."""


class DeckFormatError(OpeningDeckError, ValueError):
    """Persisted deck data could not be decoded."""


class TreeSourceError(OpeningDeckError, ValueError):
    """A move tree could not be read from its source."""
