"""
Conversion between Deck values and their persisted JSON shape.

    {"positions": [{"fen", "answer", "schedule": {"due", "reps", ...}}],
     "logs": [{"fen", "due", "rating", ...}]}

Engine fields beyond the named ones are flattened next to them and pass
through untouched. Timestamps are ISO-8601 strings.
"""

from datetime import datetime
from typing import Any

from openingdeck.domain.errors import DeckFormatError
from openingdeck.domain.models import Card, Deck, LogEntry, Schedule, to_utc


def _dump_time(moment: datetime) -> str:
    return moment.isoformat()


def _load_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        moment = value
    else:
        # Older writers used a trailing "Z"
        moment = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return to_utc(moment)


def schedule_to_dict(schedule: Schedule) -> dict[str, Any]:
    return {**schedule.memory, "due": _dump_time(schedule.due), "reps": schedule.reps}


def schedule_from_dict(data: dict[str, Any]) -> Schedule:
    memory = {k: v for k, v in data.items() if k not in ("due", "reps")}
    return Schedule(due=_load_time(data["due"]), reps=int(data.get("reps", 0)), memory=memory)


def card_to_dict(card: Card) -> dict[str, Any]:
    return {"fen": card.fen, "answer": card.answer, "schedule": schedule_to_dict(card.schedule)}


def card_from_dict(data: dict[str, Any]) -> Card:
    # "card" is the key used by earlier deck files
    schedule = data.get("schedule", data.get("card"))
    if not isinstance(schedule, dict):
        raise KeyError("schedule")
    return Card(fen=data["fen"], answer=data["answer"], schedule=schedule_from_dict(schedule))


def log_to_dict(entry: LogEntry) -> dict[str, Any]:
    return {**entry.review, "fen": entry.fen, "due": _dump_time(entry.due), "rating": entry.rating}


def log_from_dict(data: dict[str, Any]) -> LogEntry:
    review = {k: v for k, v in data.items() if k not in ("fen", "due", "rating")}
    return LogEntry(
        fen=data["fen"],
        due=_load_time(data["due"]),
        rating=int(data["rating"]),
        review=review,
    )


def deck_to_dict(deck: Deck) -> dict[str, Any]:
    return {
        "positions": [card_to_dict(c) for c in deck.positions],
        "logs": [log_to_dict(e) for e in deck.logs],
    }


def deck_from_dict(data: dict[str, Any]) -> Deck:
    """
    Decode a persisted deck.

    Raises:
        DeckFormatError: If a required field is missing or malformed.
    """
    if not isinstance(data, dict):
        raise DeckFormatError(f"Deck must be an object, got {type(data).__name__}")
    try:
        positions = tuple(card_from_dict(c) for c in data.get("positions", []))
        logs = tuple(log_from_dict(e) for e in data.get("logs", []))
    except (KeyError, TypeError, ValueError) as e:
        raise DeckFormatError(f"Malformed deck data: {e!r}") from e
    return Deck(positions=positions, logs=logs)
