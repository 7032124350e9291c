"""Tests for deck serialization and the JSON repository."""

import json
from datetime import datetime, timezone

import pytest

from openingdeck.domain.errors import DeckFormatError
from openingdeck.domain.models import Card, Deck, DeckKey, LogEntry, Schedule
from openingdeck.infrastructure.persistence.json_repository import (
    InMemoryDeckRepository,
    JsonDeckRepository,
    deck_file_name,
)
from openingdeck.infrastructure.persistence.serialization import deck_from_dict, deck_to_dict

KEY = DeckKey(file="/games/ruy.pgn", game=2)


@pytest.fixture
def deck(now):
    memory = {"card_id": 17, "state": 2, "step": None, "stability": 3.2, "difficulty": 5.1}
    return Deck(
        positions=(
            Card(fen="f1", answer="e5", schedule=Schedule(due=now, reps=2, memory=memory)),
            Card(fen="f2", answer="Nc6", schedule=Schedule(due=now, reps=0)),
        ),
        logs=(
            LogEntry(
                fen="f1",
                due=now,
                rating=4,
                review={"card_id": 17, "review_datetime": "2024-03-01T11:00:00+00:00"},
            ),
        ),
    )


class TestSerialization:
    def test_persisted_shape(self, deck, now):
        data = deck_to_dict(deck)

        position = data["positions"][0]
        assert position["fen"] == "f1"
        assert position["answer"] == "e5"
        assert position["schedule"]["due"] == now.isoformat()
        assert position["schedule"]["reps"] == 2
        assert position["schedule"]["stability"] == 3.2

        log = data["logs"][0]
        assert log == {
            "card_id": 17,
            "review_datetime": "2024-03-01T11:00:00+00:00",
            "fen": "f1",
            "due": now.isoformat(),
            "rating": 4,
        }

    def test_opaque_fields_survive_json(self, deck):
        restored = deck_from_dict(json.loads(json.dumps(deck_to_dict(deck))))

        assert restored == deck
        assert restored.positions[0].schedule.memory == deck.positions[0].schedule.memory
        assert restored.logs[0].review == deck.logs[0].review

    def test_reads_legacy_card_key_and_zulu_times(self):
        data = {
            "positions": [
                {
                    "fen": "f1",
                    "answer": "e4",
                    "card": {"due": "2024-03-01T12:00:00.000Z", "reps": 1, "lapses": 0},
                }
            ],
            "logs": [{"fen": "f1", "due": "2024-03-05T12:00:00Z", "rating": 4, "state": 2}],
        }

        deck = deck_from_dict(data)

        schedule = deck.positions[0].schedule
        assert schedule.due == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        assert schedule.reps == 1
        assert schedule.memory == {"lapses": 0}
        assert deck.logs[0].review == {"state": 2}

    def test_naive_timestamps_are_utc(self):
        deck = deck_from_dict(
            {"positions": [{"fen": "f", "answer": "e4", "schedule": {"due": "2024-03-01T12:00:00"}}]}
        )
        assert deck.positions[0].schedule.due.tzinfo == timezone.utc
        assert deck.positions[0].schedule.reps == 0

    def test_empty_document(self):
        assert deck_from_dict({}) == Deck()

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"positions": [{"fen": "f", "answer": "e4"}]},
            {"positions": [{"fen": "f", "schedule": {"due": "2024-03-01T12:00:00"}}]},
            {"positions": [{"fen": "f", "answer": "e4", "schedule": {"due": "yesterday"}}]},
            {"logs": [{"fen": "f", "due": "2024-03-01T12:00:00", "rating": "four"}]},
        ],
    )
    def test_malformed_data(self, data):
        with pytest.raises(DeckFormatError):
            deck_from_dict(data)


class TestJsonDeckRepository:
    def test_missing_deck_is_empty(self, tmp_path):
        assert JsonDeckRepository(tmp_path / "decks").load(KEY) == Deck()

    def test_save_and_load(self, tmp_path, deck):
        repo = JsonDeckRepository(tmp_path / "decks")

        repo.save(KEY, deck)

        assert JsonDeckRepository(tmp_path / "decks").load(KEY) == deck
        assert (tmp_path / "decks" / deck_file_name(KEY)).exists()
        assert not list((tmp_path / "decks").glob(".tmp-*"))

    def test_keys_are_indexed(self, tmp_path, deck):
        repo = JsonDeckRepository(tmp_path)
        other = DeckKey(file="", game=0)

        repo.save(KEY, deck)
        repo.save(other, Deck())
        repo.save(KEY, Deck())

        assert sorted(repo.keys(), key=str) == sorted([KEY, other], key=str)

    def test_distinct_keys_use_distinct_files(self):
        assert deck_file_name(KEY) != deck_file_name(DeckKey(file=KEY.file, game=3))
        assert deck_file_name(DeckKey("a", 12)) != deck_file_name(DeckKey("a1", 2))

    def test_corrupt_file(self, tmp_path):
        repo = JsonDeckRepository(tmp_path)
        (tmp_path / deck_file_name(KEY)).write_text("{not json", encoding="utf-8")

        with pytest.raises(DeckFormatError):
            repo.load(KEY)

    def test_corrupt_index(self, tmp_path, deck):
        repo = JsonDeckRepository(tmp_path)
        repo.index_path.write_text("[[", encoding="utf-8")

        with pytest.raises(DeckFormatError):
            repo.keys()
        with pytest.raises(DeckFormatError):
            repo.save(KEY, deck)


def test_in_memory_repository(deck):
    repo = InMemoryDeckRepository()
    assert repo.load(KEY) == Deck()

    repo.save(KEY, deck)

    assert repo.load(KEY) is deck
    assert repo.keys() == [KEY]
