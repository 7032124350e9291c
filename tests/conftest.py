from datetime import datetime, timedelta, timezone

import pytest

from openingdeck.application.deck_store import DeckStore
from openingdeck.application.review_scheduler import ReviewScheduler
from openingdeck.domain.models import Card, Grade, Outcome, Schedule
from openingdeck.domain.ports import SchedulingEngine
from openingdeck.domain.tree import GameTree, TreeNode
from openingdeck.infrastructure.persistence.json_repository import InMemoryDeckRepository

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

# Interval the fake engine assigns to each grade
FAKE_INTERVALS = {
    Grade.AGAIN: timedelta(minutes=1),
    Grade.HARD: timedelta(minutes=10),
    Grade.GOOD: timedelta(days=1),
    Grade.EASY: timedelta(days=4),
}


class FakeEngine(SchedulingEngine):
    """Deterministic engine: fixed interval per grade, counts calls."""

    def __init__(self):
        self.repeat_calls = 0

    def create_default(self, now):
        return Schedule(due=now, reps=0)

    def repeat(self, schedule, now):
        self.repeat_calls += 1
        return {
            grade: Outcome(
                schedule=Schedule(
                    due=now + FAKE_INTERVALS[grade],
                    reps=schedule.reps + 1,
                    memory={"stability": float(grade)},
                ),
                review={"review_datetime": now.isoformat()},
            )
            for grade in Grade
        }


def linear_tree(*sans: str) -> GameTree:
    """A single line of moves; node at ply i has fen "p{i}"."""
    root = TreeNode(fen="p0")
    node = root
    for i, san in enumerate(sans, start=1):
        node = node.add_child(san, f"p{i}")
    return GameTree(root)


def make_card(fen: str, due: datetime, reps: int = 1, answer: str = "e4") -> Card:
    return Card(fen=fen, answer=answer, schedule=Schedule(due=due, reps=reps))


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def scheduler(engine):
    return ReviewScheduler(engine)


@pytest.fixture
def repository():
    return InMemoryDeckRepository()


@pytest.fixture
def store(repository, scheduler, engine):
    return DeckStore(repository, scheduler, engine)


@pytest.fixture
def ruy_lopez():
    """1. e4 e5 2. Nf3 Nc6 3. Bb5 a6: branch points at plies 0-5."""
    return linear_tree("e4", "e5", "Nf3", "Nc6", "Bb5", "a6")


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/logs
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "OPENINGDECK_DATA_DIR",
        "OPENINGDECK_ENABLE_FUZZ",
        "OPENINGDECK_RANDOM_REVIEW",
        "OPENINGDECK_VERBOSE",
    ):
        monkeypatch.delenv(var, raising=False)
    return home
