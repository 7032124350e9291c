"""
Adapter factory.
Centralizes the selection of the scheduling engine and deck repository.
"""

from openingdeck.application.config import AppConfig
from openingdeck.application.deck_store import DeckStore
from openingdeck.application.review_scheduler import ReviewScheduler
from openingdeck.domain.ports import DeckRepository, SchedulingEngine
from openingdeck.infrastructure.engines.fsrs_engine import FsrsEngine
from openingdeck.infrastructure.persistence.json_repository import JsonDeckRepository


def get_engine(config: AppConfig) -> SchedulingEngine:
    """
    Returns the FSRS engine tuned by config.
    """
    return FsrsEngine(
        desired_retention=config.desired_retention,
        maximum_interval=config.maximum_interval,
        enable_fuzz=config.enable_fuzz,
    )


def get_repository(config: AppConfig) -> DeckRepository:
    """
    Returns the on-disk deck repository rooted at config.data_dir.
    """
    return JsonDeckRepository(config.data_dir)


def get_deck_store(config: AppConfig) -> DeckStore:
    engine = get_engine(config)
    return DeckStore(get_repository(config), ReviewScheduler(engine), engine)
