# Persistence Package
from .json_repository import InMemoryDeckRepository, JsonDeckRepository
from .serialization import deck_from_dict, deck_to_dict

__all__ = ["InMemoryDeckRepository", "JsonDeckRepository", "deck_from_dict", "deck_to_dict"]
