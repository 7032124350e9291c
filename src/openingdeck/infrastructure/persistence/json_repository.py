"""
JSON deck repositories: Infrastructure adapters implementing DeckRepository.
"""

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path

from openingdeck.domain.constants import DECK_INDEX_FILE
from openingdeck.domain.errors import DeckFormatError
from openingdeck.domain.models import Deck, DeckKey
from openingdeck.domain.ports import DeckRepository

from .serialization import deck_from_dict, deck_to_dict

logger = logging.getLogger(__name__)


def deck_file_name(key: DeckKey) -> str:
    digest = hashlib.sha1(f"{key.file}\0{key.game}".encode("utf-8")).hexdigest()
    return f"{digest}.json"


def _write_json(path: Path, payload: object) -> None:
    """Write via a temp file and rename so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


class JsonDeckRepository(DeckRepository):
    """
    Stores each deck as one JSON document under `data_dir`.

    File names are hashes of the key; `index.json` maps them back.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    @property
    def index_path(self) -> Path:
        return self.data_dir / DECK_INDEX_FILE

    def _read_index(self) -> dict[str, dict]:
        if not self.index_path.exists():
            return {}
        try:
            with open(self.index_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise DeckFormatError(f"{self.index_path} is not valid JSON: {e}") from e

    def load(self, key: DeckKey) -> Deck:
        path = self.data_dir / deck_file_name(key)
        if not path.exists():
            return Deck()
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise DeckFormatError(f"{path} is not valid JSON: {e}") from e
        deck = deck_from_dict(data)
        logger.debug(f"Loaded {key} from {path} ({len(deck.positions)} positions)")
        return deck

    def save(self, key: DeckKey, deck: Deck) -> None:
        name = deck_file_name(key)
        _write_json(self.data_dir / name, deck_to_dict(deck))

        index = self._read_index()
        if name not in index:
            index[name] = {"file": key.file, "game": key.game}
            _write_json(self.index_path, index)
        logger.debug(f"Saved {key} to {self.data_dir / name}")

    def keys(self) -> list[DeckKey]:
        return [DeckKey(file=v["file"], game=int(v["game"])) for v in self._read_index().values()]


class InMemoryDeckRepository(DeckRepository):
    """Process-local storage; decks vanish with the process."""

    def __init__(self, decks: dict[DeckKey, Deck] | None = None):
        self._decks: dict[DeckKey, Deck] = dict(decks or {})

    def load(self, key: DeckKey) -> Deck:
        return self._decks.get(key, Deck())

    def save(self, key: DeckKey, deck: Deck) -> None:
        self._decks[key] = deck

    def keys(self) -> list[DeckKey]:
        return list(self._decks)
