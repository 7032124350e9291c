"""Tests for loading move trees from PGN."""

from pathlib import Path

import pytest

from openingdeck.application.deck_builder import build_from_tree
from openingdeck.domain.constants import STARTING_FEN
from openingdeck.domain.errors import TreeSourceError
from openingdeck.domain.models import Side
from openingdeck.infrastructure.pgn_tree import load_game_tree, parse_start

PGN = """[Event "White repertoire"]
[Orientation "white"]

1. e4 e5 (1... c5 2. Nf3) 2. Nf3 Nc6 3. Bb5 *

[Event "Black repertoire"]
[Orientation "black"]
[Start "[0]"]

1. e4 c5 2. Nf3 d6 (2... Nc6 3. d4) 3. d4 *
"""


@pytest.fixture
def pgn_file(tmp_path: Path) -> Path:
    path = tmp_path / "repertoire.pgn"
    path.write_text(PGN, encoding="utf-8")
    return path


def test_tree_follows_variations_in_order(pgn_file):
    tree, headers = load_game_tree(pgn_file)

    assert headers.side is Side.WHITE
    assert headers.start == ()
    assert tree.root.fen == STARTING_FEN
    assert tree.root.half_moves == 0

    e4 = tree.node_at((0,))
    assert e4.san == "e4"
    assert e4.half_moves == 1
    assert [c.san for c in e4.children] == ["e5", "c5"]
    assert tree.node_at((0, 1, 0)).san == "Nf3"
    assert len(tree) == 8


def test_fens_are_board_positions(pgn_file):
    tree, _ = load_game_tree(pgn_file)
    assert tree.node_at((0,)).fen == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"


def test_second_game_headers(pgn_file):
    tree, headers = load_game_tree(pgn_file, game=1)

    assert headers.side is Side.BLACK
    assert headers.start == (0,)
    assert tree.node_at((0, 0)).san == "c5"


def test_builds_white_deck_from_pgn(pgn_file):
    tree, headers = load_game_tree(pgn_file)

    cards = build_from_tree(tree, headers.side, headers.start)

    assert [c.answer for c in cards] == ["Nf3", "Bb5", "Nf3"]


def test_builds_black_deck_with_start(pgn_file):
    tree, headers = load_game_tree(pgn_file, game=1)

    cards = build_from_tree(tree, headers.side, headers.start)

    # 1. e4 c5 is mastered; black still answers after 2. Nf3
    assert [c.answer for c in cards] == ["d6"]


def test_missing_game(pgn_file):
    with pytest.raises(TreeSourceError):
        load_game_tree(pgn_file, game=5)


def test_negative_game(pgn_file):
    with pytest.raises(TreeSourceError):
        load_game_tree(pgn_file, game=-1)


def test_missing_file(tmp_path):
    with pytest.raises(TreeSourceError):
        load_game_tree(tmp_path / "nope.pgn")


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, ()),
        ("", ()),
        ("[]", ()),
        ("[0, 1, 0]", (0, 1, 0)),
        ("0,1", (0, 1)),
        ("2", (2,)),
    ],
)
def test_parse_start(raw, expected):
    assert parse_start(raw) == expected


def test_parse_start_rejects_garbage():
    with pytest.raises(TreeSourceError):
        parse_start("e4 e5")
