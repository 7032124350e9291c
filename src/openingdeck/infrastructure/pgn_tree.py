"""
PGN tree loader: builds a GameTree from one game of a PGN file.

Variations are kept in their stored order, so the first child of every
node is the main line.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path as FsPath

import chess
import chess.pgn

from openingdeck.domain.errors import TreeSourceError
from openingdeck.domain.models import Path, Side
from openingdeck.domain.tree import GameTree, TreeNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreeHeaders:
    """Practice settings stored in the game headers."""

    side: Side = Side.WHITE
    start: Path = field(default_factory=tuple)


def parse_start(raw: str | None) -> Path:
    """
    Parse the `Start` header: a JSON list ("[0, 1]") or bare indices ("0,1").
    """
    if not raw or not raw.strip():
        return ()
    text = raw.strip()
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        value = [part for part in text.replace(",", " ").split() if part]
    if not isinstance(value, list):
        value = [value]
    try:
        return tuple(int(v) for v in value)
    except (TypeError, ValueError) as e:
        raise TreeSourceError(f"Invalid Start header {raw!r}") from e


def parse_headers(headers: chess.pgn.Headers) -> TreeHeaders:
    orientation = headers.get("Orientation", Side.WHITE.value).strip().lower()
    try:
        side = Side(orientation)
    except ValueError:
        logger.warning(f"Unknown orientation {orientation!r}, using white")
        side = Side.WHITE
    return TreeHeaders(side=side, start=parse_start(headers.get("Start")))


def _attach(parent: TreeNode, game_node: chess.pgn.GameNode, board: chess.Board) -> None:
    for variation in game_node.variations:
        san = board.san(variation.move)
        board.push(variation.move)
        child = TreeNode(fen=board.fen(), half_moves=board.ply(), san=san)
        parent.children.append(child)
        _attach(child, variation, board)
        board.pop()


def tree_from_game(game: chess.pgn.Game) -> GameTree:
    board = game.board()
    # ply() counts from the starting FEN's move number
    root = TreeNode(fen=board.fen(), half_moves=board.ply())
    _attach(root, game, board)
    return GameTree(root)


def load_game_tree(pgn_path: FsPath | str, game: int = 0) -> tuple[GameTree, TreeHeaders]:
    """
    Read game number `game` (0-based) from a PGN file.

    Raises:
        TreeSourceError: If the file is missing or has fewer games.
    """
    pgn_path = FsPath(pgn_path)
    if not pgn_path.exists():
        raise TreeSourceError(f"PGN file not found: {pgn_path}")
    if game < 0:
        raise TreeSourceError(f"Game number must not be negative (got {game})")

    with open(pgn_path, "r", encoding="utf-8") as f:
        for skipped in range(game):
            if not chess.pgn.skip_game(f):
                raise TreeSourceError(f"{pgn_path} has only {skipped} games")
        parsed = chess.pgn.read_game(f)

    if parsed is None:
        raise TreeSourceError(f"{pgn_path} has no game number {game}")
    for error in parsed.errors:
        logger.warning(f"{pgn_path}#{game}: {error}")

    tree = tree_from_game(parsed)
    headers = parse_headers(parsed.headers)
    logger.debug(f"Loaded {len(tree)} positions from {pgn_path}#{game}")
    return tree, headers
