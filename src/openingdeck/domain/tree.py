"""
Move tree domain model.

A game with variations is a tree of positions. Nodes are addressed by a
path of child indices from the root; ply 0 is the root position.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

from .models import Path
from .ports import MoveTree


def is_prefix(shorter: Path, longer: Path) -> bool:
    """True if every element of `shorter` matches the start of `longer`."""
    if len(shorter) > len(longer):
        return False
    return all(a == b for a, b in zip(shorter, longer))


@dataclass
class TreeNode:
    """
    One position in the move tree.

    Attributes:
        fen: Board position reached at this node.
        half_moves: Ply count from the starting position.
        san: Move that led here (empty for the root).
        children: Continuations in stored order; the first is the main line.
    """

    fen: str
    half_moves: int = 0
    san: str = ""
    children: list["TreeNode"] = field(default_factory=list)

    def add_child(self, san: str, fen: str) -> "TreeNode":
        child = TreeNode(fen=fen, half_moves=self.half_moves + 1, san=san)
        self.children.append(child)
        return child


class GameTree(MoveTree):
    """In-memory move tree rooted at a single position."""

    def __init__(self, root: TreeNode):
        self.root = root

    def iter_positions(self) -> Iterator[tuple[Path, TreeNode]]:
        stack: list[tuple[Path, TreeNode]] = [((), self.root)]
        while stack:
            path, node = stack.pop()
            yield path, node
            # Reversed so siblings come off the stack in stored order
            for i in range(len(node.children) - 1, -1, -1):
                stack.append((path + (i,), node.children[i]))

    def find_position_by_fen(self, fen: str) -> Path:
        for path, node in self.iter_positions():
            if node.fen == fen:
                return path
        return ()

    def node_at(self, path: Path) -> TreeNode:
        node = self.root
        for i in path:
            node = node.children[i]
        return node

    def __len__(self) -> int:
        return sum(1 for _ in self.iter_positions())
