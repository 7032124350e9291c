"""Tests for the move tree domain model."""

from conftest import linear_tree

from openingdeck.domain.models import Side
from openingdeck.domain.tree import GameTree, TreeNode, is_prefix


def branching_tree() -> GameTree:
    root = TreeNode(fen="start")
    e4 = root.add_child("e4", "e4")
    d4 = root.add_child("d4", "d4")
    e4.add_child("e5", "e4e5")
    e4.add_child("c5", "e4c5")
    d4.add_child("d5", "d4d5")
    return GameTree(root)


class TestIsPrefix:
    def test_empty_is_prefix_of_everything(self):
        assert is_prefix((), ())
        assert is_prefix((), (0, 1))

    def test_equal_paths(self):
        assert is_prefix((0, 1), (0, 1))

    def test_longer_is_not_prefix(self):
        assert not is_prefix((0, 1, 2), (0, 1))

    def test_mismatch(self):
        assert not is_prefix((1,), (0, 1))
        assert not is_prefix((0, 2), (0, 1, 0))


class TestGameTree:
    def test_preorder_visits_every_node_once_in_sibling_order(self):
        tree = branching_tree()

        visited = [(path, node.fen) for path, node in tree.iter_positions()]

        assert visited == [
            ((), "start"),
            ((0,), "e4"),
            ((0, 0), "e4e5"),
            ((0, 1), "e4c5"),
            ((1,), "d4"),
            ((1, 0), "d4d5"),
        ]

    def test_half_moves_follow_depth(self):
        tree = branching_tree()
        for path, node in tree.iter_positions():
            assert node.half_moves == len(path)

    def test_find_position_by_fen(self):
        tree = branching_tree()
        assert tree.find_position_by_fen("e4c5") == (0, 1)
        assert tree.find_position_by_fen("d4d5") == (1, 0)

    def test_find_position_returns_first_match(self):
        root = TreeNode(fen="start")
        root.add_child("Nf3", "a").add_child("d5", "same")
        root.add_child("d4", "b").add_child("Nf6", "same")
        tree = GameTree(root)

        assert tree.find_position_by_fen("same") == (0, 0)

    def test_find_missing_fen_is_root_path(self):
        assert branching_tree().find_position_by_fen("nowhere") == ()

    def test_node_at(self):
        tree = branching_tree()
        node = tree.node_at((0, 1))
        assert node.san == "c5"
        assert tree.node_at(()).fen == "start"

    def test_len(self):
        assert len(linear_tree("e4", "e5")) == 3


class TestSide:
    def test_white_moves_on_even_plies(self):
        assert Side.WHITE.to_move_at(0)
        assert not Side.WHITE.to_move_at(1)

    def test_black_moves_on_odd_plies(self):
        assert Side.BLACK.to_move_at(3)
        assert not Side.BLACK.to_move_at(4)
