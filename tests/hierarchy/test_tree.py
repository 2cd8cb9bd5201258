"""Tests for the lazy tree builder."""

from __future__ import annotations

import logging
from collections import Counter

import pytest

from lsptree.hierarchy.errors import Failure, Success
from lsptree.hierarchy.models import HierarchyKind, HierarchyNode, Range
from lsptree.hierarchy.tree import Tree, build
from tests.helpers import RecordingMessenger


def node(name: str) -> HierarchyNode:
    return HierarchyNode(name, "file:///graph.py", Range.from_lsp(None), HierarchyKind.CALL)


class Graph:
    """children_of callback over a name graph, counting fetches."""

    def __init__(self, edges: dict[str, list[str]], failing: dict[str, str] | None = None) -> None:
        self.edges = edges
        self.failing = failing or {}
        self.fetches: Counter[str] = Counter()

    def __call__(self, parent: HierarchyNode) -> Success | Failure:
        self.fetches[parent.name] += 1
        if parent.name in self.failing:
            return Failure(self.failing[parent.name])
        return Success(tuple(node(name) for name in self.edges.get(parent.name, [])))


@pytest.mark.unit
class TestBuild:
    """Building and eager realization."""

    def test_single_root_realizes_one_level(self) -> None:
        """Test the default eager single-level strategy."""
        graph = Graph({"root": ["a", "b"], "a": ["c"]})

        tree = build(node("root"), graph)

        assert [child.name for child in tree.children(tree.roots[0])] == ["a", "b"]
        assert graph.fetches == Counter({"root": 1})
        first = tree.children(tree.roots[0])[0]
        assert not tree.is_expanded(first)
        assert tree.children(first) == ()

    def test_root_set_keeps_order(self) -> None:
        """Test several candidate roots."""
        graph = Graph({"r1": ["x"], "r2": ["y"]})

        tree = build([node("r1"), node("r2")], graph)

        assert [root.name for root in tree.roots] == ["r1", "r2"]
        assert [[c.name for c in tree.children(root)] for root in tree.roots] == [["x"], ["y"]]

    def test_depth_zero_realizes_nothing(self) -> None:
        """Test that depth 0 leaves even the roots unexpanded."""
        graph = Graph({"root": ["a"]})

        tree = build(node("root"), graph, depth=0)

        assert not tree.is_expanded(tree.roots[0])
        assert graph.fetches == Counter()

    def test_deeper_eager_realization(self) -> None:
        """Test expanding several levels at build time."""
        graph = Graph({"root": ["a"], "a": ["b"], "b": ["c"]})

        tree = build(node("root"), graph, depth=2)

        assert [(n.name, depth) for n, depth in tree.walk()] == [("root", 0), ("a", 1), ("b", 2)]

    def test_plain_sequences_are_accepted(self) -> None:
        """Test a children_of that returns a list instead of a result."""
        tree = build(node("root"), lambda parent: [node("x")] if parent.name == "root" else [])

        assert [child.name for child in tree.children(tree.roots[0])] == ["x"]


@pytest.mark.unit
class TestExpand:
    """On-demand expansion and memoization."""

    def test_expand_is_memoized(self) -> None:
        """Test that a second expand returns the identical tuple without fetching."""
        graph = Graph({"root": ["a"], "a": ["b"]})
        tree = build(node("root"), graph)
        child = tree.children(tree.roots[0])[0]

        first = tree.expand(child)
        second = tree.expand(child)

        assert first is second
        assert graph.fetches["a"] == 1

    def test_repeated_symbols_expand_independently(self) -> None:
        """Test that the same symbol at two positions is cached per position."""
        graph = Graph({"root": ["shared", "shared"], "shared": ["leaf"]})
        tree = build(node("root"), graph)
        left, right = tree.children(tree.roots[0])

        tree.expand(left)

        assert tree.is_expanded(left)
        assert not tree.is_expanded(right)
        tree.expand(right)
        assert graph.fetches["shared"] == 2

    def test_empty_children_is_a_leaf(self) -> None:
        """Test that no children is not an error."""
        messenger = RecordingMessenger()
        tree = build(node("root"), Graph({}), messenger=messenger)

        assert tree.is_expanded(tree.roots[0])
        assert tree.children(tree.roots[0]) == ()
        assert not tree.failed(tree.roots[0])
        assert messenger.errors == []

    def test_cycles_stop_at_requested_depth(self) -> None:
        """Test that a cyclic graph is realized only as deep as asked."""
        graph = Graph({"a": ["b"], "b": ["a"]})

        tree = build(node("a"), graph, depth=4)

        assert [n.name for n, _ in tree.walk()] == ["a", "b", "a", "b", "a"]
        assert len(tree) == 5


@pytest.mark.unit
class TestFailureIsolation:
    """A failed fetch only affects its own node."""

    def test_failure_makes_leaf_and_reports_once(self) -> None:
        """Test the failed node, its message and the surviving siblings."""
        messenger = RecordingMessenger()
        graph = Graph({"root": ["bad", "good"], "good": ["leaf"]}, failing={"bad": "request cancelled"})
        tree = build(node("root"), graph, messenger=messenger, depth=2)
        bad, good = tree.children(tree.roots[0])

        assert tree.expand(bad) == ()
        assert tree.failed(bad)
        assert [child.name for child in tree.children(good)] == ["leaf"]
        assert messenger.errors == ["request cancelled"]
        assert messenger.clears == 1

    def test_failure_is_not_retried(self) -> None:
        """Test that expanding a failed node again neither fetches nor reports."""
        messenger = RecordingMessenger()
        graph = Graph({"root": []}, failing={"root": "boom"})
        tree = build(node("root"), graph, messenger=messenger)

        tree.expand(tree.roots[0])

        assert graph.fetches["root"] == 1
        assert messenger.errors == ["boom"]

    def test_raising_callback_is_contained(self) -> None:
        """Test that an exception from children_of does not abort the build."""
        messenger = RecordingMessenger()

        def children_of(parent: HierarchyNode) -> list[HierarchyNode]:
            if parent.name == "r1":
                msg = "connection reset"
                raise ConnectionError(msg)
            return [node("ok")]

        tree = build([node("r1"), node("r2")], children_of, messenger=messenger)

        assert tree.children(tree.roots[0]) == ()
        assert [child.name for child in tree.children(tree.roots[1])] == ["ok"]
        assert messenger.errors == ["connection reset"]

    def test_default_messenger_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that failures are logged when no messenger is given."""
        tree = Tree([node("root")], Graph({}, failing={"root": "no index"}))

        tree.expand(tree.roots[0])

        assert "no index" in caplog.text

    def test_contained_exception_logged_below_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that only the messenger reports a raising callback to the user."""
        messenger = RecordingMessenger()

        def children_of(parent: HierarchyNode) -> list[HierarchyNode]:
            msg = "connection reset"
            raise ConnectionError(msg)

        with caplog.at_level(logging.DEBUG):
            build(node("root"), children_of, messenger=messenger)

        assert messenger.errors == ["connection reset"]
        assert [r.levelno for r in caplog.records if r.exc_info] == [logging.DEBUG]
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
