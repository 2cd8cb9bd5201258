"""
Lazy tree builder for hierarchy nodes.

The builder knows nothing about the protocol. It is given root node(s)
and a ``children_of`` callback, realizes the requested number of levels
eagerly and expands the rest on demand, caching each node's children for
the lifetime of the tree.

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from typing import Protocol, TypeAlias

from lsptree.hierarchy.errors import Failure, FetchResult, Success
from lsptree.hierarchy.models import HierarchyNode

logger = logging.getLogger(__name__)

ChildrenOf: TypeAlias = Callable[[HierarchyNode], FetchResult | Sequence[HierarchyNode]]


class Messenger(Protocol):
	"""User-visible messaging for contained fetch failures."""

	def error(self, text: str) -> None:
		"""Show ``text`` to the user."""
		...

	def clear_status(self) -> None:
		"""Clear any error or status state left by the failed request."""
		...


class LoggingMessenger:
	"""Messenger that only writes to the log."""

	def error(self, text: str) -> None:
		"""Log ``text`` as an error."""
		logger.error("%s", text)

	def clear_status(self) -> None:
		"""Nothing to clear."""


class Tree:
	"""
	A rooted, ordered hierarchy whose children are realized lazily.

	Children are memoized per node identity, so a symbol that appears twice
	in the tree is expanded (and cached) independently at each position.

	"""

	def __init__(
		self,
		roots: Sequence[HierarchyNode],
		children_of: ChildrenOf,
		messenger: Messenger | None = None,
	) -> None:
		"""
		Initialize the tree without realizing anything.

		Args:
		    roots: Root nodes in display order.
		    children_of: Callback computing a node's children.
		    messenger: Receives one message per contained fetch failure.

		"""
		self.roots: tuple[HierarchyNode, ...] = tuple(roots)
		self._children_of = children_of
		self._messenger = messenger or LoggingMessenger()
		self._children: dict[int, tuple[HierarchyNode, ...]] = {}
		# Holds every expanded node so its id() stays unique while cached.
		self._expanded: dict[int, HierarchyNode] = {}
		self._failed: set[int] = set()

	def children(self, node: HierarchyNode) -> tuple[HierarchyNode, ...]:
		"""Return the cached children of ``node``, empty if never expanded."""
		return self._children.get(id(node), ())

	def is_expanded(self, node: HierarchyNode) -> bool:
		"""Return whether ``node``'s children have been fetched."""
		return id(node) in self._children

	def failed(self, node: HierarchyNode) -> bool:
		"""Return whether fetching ``node``'s children failed."""
		return id(node) in self._failed

	def expand(self, node: HierarchyNode) -> tuple[HierarchyNode, ...]:
		"""Fetch ``node``'s children on first call, return the cached tuple after."""
		key = id(node)
		if key in self._children:
			return self._children[key]

		children = self._fetch(node)
		self._children[key] = children
		self._expanded[key] = node
		return children

	def expand_all(self, depth: int) -> None:
		"""
		Realize every node above ``depth`` levels below the roots.

		``depth=1`` expands the roots only. Cycles are not detected; the
		depth bound is what stops a cyclic hierarchy.

		"""
		level: Sequence[HierarchyNode] = self.roots
		for _ in range(depth):
			next_level: list[HierarchyNode] = []
			for node in level:
				next_level.extend(self.expand(node))
			if not next_level:
				break
			level = next_level

	def walk(self) -> Iterator[tuple[HierarchyNode, int]]:
		"""Yield ``(node, depth)`` for every realized node in display order."""
		stack = [(root, 0) for root in reversed(self.roots)]
		while stack:
			node, depth = stack.pop()
			yield node, depth
			stack.extend((child, depth + 1) for child in reversed(self.children(node)))

	def __len__(self) -> int:
		"""Number of realized nodes, counting repeated symbols once per position."""
		return sum(1 for _ in self.walk())

	def _fetch(self, node: HierarchyNode) -> tuple[HierarchyNode, ...]:
		try:
			result = self._children_of(node)
		except Exception as e:
			logger.debug("Fetching children of %s failed", node.name, exc_info=True)
			return self._contain_failure(node, str(e) or type(e).__name__)

		if isinstance(result, Failure):
			return self._contain_failure(node, result.message)
		if isinstance(result, Success):
			return result.children
		return tuple(result)

	def _contain_failure(self, node: HierarchyNode, message: str) -> tuple[HierarchyNode, ...]:
		self._failed.add(id(node))
		self._messenger.error(message)
		self._messenger.clear_status()
		return ()


def build(
	roots: HierarchyNode | Sequence[HierarchyNode],
	children_of: ChildrenOf,
	*,
	messenger: Messenger | None = None,
	depth: int = 1,
) -> Tree:
	"""
	Build a tree from one root or a root set.

	Args:
	    roots: A single root node or several candidate roots.
	    children_of: Callback computing a node's children. A ``Failure`` or a
	        raised exception makes that node a leaf and is reported once.
	    messenger: Receives contained failure messages.
	    depth: Levels to realize now; deeper levels wait for ``expand``.

	Returns:
	    Tree: The partially realized tree.

	"""
	if isinstance(roots, HierarchyNode):
		roots = [roots]
	tree = Tree(roots, children_of, messenger=messenger)
	tree.expand_all(depth)
	logger.debug("Built tree with %d roots and %d realized nodes", len(tree.roots), len(tree))
	return tree
