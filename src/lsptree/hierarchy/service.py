"""
Show type and call hierarchies for a cursor position.

Each invocation resolves its connection once, checks the server's
capability, acquires the root(s) and builds a fresh tree. Terminal
conditions (missing capability, nothing at the cursor) are reported
exactly once and produce no tree at all.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lsptree.hierarchy.adapters import CallHierarchyAdapter, HierarchyAdapter, TypeHierarchyAdapter
from lsptree.hierarchy.errors import CapabilityMissingError, HierarchyError
from lsptree.hierarchy.navigation import resolve_target
from lsptree.hierarchy.tree import LoggingMessenger, Messenger, Tree, build

if TYPE_CHECKING:
	from lsptree.hierarchy.connection import LanguageServerConnection
	from lsptree.hierarchy.models import HierarchyKind, HierarchyNode, NavigationTarget, Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentContext:
	"""The document and cursor a hierarchy is requested for."""

	uri: str
	position: Position


@dataclass
class HierarchyView:
	"""A built hierarchy tree together with the adapter that feeds it."""

	tree: Tree
	adapter: HierarchyAdapter

	@property
	def kind(self) -> HierarchyKind:
		"""Hierarchy kind of every node in the tree."""
		return self.adapter.kind

	@property
	def roots(self) -> tuple[HierarchyNode, ...]:
		"""Root nodes in display order."""
		return self.tree.roots

	def expand(self, node: HierarchyNode) -> tuple[HierarchyNode, ...]:
		"""Expansion hook for the display surface."""
		return self.tree.expand(node)

	def target(self, node: HierarchyNode, call_site_preferred: bool = False) -> NavigationTarget:
		"""Jump target for a selected node."""
		return resolve_target(node, call_site_preferred)


def show_type_hierarchy(
	connection: LanguageServerConnection,
	context: DocumentContext,
	*,
	messenger: Messenger | None = None,
	depth: int = 1,
	resolve: int = 1,
) -> HierarchyView | None:
	"""
	Build the type hierarchy of the symbol at the cursor.

	Args:
	    connection: Connection used for every request of this invocation.
	    context: Document URI and cursor position.
	    messenger: Receives terminal and contained failure messages.
	    depth: Levels realized before returning.
	    resolve: Relation levels the server should resolve per request.

	Returns:
	    HierarchyView | None: The view, or None if the operation aborted.

	"""
	return _show(TypeHierarchyAdapter(connection, resolve=resolve), context, messenger, depth)


def show_call_hierarchy(
	connection: LanguageServerConnection,
	context: DocumentContext,
	*,
	messenger: Messenger | None = None,
	outgoing: bool = False,
	depth: int = 1,
) -> HierarchyView | None:
	"""
	Build the incoming or outgoing call hierarchy at the cursor.

	Args:
	    connection: Connection used for every request of this invocation.
	    context: Document URI and cursor position.
	    messenger: Receives terminal and contained failure messages.
	    outgoing: Show callees instead of callers.
	    depth: Levels realized before returning.

	Returns:
	    HierarchyView | None: The view, or None if the operation aborted.

	"""
	return _show(CallHierarchyAdapter(connection, outgoing=outgoing), context, messenger, depth)


def _show(
	adapter: HierarchyAdapter,
	context: DocumentContext,
	messenger: Messenger | None,
	depth: int,
) -> HierarchyView | None:
	messenger = messenger or LoggingMessenger()

	try:
		if not adapter.connection.capable(adapter.required_capability):
			raise CapabilityMissingError(adapter.required_capability)
		roots = adapter.acquire_roots(context)
	except HierarchyError as e:
		logger.info("%s hierarchy aborted at %s: %s", adapter.kind.value, context.uri, e)
		messenger.error(str(e))
		return None

	logger.debug("Acquired %d %s hierarchy root(s)", len(roots), adapter.kind.value)
	tree = build(roots, adapter.children_of, messenger=messenger, depth=depth)
	return HierarchyView(tree=tree, adapter=adapter)
