"""
Protocol adapters for type and call hierarchies.

Each adapter hides one hierarchy kind behind the same contract: acquire
the root node(s) at the cursor, then fetch the children of any placed
node as a ``FetchResult``. Request failures during a fetch are returned
as ``Failure`` and never raised to the tree builder.

"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from lsptree.hierarchy.connection import CALL_HIERARCHY_CAPABILITY, TYPE_HIERARCHY_CAPABILITY
from lsptree.hierarchy.errors import Failure, FetchResult, LSPRequestError, RootEmptyError, Success
from lsptree.hierarchy.models import (
	Direction,
	HierarchyKind,
	HierarchyNode,
	NodeDirection,
	Range,
)

if TYPE_CHECKING:
	from lsptree.hierarchy.connection import LanguageServerConnection
	from lsptree.hierarchy.service import DocumentContext

logger = logging.getLogger(__name__)

TYPE_HIERARCHY_METHOD = "textDocument/typeHierarchy"
PREPARE_CALL_HIERARCHY_METHOD = "textDocument/prepareCallHierarchy"
INCOMING_CALLS_METHOD = "callHierarchy/incomingCalls"
OUTGOING_CALLS_METHOD = "callHierarchy/outgoingCalls"


class HierarchyAdapter(ABC):
	"""Common fetch interface over one hierarchy kind."""

	kind: HierarchyKind
	required_capability: str

	def __init__(self, connection: LanguageServerConnection) -> None:
		self.connection = connection

	@abstractmethod
	def acquire_roots(self, document: DocumentContext) -> list[HierarchyNode]:
		"""
		Request the root node(s) at the cursor.

		Raises:
		        RootEmptyError: If the server has nothing at the cursor.
		        LSPRequestError: If the root request itself fails.

		"""

	@abstractmethod
	def fetch(self, node: HierarchyNode, direction: Direction | None = None) -> FetchResult:
		"""Fetch the children of ``node``."""

	def children_of(self, node: HierarchyNode) -> FetchResult:
		"""Fetch callback handed to the tree builder."""
		return self.fetch(node)


class TypeHierarchyAdapter(HierarchyAdapter):
	"""Adapter for the ``textDocument/typeHierarchy`` request."""

	kind = HierarchyKind.TYPE
	required_capability = TYPE_HIERARCHY_CAPABILITY

	def __init__(self, connection: LanguageServerConnection, resolve: int = 1) -> None:
		"""
		Initialize the adapter.

		Args:
		    connection: Connection used for every request of this invocation.
		    resolve: Number of relation levels the server should resolve eagerly.

		"""
		super().__init__(connection)
		self.resolve = resolve
		# Root replies already carry the root's relations; keyed by node identity.
		self._prefetched: dict[int, dict[str, Any]] = {}

	def acquire_roots(self, document: DocumentContext) -> list[HierarchyNode]:
		"""Request the symbol at the cursor with both directions."""
		reply = self.connection.request(
			TYPE_HIERARCHY_METHOD,
			self._params(document.uri, document.position.to_lsp(), Direction.BOTH),
		)
		if not reply:
			msg = "No symbol under cursor"
			raise RootEmptyError(msg)

		root = self._node_from_item(reply, NodeDirection.NONE)
		self._prefetched[id(root)] = reply
		return [root]

	def fetch(self, node: HierarchyNode, direction: Direction | None = None) -> FetchResult:
		"""
		Fetch supertypes and/or subtypes of ``node``.

		Parents come first sorted by name and tagged ``SUPER``, then
		children sorted by name and tagged ``SUB``.

		"""
		if direction is None:
			direction = self.expansion_direction(node)

		reply = self._prefetched.pop(id(node), None)
		if reply is None:
			try:
				reply = self.connection.request(
					TYPE_HIERARCHY_METHOD,
					self._params(node.uri, node.position.to_lsp(), direction),
				)
			except LSPRequestError as e:
				logger.debug("Type hierarchy request for %s failed: %s", node.name, e.message)
				return Failure(e.message)

		reply = reply or {}
		children: list[HierarchyNode] = []
		if direction.wants_super:
			children.extend(self._sorted_nodes(reply.get("parents"), NodeDirection.SUPER))
		if direction.wants_sub:
			children.extend(self._sorted_nodes(reply.get("children"), NodeDirection.SUB))
		return Success(tuple(children))

	@staticmethod
	def expansion_direction(node: HierarchyNode) -> Direction:
		"""Keep walking in the direction that discovered ``node``."""
		if node.direction is NodeDirection.SUPER:
			return Direction.SUPER
		if node.direction is NodeDirection.SUB:
			return Direction.SUB
		return Direction.BOTH

	def _params(self, uri: str, position: dict[str, int], direction: Direction) -> dict[str, Any]:
		return {
			"textDocument": {"uri": uri},
			"position": position,
			"direction": int(direction),
			"resolve": self.resolve,
		}

	def _sorted_nodes(self, items: list[dict[str, Any]] | None, direction: NodeDirection) -> list[HierarchyNode]:
		nodes = [self._node_from_item(item, direction) for item in items or []]
		return sorted(nodes, key=lambda node: node.name)

	@staticmethod
	def _node_from_item(item: dict[str, Any], direction: NodeDirection) -> HierarchyNode:
		return HierarchyNode(
			name=item.get("name", ""),
			uri=item.get("uri", ""),
			range=Range.from_lsp(item.get("range")),
			kind=HierarchyKind.TYPE,
			selection_range=Range.from_lsp(item["selectionRange"]) if item.get("selectionRange") else None,
			direction=direction,
			detail=item.get("detail"),
			item=item,
		)


class CallHierarchyAdapter(HierarchyAdapter):
	"""Adapter for the LSP 3.16 call hierarchy requests."""

	kind = HierarchyKind.CALL
	required_capability = CALL_HIERARCHY_CAPABILITY

	def __init__(self, connection: LanguageServerConnection, outgoing: bool = False) -> None:
		"""
		Initialize the adapter.

		Args:
		    connection: Connection used for every request of this invocation.
		    outgoing: Fetch callees instead of callers. Fixed for the whole tree.

		"""
		super().__init__(connection)
		self.outgoing = outgoing

	@property
	def method(self) -> str:
		"""The child request used by this adapter."""
		return OUTGOING_CALLS_METHOD if self.outgoing else INCOMING_CALLS_METHOD

	def acquire_roots(self, document: DocumentContext) -> list[HierarchyNode]:
		"""Prepare the call hierarchy; every returned item becomes a root."""
		items = self.connection.request(
			PREPARE_CALL_HIERARCHY_METHOD,
			{"textDocument": {"uri": document.uri}, "position": document.position.to_lsp()},
		)
		if not items:
			msg = "Not in a call hierarchy"
			raise RootEmptyError(msg)
		return [self._node_from_item(item) for item in items]

	def fetch(self, node: HierarchyNode, direction: Direction | None = None) -> FetchResult:  # noqa: ARG002
		"""Fetch callers or callees of ``node`` in server order."""
		try:
			calls = self.connection.request(self.method, {"item": node.item})
		except LSPRequestError as e:
			logger.debug("%s for %s failed: %s", self.method, node.name, e.message)
			return Failure(e.message)

		related_key = "to" if self.outgoing else "from"
		children = []
		for call in calls or []:
			item = call.get(related_key)
			if not item:
				logger.debug("Skipping call record without %r: %s", related_key, call)
				continue
			from_ranges = tuple(Range.from_lsp(r) for r in call.get("fromRanges") or [])
			children.append(self._node_from_item(item, from_ranges))
		return Success(tuple(children))

	@staticmethod
	def _node_from_item(item: dict[str, Any], from_ranges: tuple[Range, ...] = ()) -> HierarchyNode:
		return HierarchyNode(
			name=item.get("name", ""),
			uri=item.get("uri", ""),
			range=Range.from_lsp(item.get("range")),
			kind=HierarchyKind.CALL,
			selection_range=Range.from_lsp(item.get("selectionRange") or item.get("range")),
			direction=NodeDirection.NONE,
			from_ranges=from_ranges,
			detail=item.get("detail"),
			item=item,
		)
