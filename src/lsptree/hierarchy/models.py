"""Data models for hierarchy nodes built from LSP replies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any


class Direction(IntEnum):
	"""Which relations a type-hierarchy request asks for.

	Values are the wire values of the ``textDocument/typeHierarchy``
	extension (clangd, ccls).
	"""

	SUB = 0
	SUPER = 1
	BOTH = 2

	@property
	def wants_super(self) -> bool:
		"""Whether parents are requested."""
		return self in (Direction.SUPER, Direction.BOTH)

	@property
	def wants_sub(self) -> bool:
		"""Whether children are requested."""
		return self in (Direction.SUB, Direction.BOTH)


class NodeDirection(Enum):
	"""Which relation produced an already placed node."""

	SUB = "sub"
	SUPER = "super"
	NONE = "none"


class HierarchyKind(Enum):
	"""The hierarchy a node belongs to."""

	TYPE = "type"
	CALL = "call"


@dataclass(frozen=True)
class Position:
	"""A zero-based position in a text document."""

	line: int
	"""Zero-based line number."""

	character: int
	"""Zero-based character offset within the line."""

	@classmethod
	def from_lsp(cls, data: dict[str, Any]) -> Position:
		"""Parse an LSP ``Position`` object."""
		return cls(line=int(data.get("line", 0)), character=int(data.get("character", 0)))

	def to_lsp(self) -> dict[str, int]:
		"""Serialize to an LSP ``Position`` object."""
		return {"line": self.line, "character": self.character}


@dataclass(frozen=True)
class Range:
	"""A start/end pair of positions."""

	start: Position
	end: Position

	@classmethod
	def from_lsp(cls, data: dict[str, Any] | None) -> Range:
		"""
		Parse an LSP ``Range`` object.

		A missing range collapses to the document start, which keeps nodes
		from servers that omit ranges navigable.

		"""
		data = data or {}
		return cls(
			start=Position.from_lsp(data.get("start") or {}),
			end=Position.from_lsp(data.get("end") or {}),
		)

	def to_lsp(self) -> dict[str, dict[str, int]]:
		"""Serialize to an LSP ``Range`` object."""
		return {"start": self.start.to_lsp(), "end": self.end.to_lsp()}


@dataclass
class HierarchyNode:
	"""
	A node in a type or call hierarchy tree.

	Nodes are not deduplicated: the same symbol may appear several times
	in one tree (diamond inheritance, recursion). Trees key their cached
	children by node identity, never by value.

	"""

	name: str
	"""Display label."""

	uri: str
	"""URI of the containing file, scheme defined by the server."""

	range: Range
	"""The node's defining source range."""

	kind: HierarchyKind
	"""Which hierarchy this node came from."""

	selection_range: Range | None = None
	"""Sub-range to highlight or jump to (call hierarchy)."""

	direction: NodeDirection = NodeDirection.NONE
	"""Relation that produced this node (type hierarchy)."""

	from_ranges: tuple[Range, ...] = ()
	"""Call-site ranges within the caller (call hierarchy)."""

	detail: str | None = None
	"""Optional server-supplied detail, e.g. a signature."""

	item: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)
	"""The raw server item, sent back verbatim on follow-up requests."""

	@property
	def position(self) -> Position:
		"""Start of the defining range."""
		return self.range.start

	@property
	def label(self) -> str:
		"""Display label including the detail, if any."""
		if self.detail:
			return f"{self.name} {self.detail}"
		return self.name


@dataclass(frozen=True)
class NavigationTarget:
	"""Where the file opener should move the cursor."""

	uri: str
	position: Position

	def __str__(self) -> str:
		"""Render as ``uri:line:col`` with one-based numbers."""
		return f"{self.uri}:{self.position.line + 1}:{self.position.character + 1}"
