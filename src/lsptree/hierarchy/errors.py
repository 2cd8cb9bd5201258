"""Error taxonomy and fetch results for hierarchy building."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from lsptree.hierarchy.models import HierarchyNode


class HierarchyError(Exception):
	"""Base exception for hierarchy operations."""


class CapabilityMissingError(HierarchyError):
	"""The language server does not provide the required hierarchy capability."""

	def __init__(self, capability: str) -> None:
		self.capability = capability
		super().__init__(f"Language server does not support {capability}")


class RootEmptyError(HierarchyError):
	"""The root request returned no symbol or no candidate items."""


class LSPRequestError(HierarchyError):
	"""A request failed in the transport or was answered with an error."""

	def __init__(self, message: str, code: int | None = None) -> None:
		self.message = message
		self.code = code
		super().__init__(message)


@dataclass(frozen=True)
class Success:
	"""Children fetched for a node."""

	children: tuple[HierarchyNode, ...]


@dataclass(frozen=True)
class Failure:
	"""A contained node fetch failure carrying the server's error text."""

	message: str


FetchResult = Success | Failure
