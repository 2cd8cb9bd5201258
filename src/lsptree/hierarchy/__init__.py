"""Type and call hierarchy trees built from language-server replies."""

from lsptree.hierarchy.adapters import CallHierarchyAdapter, HierarchyAdapter, TypeHierarchyAdapter
from lsptree.hierarchy.connection import LanguageServerConnection, MultilspyConnection, open_connection
from lsptree.hierarchy.errors import (
	CapabilityMissingError,
	Failure,
	FetchResult,
	HierarchyError,
	LSPRequestError,
	RootEmptyError,
	Success,
)
from lsptree.hierarchy.models import (
	Direction,
	HierarchyKind,
	HierarchyNode,
	NavigationTarget,
	NodeDirection,
	Position,
	Range,
)
from lsptree.hierarchy.navigation import resolve_target
from lsptree.hierarchy.service import DocumentContext, HierarchyView, show_call_hierarchy, show_type_hierarchy
from lsptree.hierarchy.tree import LoggingMessenger, Messenger, Tree, build

__all__ = [
	"CallHierarchyAdapter",
	"CapabilityMissingError",
	"Direction",
	"DocumentContext",
	"Failure",
	"FetchResult",
	"HierarchyAdapter",
	"HierarchyError",
	"HierarchyKind",
	"HierarchyNode",
	"HierarchyView",
	"LSPRequestError",
	"LanguageServerConnection",
	"LoggingMessenger",
	"Messenger",
	"MultilspyConnection",
	"NavigationTarget",
	"NodeDirection",
	"Position",
	"Range",
	"RootEmptyError",
	"Success",
	"Tree",
	"TypeHierarchyAdapter",
	"build",
	"open_connection",
	"resolve_target",
	"show_call_hierarchy",
	"show_type_hierarchy",
]
