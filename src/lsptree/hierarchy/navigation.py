"""Resolve a selected hierarchy node to a jump target."""

from __future__ import annotations

from lsptree.hierarchy.models import HierarchyKind, HierarchyNode, NavigationTarget


def resolve_target(node: HierarchyNode, call_site_preferred: bool = False) -> NavigationTarget:
	"""
	Compute where the file opener should jump for ``node``.

	Type nodes always jump to their declaration. Call nodes jump to their
	first call site when ``call_site_preferred`` is set and a call site is
	known, otherwise to their selection range.

	Args:
	    node: The selected node.
	    call_site_preferred: Prefer the first call site over the declaration.

	Returns:
	    NavigationTarget: URI and position; no file is opened here.

	"""
	if node.kind is HierarchyKind.TYPE:
		return NavigationTarget(node.uri, node.range.start)

	if call_site_preferred and node.from_ranges:
		return NavigationTarget(node.uri, node.from_ranges[0].start)

	selection = node.selection_range or node.range
	return NavigationTarget(node.uri, selection.start)
