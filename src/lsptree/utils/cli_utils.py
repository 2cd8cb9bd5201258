"""Utility functions for CLI operations in lsptree."""

from __future__ import annotations

import contextlib
import logging
import os
from typing import TYPE_CHECKING, Self
from urllib.parse import unquote, urlparse

import typer
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree as RichTree

from lsptree.hierarchy.models import HierarchyKind, NodeDirection
from lsptree.utils.log_setup import display_error_summary

if TYPE_CHECKING:
	from collections.abc import Iterator

	from lsptree.hierarchy.models import HierarchyNode, NavigationTarget
	from lsptree.hierarchy.service import HierarchyView

console = Console()
logger = logging.getLogger(__name__)

DIRECTION_MARKERS = {
	NodeDirection.SUPER: "[cyan]▲[/cyan] ",
	NodeDirection.SUB: "[magenta]▼[/magenta] ",
	NodeDirection.NONE: "",
}


class SpinnerState:
	"""Singleton class to track spinner state."""

	_instance = None
	is_active = False

	def __new__(cls) -> Self:
		"""
		Create or return the singleton instance.

		Returns:
		    The singleton instance of SpinnerState

		"""
		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance


@contextlib.contextmanager
def loading_spinner(message: str = "Processing...") -> Iterator[None]:
	"""
	Display a loading spinner while executing a task.

	Args:
	    message: Message to display alongside the spinner

	Yields:
	    None

	"""
	if os.environ.get("PYTEST_CURRENT_TEST") or os.environ.get("CI"):
		yield
		return

	spinner_state = SpinnerState()
	if spinner_state.is_active:
		yield
		return

	try:
		spinner_state.is_active = True
		with console.status(message):
			yield
	finally:
		spinner_state.is_active = False


def show_error(message: str, exception: Exception | None = None) -> None:
	"""
	Display an error summary with standardized formatting.

	Args:
	        message: The error message to display
	        exception: Optional exception that caused the error

	"""
	error_text = message
	if exception:
		error_text += f"\n\nDetails: {exception!s}"
		logger.exception("Error occurred", exc_info=exception)

	display_error_summary(error_text)


def exit_with_error(message: str, exit_code: int = 1, exception: Exception | None = None) -> None:
	"""
	Display an error message and exit.

	Args:
	        message: Error message to display
	        exit_code: Exit code to use
	        exception: Optional exception that caused the error

	"""
	show_error(message, exception)
	raise typer.Exit(exit_code) from exception


class ConsoleMessenger:
	"""Messenger printing hierarchy failures to the console."""

	def __init__(self, out: Console | None = None) -> None:
		self.out = out or console
		self.messages: list[str] = []
		self.status: str | None = None

	def error(self, text: str) -> None:
		"""Print one red line with the server's error text."""
		self.messages.append(text)
		self.status = text
		self.out.print(f"[red]Error:[/red] {escape(text)}")

	def clear_status(self) -> None:
		"""Forget the last error so it is not shown as the current status."""
		self.status = None


def uri_to_display_path(uri: str) -> str:
	"""Turn a ``file://`` URI into a local path, leaving other schemes alone."""
	parsed = urlparse(uri)
	if parsed.scheme != "file":
		return uri
	return unquote(parsed.path)


def format_target(target: NavigationTarget) -> str:
	"""Render a navigation target as ``path:line:col`` with one-based numbers."""
	path = uri_to_display_path(target.uri)
	return f"{path}:{target.position.line + 1}:{target.position.character + 1}"


def node_label(view: HierarchyView, node: HierarchyNode, call_site_preferred: bool = False) -> str:
	"""Rich markup label for one node."""
	marker = DIRECTION_MARKERS[node.direction] if view.kind is HierarchyKind.TYPE else ""
	label = f"{marker}[bold]{escape(node.name)}[/bold]"
	if node.detail:
		label += f" [dim]{escape(node.detail)}[/dim]"
	if node.from_ranges:
		sites = len(node.from_ranges)
		label += f" [yellow]({sites} call site{'s' if sites != 1 else ''})[/yellow]"
	if view.tree.failed(node):
		label += " [red](failed)[/red]"
	target = view.target(node, call_site_preferred)
	return f"{label} [blue]{escape(format_target(target))}[/blue]"


def render_tree(view: HierarchyView, title: str, call_site_preferred: bool = False) -> RichTree:
	"""
	Build a rich tree from the realized part of a hierarchy.

	Args:
	    view: The built hierarchy.
	    title: Label of the synthetic top node.
	    call_site_preferred: Passed to the navigation resolver for targets.

	Returns:
	    RichTree: Ready to print.

	"""
	top = RichTree(title, guide_style="dim")
	branches: list[RichTree] = [top]
	for node, depth in view.tree.walk():
		# walk() is depth first, so the parent branch is always at index depth
		del branches[depth + 1 :]
		branches.append(branches[depth].add(node_label(view, node, call_site_preferred)))
	return top
