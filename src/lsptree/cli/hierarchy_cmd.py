"""
Implementation of the ``types`` and ``calls`` commands.

Both commands start a language server for the project, build the
hierarchy at the given position and print it as a tree. Each printed
node shows the location the navigation resolver would jump to.

"""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from lsptree.cli.cli_types import (
	CallSiteFlag,
	ColumnArg,
	ConfigOpt,
	DepthOpt,
	FileArg,
	LanguageOpt,
	LineArg,
	OutgoingFlag,
	RootOpt,
)
from lsptree.hierarchy.connection import open_connection
from lsptree.hierarchy.models import HierarchyKind, Position
from lsptree.hierarchy.service import DocumentContext, show_call_hierarchy, show_type_hierarchy
from lsptree.utils.cli_utils import ConsoleMessenger, console, exit_with_error, loading_spinner, render_tree
from lsptree.utils.config_loader import ConfigError, ConfigLoader

logger = logging.getLogger(__name__)


def register_command(app: typer.Typer) -> None:
	"""Register the hierarchy commands with the CLI app."""

	@app.command(name="types")
	def types_command(
		file: FileArg,
		line: LineArg,
		column: ColumnArg,
		root: RootOpt = None,
		language: LanguageOpt = None,
		depth: DepthOpt = None,
		config: ConfigOpt = None,
	) -> None:
		"""Show the supertypes and subtypes of the symbol at FILE:LINE:COLUMN."""
		_hierarchy_command_impl(
			kind=HierarchyKind.TYPE,
			file=file,
			line=line,
			column=column,
			root=root,
			language=language,
			depth=depth,
			config=config,
		)

	@app.command(name="calls")
	def calls_command(
		file: FileArg,
		line: LineArg,
		column: ColumnArg,
		outgoing: OutgoingFlag = False,
		call_site: CallSiteFlag = False,
		root: RootOpt = None,
		language: LanguageOpt = None,
		depth: DepthOpt = None,
		config: ConfigOpt = None,
	) -> None:
		"""Show the callers (or callees) of the function at FILE:LINE:COLUMN."""
		_hierarchy_command_impl(
			kind=HierarchyKind.CALL,
			file=file,
			line=line,
			column=column,
			root=root,
			language=language,
			depth=depth,
			config=config,
			outgoing=outgoing,
			call_site=call_site,
		)


def _hierarchy_command_impl(
	kind: HierarchyKind,
	file: Path,
	line: int,
	column: int,
	root: Path | None = None,
	language: str | None = None,
	depth: int | None = None,
	config: Path | None = None,
	outgoing: bool = False,
	call_site: bool = False,
) -> None:
	"""
	Build and print one hierarchy.

	Args:
	    kind: Type or call hierarchy.
	    file: Source file containing the symbol.
	    line: 1-based line.
	    column: 1-based column.
	    root: Project root, defaults to the current directory.
	    language: multilspy language, overrides config.
	    depth: Levels printed, overrides ``hierarchy.render_depth``.
	    config: Explicit config file.
	    outgoing: Callees instead of callers, on top of ``hierarchy.outgoing``.
	    call_site: Prefer call sites as targets, on top of ``hierarchy.call_site_preferred``.

	"""
	try:
		config_loader = ConfigLoader.get_instance(str(config) if config else None, reload=config is not None)
	except ConfigError as e:
		exit_with_error("Could not load configuration", exception=e)

	hierarchy_config = config_loader.get_hierarchy_config()
	server_config = config_loader.get_server_config()

	project_root = (root or Path.cwd()).resolve()
	file_path = file.resolve()
	try:
		relative_path = str(file_path.relative_to(project_root))
	except ValueError:
		exit_with_error(f"{file_path} is not inside the project root {project_root}")

	language = language or server_config["language"]
	render_depth = hierarchy_config["render_depth"] if depth is None else depth
	outgoing = outgoing or hierarchy_config["outgoing"]
	call_site_preferred = call_site or hierarchy_config["call_site_preferred"]
	timeout = server_config["request_timeout"] or None

	context = DocumentContext(uri=file_path.as_uri(), position=Position(line - 1, column - 1))
	messenger = ConsoleMessenger()
	logger.info("Requesting %s hierarchy at %s:%d:%d", kind.value, relative_path, line, column)

	rendered = None
	try:
		with (
			loading_spinner(f"Starting {language} language server..."),
			open_connection(
				project_root,
				language,
				relative_path,
				capabilities=server_config["capabilities"],
				timeout=timeout,
			) as connection,
		):
			if kind is HierarchyKind.TYPE:
				view = show_type_hierarchy(
					connection,
					context,
					messenger=messenger,
					depth=hierarchy_config["depth"],
					resolve=hierarchy_config["type_resolve"],
				)
				title = f"Type hierarchy of {relative_path}:{line}:{column}"
			else:
				view = show_call_hierarchy(
					connection,
					context,
					messenger=messenger,
					outgoing=outgoing,
					depth=hierarchy_config["depth"],
				)
				mode = "Outgoing" if outgoing else "Incoming"
				title = f"{mode} calls of {relative_path}:{line}:{column}"

			# Expansion needs the server, so realize everything before it stops
			if view is not None:
				view.tree.expand_all(render_depth)
				rendered = render_tree(view, title, call_site_preferred=call_site_preferred)
	except Exception as e:
		exit_with_error(f"Language server session for {language} failed", exception=e)

	# Terminal conditions were already reported once through the messenger
	if rendered is None:
		raise typer.Exit(1)

	console.print(rendered)
