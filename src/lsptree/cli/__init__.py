"""Command-line interface package for lsptree."""

from __future__ import annotations

import datetime
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from lsptree import __version__
from lsptree.utils.log_setup import setup_logging

from .hierarchy_cmd import register_command as register_hierarchy_commands

logger = logging.getLogger(__name__)

app = typer.Typer(
	help=f"lsptree - type and call hierarchies from your language server\n\nVersion: {__version__}",
	no_args_is_help=True,
	context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
	"""Callback for --version option."""
	if value:
		typer.echo(f"lsptree version: {__version__}")
		raise typer.Exit


@app.callback(invoke_without_command=True)
def global_options(
	ctx: typer.Context,
	is_verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")] = False,
	is_output_log: Annotated[
		bool,
		typer.Option(
			"--save-log",
			help="Enable logging to a file. Logs to logs/lsptree_{datetime}.log.",
		),
	] = False,
	trace_lsp: Annotated[
		bool,
		typer.Option("--trace-lsp", help="Print language-server requests and responses to the console."),
	] = False,
	_version: Annotated[
		bool | None,
		typer.Option("--version", help="Show version and exit.", callback=_version_callback, is_eager=True),
	] = None,
) -> None:
	"""Global CLI options and logging setup."""
	ctx.meta["is_verbose"] = is_verbose
	ctx.meta["is_output_log"] = is_output_log

	log_file_path_to_use: Path | None = None
	if is_output_log:
		log_dir = Path("logs")
		log_dir.mkdir(parents=True, exist_ok=True)
		current_time = datetime.datetime.now(tz=datetime.UTC).strftime("%Y-%m-%d_%H-%M-%S")
		log_file_path_to_use = log_dir / f"lsptree_{current_time}.log"

	setup_logging(is_verbose=is_verbose, log_file_path=log_file_path_to_use, trace_lsp=trace_lsp)


register_hierarchy_commands(app)


def main() -> int:
	"""Run the CLI application."""
	return app()


if __name__ == "__main__":
	sys.exit(main())
