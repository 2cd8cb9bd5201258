"""Type definitions for CLI parameters."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

FileArg = Annotated[
	Path,
	typer.Argument(
		exists=True,
		dir_okay=False,
		help="Source file containing the symbol",
	),
]

LineArg = Annotated[
	int,
	typer.Argument(min=1, help="1-based line of the symbol"),
]

ColumnArg = Annotated[
	int,
	typer.Argument(min=1, help="1-based column of the symbol"),
]

RootOpt = Annotated[
	Path | None,
	typer.Option(
		"--root",
		"-r",
		file_okay=False,
		help="Project root the language server runs in (defaults to the current directory)",
	),
]

LanguageOpt = Annotated[
	str | None,
	typer.Option(
		"--language",
		"-l",
		help="Language server to start (overrides config)",
	),
]

DepthOpt = Annotated[
	int | None,
	typer.Option(
		"--depth",
		"-d",
		min=0,
		help="Levels to expand before printing (overrides config)",
	),
]

ConfigOpt = Annotated[
	Path | None,
	typer.Option(
		"--config",
		"-c",
		help="Path to config file",
	),
]

OutgoingFlag = Annotated[
	bool,
	typer.Option(
		"--outgoing",
		"-o",
		help="Show callees instead of callers",
	),
]

CallSiteFlag = Annotated[
	bool,
	typer.Option(
		"--call-site",
		help="Show the first call site instead of the declaration as target",
	),
]
