"""
Logging setup for lsptree.

The console handler goes through rich and shows WARNING and above, or
DEBUG with ``--verbose``. Language-server traffic is logged on its own
``lsptree.lsp`` channel, which the console hides unless ``--trace-lsp``
is given because every request and response is dumped there. An
optional log file always captures everything, traffic included.

"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.rule import Rule
from rich.text import Text

console = Console()
logger = logging.getLogger(__name__)

# Request/response dumps from the language server connection
LSP_TRAFFIC_LOGGER = "lsptree.lsp"

# Third-party loggers that are noisy below WARNING
QUIET_LOGGERS = ("multilspy", "asyncio")

FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s"


class ConsoleFilter(logging.Filter):
	"""Level filter for the console that treats LSP traffic separately."""

	def __init__(self, level: int, trace_lsp: bool = False) -> None:
		super().__init__()
		self.level = level
		self.trace_lsp = trace_lsp

	def filter(self, record: logging.LogRecord) -> bool:
		"""Pass traffic only when tracing, everything else by level."""
		if record.name == LSP_TRAFFIC_LOGGER or record.name.startswith(f"{LSP_TRAFFIC_LOGGER}."):
			return self.trace_lsp
		return record.levelno >= self.level


def setup_logging(
	is_verbose: bool = False,
	log_to_console: bool = True,
	log_file_path: Path | str | None = None,
	trace_lsp: bool = False,
) -> None:
	"""
	Set up logging configuration.

	Args:
	    is_verbose: Show DEBUG records on the console
	    log_to_console: Whether to log to the console
	    log_file_path: Optional path to a file that receives every record
	    trace_lsp: Show language-server requests and responses on the console

	"""
	console_level = logging.DEBUG if is_verbose else logging.WARNING

	root_logger = logging.getLogger()
	needs_debug = is_verbose or trace_lsp or log_file_path is not None
	root_logger.setLevel(logging.DEBUG if needs_debug else console_level)

	# Called once per CLI invocation, replace whatever was installed before
	for handler in root_logger.handlers[:]:
		root_logger.removeHandler(handler)

	if log_to_console:
		console_handler = RichHandler(
			level=logging.DEBUG,
			console=Console(stderr=True),
			rich_tracebacks=True,
			show_time=True,
			show_path=is_verbose,
		)
		console_handler.addFilter(ConsoleFilter(console_level, trace_lsp=trace_lsp))
		root_logger.addHandler(console_handler)

	if log_file_path is not None:
		_add_file_handler(root_logger, Path(log_file_path))

	if not is_verbose:
		for name in QUIET_LOGGERS:
			logging.getLogger(name).setLevel(logging.WARNING)


def _add_file_handler(root_logger: logging.Logger, path: Path) -> None:
	try:
		path.parent.mkdir(parents=True, exist_ok=True)
		file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
	except OSError as e:
		logger.warning("Cannot write log file %s: %s", path, e)
		return

	file_handler.setLevel(logging.DEBUG)
	file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
	root_logger.addHandler(file_handler)
	logger.debug("Logging to file: %s", path)


def display_error_summary(error_message: str) -> None:
	"""
	Display an error summary with a divider and a title.

	Args:
	        error_message: The error message to display

	"""
	title = Text("Error Summary", style="bold red")

	console.print()
	console.print(Rule(title, style="red"))
	console.print(f"\n{error_message}\n", markup=False)
	console.print(Rule(style="red"))
	console.print()
