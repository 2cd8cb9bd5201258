"""Language-server connections used by the hierarchy adapters."""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Protocol

from multilspy import SyncLanguageServer
from multilspy.multilspy_config import MultilspyConfig
from multilspy.multilspy_logger import MultilspyLogger

from lsptree.hierarchy.errors import LSPRequestError

if TYPE_CHECKING:
	from collections.abc import Iterator, Mapping
	from pathlib import Path

logger = logging.getLogger(__name__)
# Request and response dumps, shown on the console only with --trace-lsp
traffic_logger = logging.getLogger("lsptree.lsp")

TYPE_HIERARCHY_CAPABILITY = "typeHierarchyProvider"
CALL_HIERARCHY_CAPABILITY = "callHierarchyProvider"


class LanguageServerConnection(Protocol):
	"""The request/response primitive the adapters talk to."""

	def capable(self, capability: str) -> bool:
		"""Return whether the server advertises ``capability``."""
		...

	def request(self, method: str, params: dict[str, Any]) -> Any:  # noqa: ANN401
		"""
		Send a request and block until the server replies.

		Raises:
		        LSPRequestError: If the server answers with an error or the
		                transport fails.

		"""
		...


class MultilspyConnection:
	"""
	Connection backed by a started ``multilspy.SyncLanguageServer``.

	multilspy does not expose the server's ``initialize`` reply, so
	``capable`` answers from the ``capabilities`` mapping given here (the
	``server.capabilities`` config section in the CLI), not from what the
	server actually advertises.

	"""

	def __init__(
		self,
		server: SyncLanguageServer,
		capabilities: Mapping[str, Any] | None = None,
		timeout: float | None = None,
	) -> None:
		"""
		Initialize the connection.

		Args:
		    server: A language server whose ``start_server`` context is active.
		    capabilities: Server capabilities keyed by LSP capability name.
		    timeout: Seconds to wait for each reply, ``None`` waits forever.

		"""
		self.server = server
		self.capabilities = dict(capabilities or {})
		self.timeout = timeout

	def capable(self, capability: str) -> bool:
		"""Return whether ``capability`` is present and enabled."""
		return bool(self.capabilities.get(capability))

	def request(self, method: str, params: dict[str, Any]) -> Any:  # noqa: ANN401
		"""Send ``method`` on the server's event loop and wait for the reply."""
		loop = self.server.loop
		if loop is None:
			msg = "Language server is not running"
			raise LSPRequestError(msg)

		traffic_logger.debug("--> %s %s", method, params)
		coroutine = self.server.language_server.server.send_request(method, params)
		future = asyncio.run_coroutine_threadsafe(coroutine, loop)
		try:
			result = future.result(self.timeout)
		except TimeoutError as e:
			future.cancel()
			msg = f"{method} timed out after {self.timeout}s"
			raise LSPRequestError(msg) from e
		except Exception as e:
			raise LSPRequestError(_error_message(e), getattr(e, "code", None)) from e

		traffic_logger.debug("<-- %s %s", method, result)
		return result


def _error_message(error: BaseException) -> str:
	"""Extract the server's error text from a multilspy error."""
	message = getattr(error, "message", None)
	if isinstance(message, str) and message:
		return message
	return str(error) or type(error).__name__


@contextmanager
def open_connection(
	project_root: Path,
	language: str,
	relative_path: str,
	capabilities: Mapping[str, Any] | None = None,
	timeout: float | None = None,
) -> Iterator[MultilspyConnection]:
	"""
	Start a language server for ``project_root`` with one document open.

	Args:
	    project_root: Root directory of the project.
	    language: multilspy ``code_language`` name.
	    relative_path: Document to open, relative to ``project_root``.
	    capabilities: Capabilities reported by ``capable``.
	    timeout: Per-request timeout in seconds.

	Yields:
	    MultilspyConnection: The live connection.

	"""
	config = MultilspyConfig.from_dict({"code_language": language})
	server = SyncLanguageServer.create(config, MultilspyLogger(), str(project_root))
	logger.debug("Starting %s language server in %s", language, project_root)

	with server.start_server(), server.open_file(relative_path):
		yield MultilspyConnection(server, capabilities=capabilities, timeout=timeout)

	logger.debug("Language server for %s stopped", project_root)
