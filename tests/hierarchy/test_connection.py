"""Tests for the multilspy-backed connection."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from multilspy import SyncLanguageServer

from lsptree.hierarchy.connection import MultilspyConnection, open_connection
from lsptree.hierarchy.errors import LSPRequestError


class ServerError(Exception):
    """Mimics a JSON-RPC error raised by the protocol handler."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@pytest.fixture
def event_loop_thread() -> Generator[asyncio.AbstractEventLoop, None, None]:
    """Run an event loop in a background thread, like SyncLanguageServer does."""
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()
    yield loop
    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=5)
    loop.close()


def make_server(loop: asyncio.AbstractEventLoop | None, send_request: Any) -> MagicMock:
    server = MagicMock(spec=SyncLanguageServer)
    server.loop = loop
    server.language_server = MagicMock()
    server.language_server.server.send_request = send_request
    return server


@pytest.mark.unit
class TestMultilspyConnection:
    """Blocking requests through the server's event loop."""

    def test_request_returns_result(self, event_loop_thread: asyncio.AbstractEventLoop) -> None:
        """Test a successful round trip."""
        seen: list[tuple[str, dict]] = []

        async def send_request(method: str, params: dict) -> list[dict]:
            seen.append((method, params))
            return [{"name": "foo"}]

        connection = MultilspyConnection(make_server(event_loop_thread, send_request))

        result = connection.request("textDocument/prepareCallHierarchy", {"position": {"line": 1, "character": 2}})

        assert result == [{"name": "foo"}]
        assert seen == [("textDocument/prepareCallHierarchy", {"position": {"line": 1, "character": 2}})]

    def test_traffic_goes_to_lsp_channel(
        self, event_loop_thread: asyncio.AbstractEventLoop, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that requests and responses are logged on the lsptree.lsp logger."""

        async def send_request(method: str, params: dict) -> dict:
            return {"name": "Base"}

        connection = MultilspyConnection(make_server(event_loop_thread, send_request))

        with caplog.at_level(logging.DEBUG, logger="lsptree.lsp"):
            connection.request("textDocument/typeHierarchy", {})

        traffic = [r.getMessage() for r in caplog.records if r.name == "lsptree.lsp"]
        assert traffic == ["--> textDocument/typeHierarchy {}", "<-- textDocument/typeHierarchy {'name': 'Base'}"]

    def test_server_error_keeps_message_and_code(self, event_loop_thread: asyncio.AbstractEventLoop) -> None:
        """Test that a JSON-RPC error becomes LSPRequestError with the server text."""

        async def send_request(method: str, params: dict) -> None:
            raise ServerError(-32801, "Content modified")

        connection = MultilspyConnection(make_server(event_loop_thread, send_request))

        with pytest.raises(LSPRequestError) as exc_info:
            connection.request("callHierarchy/incomingCalls", {"item": {}})

        assert exc_info.value.message == "Content modified"
        assert exc_info.value.code == -32801

    def test_timeout(self, event_loop_thread: asyncio.AbstractEventLoop) -> None:
        """Test that a slow server surfaces as a request error."""

        async def send_request(method: str, params: dict) -> None:
            await asyncio.sleep(5)

        connection = MultilspyConnection(make_server(event_loop_thread, send_request), timeout=0.05)

        with pytest.raises(LSPRequestError, match="timed out"):
            connection.request("textDocument/typeHierarchy", {})

    def test_stopped_server(self) -> None:
        """Test requests before the server is started."""
        connection = MultilspyConnection(make_server(None, MagicMock()))

        with pytest.raises(LSPRequestError, match="not running"):
            connection.request("textDocument/typeHierarchy", {})

    def test_capabilities(self) -> None:
        """Test capability lookup."""
        connection = MultilspyConnection(
            make_server(None, MagicMock()),
            capabilities={"callHierarchyProvider": {"workDoneProgress": False}, "typeHierarchyProvider": False},
        )

        assert connection.capable("callHierarchyProvider")
        assert not connection.capable("typeHierarchyProvider")
        assert not connection.capable("referencesProvider")


@pytest.mark.unit
def test_open_connection_starts_server_and_opens_file(tmp_path: Path) -> None:
    """Test the server lifecycle around a connection."""
    with patch("lsptree.hierarchy.connection.SyncLanguageServer.create") as mock_create:
        mock_server = MagicMock(spec=SyncLanguageServer)
        mock_create.return_value = mock_server

        with open_connection(tmp_path, "python", "pkg/mod.py", capabilities={"callHierarchyProvider": True}) as conn:
            assert conn.server is mock_server
            assert conn.capable("callHierarchyProvider")
            mock_server.start_server.assert_called_once()
            mock_server.open_file.assert_called_once_with("pkg/mod.py")

        assert mock_create.call_args.args[2] == str(tmp_path)
        mock_server.start_server.return_value.__exit__.assert_called_once()
