"""Shared test helpers: a scripted language-server connection and item builders."""

from __future__ import annotations

from collections import defaultdict
from typing import Any

from lsptree.hierarchy.errors import LSPRequestError

FILE_URI = "file:///repo/src/shapes.py"


def make_range(line: int, character: int = 0, end_character: int | None = None) -> dict[str, Any]:
    """Build an LSP range on a single line."""
    end = character + 1 if end_character is None else end_character
    return {
        "start": {"line": line, "character": character},
        "end": {"line": line, "character": end},
    }


def make_item(name: str, line: int = 0, uri: str = FILE_URI, **extra: Any) -> dict[str, Any]:
    """Build a server-side hierarchy item."""
    item = {
        "name": name,
        "kind": 5,
        "uri": uri,
        "range": make_range(line, 0, 20),
        "selectionRange": make_range(line, 4, 4 + len(name)),
    }
    item.update(extra)
    return item


class FakeConnection:
    """
    Scripted language-server connection.

    Replies are queued per method and consumed in order. A queued
    exception is raised instead of returned.
    """

    def __init__(self, capabilities: dict[str, bool] | None = None) -> None:
        if capabilities is None:
            capabilities = {"typeHierarchyProvider": True, "callHierarchyProvider": True}
        self.capabilities = capabilities
        self.replies: dict[str, list[Any]] = defaultdict(list)
        self.requests: list[tuple[str, dict[str, Any]]] = []

    def reply(self, method: str, *results: Any) -> FakeConnection:
        self.replies[method].extend(results)
        return self

    def fail(self, method: str, message: str) -> FakeConnection:
        self.replies[method].append(LSPRequestError(message))
        return self

    def capable(self, capability: str) -> bool:
        return bool(self.capabilities.get(capability))

    def request(self, method: str, params: dict[str, Any]) -> Any:
        self.requests.append((method, params))
        queue = self.replies[method]
        if not queue:
            return None
        result = queue.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    def calls_to(self, method: str) -> list[dict[str, Any]]:
        return [params for m, params in self.requests if m == method]


class RecordingMessenger:
    """Messenger that records what it was asked to show."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.clears = 0

    def error(self, text: str) -> None:
        self.errors.append(text)

    def clear_status(self) -> None:
        self.clears += 1


