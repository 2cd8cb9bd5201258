"""Global test fixtures and configuration."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator

import pytest

from lsptree.utils.config_loader import ConfigLoader
from tests.helpers import FakeConnection, RecordingMessenger


@pytest.fixture
def connection() -> FakeConnection:
    """A fake connection advertising both hierarchy capabilities."""
    return FakeConnection()


@pytest.fixture
def messenger() -> RecordingMessenger:
    """A messenger recording every error."""
    return RecordingMessenger()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the ConfigLoader singleton and LSPTREE_* variables from leaking between tests."""
    monkeypatch.setattr(ConfigLoader, "_instance", None)
    for name in list(os.environ):
        if name.startswith("LSPTREE_"):
            monkeypatch.delenv(name)


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """Put the root logger back after setup_logging replaces its handlers."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
