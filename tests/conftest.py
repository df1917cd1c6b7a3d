"""
Pytest configuration for singer-lines.

Provides fixtures for:
- In-memory sinks and writers
- Settings override through environment variables
- Logging isolation for CLI tests
"""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path
from typing import Any, Callable, Generator, List

import pytest

from singer_lines.config import get_settings
from singer_lines.protocol.writer import MessageWriter

USERS_SCHEMA = b'{"type": "object", "properties": {"name": {"type": "string"}}}'


@pytest.fixture
def sink() -> io.BytesIO:
    """
    In-memory binary sink standing in for stdout.
    """
    return io.BytesIO()


@pytest.fixture
def writer(sink: io.BytesIO) -> MessageWriter:
    return MessageWriter(sink)


@pytest.fixture
def users_schema() -> bytes:
    return USERS_SCHEMA


@pytest.fixture
def settings_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[pytest.MonkeyPatch, None, None]:
    """
    Isolate settings from the host environment and any local `.env` file.

    Tests set variables on the returned monkeypatch; the settings cache is
    cleared before and after so each test sees its own values.
    """
    for name in ("SINGER_OUTPUT", "SINGER_FLUSH", "LOG_LEVEL", "LOG_JSON"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """
    Restore root logger handlers after tests that call configure_logging.
    """
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _decode_lines(data: bytes) -> List[Any]:
    text = data.decode("utf-8")
    assert text.endswith("\n"), "output must end with a line terminator"
    return [json.loads(line) for line in text.splitlines()]


@pytest.fixture
def decode_lines() -> Callable[[bytes], List[Any]]:
    """
    Split sink output into lines and decode each one as JSON.
    """
    return _decode_lines
