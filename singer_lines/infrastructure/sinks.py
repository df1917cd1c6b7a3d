"""
Output sink management for singer-lines.

A sink is anything that accepts bytes: a binary file, a pipe, an in-memory
buffer. Sinks are handed to `MessageWriter` explicitly so tests and callers can
redirect output without touching writer code.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Generator, Optional, Protocol, runtime_checkable

from singer_lines.config import Settings, get_settings
from singer_lines.utils.logging import get_logger

if TYPE_CHECKING:
    from singer_lines.protocol.writer import MessageWriter

log = get_logger(__name__)

STDOUT_TARGETS = frozenset({"stdout", "-"})
STDERR_TARGETS = frozenset({"stderr"})


@runtime_checkable
class Sink(Protocol):
    """
    Destination for serialized message lines.

    `write` receives one complete line per call and may return the number of
    bytes accepted; a count smaller than the input is treated as a failure.
    """

    def write(self, data: bytes) -> Optional[int]:
        ...


@contextmanager
def open_sink(target: str) -> Generator[BinaryIO, None, None]:
    """
    Open the sink named by `target`.

    Parameters
    ----------
    target : str
        "stdout" (or "-") and "stderr" select the process streams, which are
        left open on exit. Any other value is a file path opened for appending;
        missing parent directories are created and the file is closed on exit.
    """
    if target in STDOUT_TARGETS:
        yield sys.stdout.buffer
        return
    if target in STDERR_TARGETS:
        yield sys.stderr.buffer
        return

    path = Path(target)
    path.parent.mkdir(parents=True, exist_ok=True)
    log.debug("Opening file sink", extra={"path": str(path)})
    with path.open("ab") as handle:
        yield handle


@contextmanager
def open_writer(settings: Optional[Settings] = None) -> Generator["MessageWriter", None, None]:
    """
    Build a MessageWriter over the sink configured in settings.

    Example
    -------
        with open_writer() as writer:
            writer.write_record("users", b'{"id": 1}')
    """
    from singer_lines.protocol.writer import MessageWriter

    cfg = settings or get_settings()
    with open_sink(cfg.output) as sink:
        yield MessageWriter(sink, flush=cfg.flush)


__all__ = ["Sink", "open_sink", "open_writer"]
