"""
Line writer for singer-lines messages.

Each call renders one message as a single line of compact JSON and hands the
whole line to the sink in one `write` call. A lock around the write keeps lines
from different threads sharing a writer from interleaving.

Usage:
    import sys
    from singer_lines.protocol.writer import MessageWriter

    writer = MessageWriter(sys.stdout.buffer)
    writer.write_schema("users", b'{"type": "object"}', key_properties=["id"])
    writer.write_records("users", [b'{"id": 1}', b'{"id": 2}'])
    writer.write_state(b'{"users": 2}')
"""

from __future__ import annotations

import threading
import weakref
from datetime import datetime
from typing import Iterable, Optional

from singer_lines.domain.canonical import RawJson, encode_json, to_utf8
from singer_lines.domain.errors import SinkWriteFailure
from singer_lines.domain.models import (
    ActivateVersionMessage,
    Message,
    RecordMessage,
    SchemaMessage,
    StateMessage,
)
from singer_lines.infrastructure.sinks import Sink
from singer_lines.utils.logging import get_logger

log = get_logger(__name__)

LINE_TERMINATOR = "\n"

# One lock per sink object, shared by every writer over that sink.
_SINK_LOCKS: "weakref.WeakKeyDictionary[Sink, threading.Lock]" = weakref.WeakKeyDictionary()
_SINK_LOCKS_GUARD = threading.Lock()


def _lock_for(sink: Sink) -> threading.Lock:
    with _SINK_LOCKS_GUARD:
        try:
            lock = _SINK_LOCKS.get(sink)
            if lock is None:
                lock = _SINK_LOCKS[sink] = threading.Lock()
            return lock
        except TypeError:
            # Sinks that cannot be weakly referenced or hashed get a lock of their own
            return threading.Lock()


def serialize_message(message: Message) -> str:
    """Render a message as one line of JSON, without the terminator."""
    return encode_json(message.as_wire())


class MessageWriter:
    """
    Writes messages to a sink, one line per message.

    The writer keeps no state between calls apart from the sink reference.
    Writers over the same sink object share one lock, so lines from
    different threads or writers never interleave.

    Parameters
    ----------
    sink : Sink
        Binary destination; receives exactly one complete line per write.
    flush : bool
        Flush the sink after every line when it supports `flush()`.
    """

    def __init__(self, sink: Sink, *, flush: bool = True) -> None:
        self._sink = sink
        self._flush = flush
        self._lock = _lock_for(sink)

    @property
    def sink(self) -> Sink:
        return self._sink

    def write_message(self, message: Message) -> None:
        """
        Serialize `message` and append it to the sink as one line.

        Raises
        ------
        SinkWriteFailure
            If the sink raises, or accepts fewer bytes than the line holds.
        """
        data = to_utf8(serialize_message(message) + LINE_TERMINATOR)
        stream = getattr(message, "stream", None)
        with self._lock:
            try:
                written = self._sink.write(data)
                if self._flush and hasattr(self._sink, "flush"):
                    self._sink.flush()
            except (OSError, ValueError) as exc:
                log.error(
                    "Sink rejected message",
                    extra={"message_type": message.type, "stream": stream, "error": str(exc)},
                )
                raise SinkWriteFailure(
                    "sink rejected write",
                    context={"message_type": message.type, "stream": stream},
                    cause=exc,
                ) from exc
        if written is not None and written != len(data):
            log.error(
                "Sink accepted a partial line",
                extra={"message_type": message.type, "written": written, "expected": len(data)},
            )
            raise SinkWriteFailure(
                "sink accepted a partial line",
                context={
                    "message_type": message.type,
                    "stream": stream,
                    "written": written,
                    "expected": len(data),
                },
            )
        log.debug(
            "Wrote message",
            extra={"message_type": message.type, "stream": stream, "bytes": len(data)},
        )

    def write_record(
        self,
        stream: str,
        raw_record: RawJson,
        version: str = "",
        time_extracted: Optional[datetime] = None,
    ) -> None:
        """Write one RECORD built from raw JSON bytes."""
        self.write_message(
            RecordMessage.from_raw(
                stream, raw_record, version=version, time_extracted=time_extracted
            )
        )

    def write_records(
        self,
        stream: str,
        raw_records: Iterable[RawJson],
        version: str = "",
        time_extracted: Optional[datetime] = None,
    ) -> int:
        """
        Write each payload as its own RECORD, in order.

        Stops at the first failure and re-raises it; lines already written stay
        on the sink. Returns the number of records written.
        """
        count = 0
        for raw_record in raw_records:
            self.write_record(stream, raw_record, version=version, time_extracted=time_extracted)
            count += 1
        return count

    def write_schema(
        self,
        stream: str,
        raw_schema: RawJson,
        key_properties: Iterable[str] = (),
        bookmark_properties: Iterable[str] = (),
    ) -> None:
        """Write one SCHEMA built from raw JSON bytes."""
        self.write_message(
            SchemaMessage.from_raw(
                stream,
                raw_schema,
                key_properties=key_properties,
                bookmark_properties=bookmark_properties,
            )
        )

    def write_state(self, raw_value: RawJson) -> None:
        """Write one STATE built from raw JSON bytes."""
        self.write_message(StateMessage.from_raw(raw_value))

    def write_activate_version(self, stream: str, version: str) -> None:
        """Write one ACTIVATE_VERSION message."""
        self.write_message(ActivateVersionMessage(stream=stream, version=version))


__all__ = ["LINE_TERMINATOR", "MessageWriter", "serialize_message"]
