"""
singer-lines - line-delimited JSON messages for data extraction pipelines.

A tap (extraction process) streams four kinds of messages to a downstream
consumer, one JSON object per line:

- RECORD: one data row of a named stream
- SCHEMA: the structure of a stream plus its key and bookmark properties
- STATE: a checkpoint snapshot used to resume extraction
- ACTIVATE_VERSION: a signal to cut a stream over to a new table version

The package provides the message models, a writer over an injected sink, and a
parser for the consumer side.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from singer_lines.config import Settings, get_settings
from singer_lines.domain.errors import (
    InvalidMessage,
    MalformedPayload,
    MissingField,
    SingerError,
    SinkWriteFailure,
    UnknownMessageType,
)
from singer_lines.domain.models import (
    ActivateVersionMessage,
    Message,
    RecordMessage,
    SchemaMessage,
    StateMessage,
)
from singer_lines.infrastructure.sinks import Sink, open_sink, open_writer
from singer_lines.inspector import StreamSummary, inspect_lines
from singer_lines.protocol.reader import iter_messages, parse_message
from singer_lines.protocol.writer import MessageWriter, serialize_message
from singer_lines.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Messages
    "ActivateVersionMessage",
    "Message",
    "RecordMessage",
    "SchemaMessage",
    "StateMessage",
    # Errors
    "InvalidMessage",
    "MalformedPayload",
    "MissingField",
    "SingerError",
    "SinkWriteFailure",
    "UnknownMessageType",
    # Reading and writing
    "MessageWriter",
    "Sink",
    "iter_messages",
    "open_sink",
    "open_writer",
    "parse_message",
    "serialize_message",
    # Inspection
    "StreamSummary",
    "inspect_lines",
    # Logging
    "configure_logging",
    "get_logger",
]
