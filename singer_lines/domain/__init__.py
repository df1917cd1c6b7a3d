"""
Domain package for singer-lines.

Exports the message models, the payload canonicalizer and the error taxonomy.
Keep this package free of I/O; sinks and line handling live elsewhere.
"""

from singer_lines.domain.canonical import decode_object, encode_json
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

__all__ = [
    "decode_object",
    "encode_json",
    "InvalidMessage",
    "MalformedPayload",
    "MissingField",
    "SingerError",
    "SinkWriteFailure",
    "UnknownMessageType",
    "ActivateVersionMessage",
    "Message",
    "RecordMessage",
    "SchemaMessage",
    "StateMessage",
]
