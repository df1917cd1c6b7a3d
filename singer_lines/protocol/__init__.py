"""
Protocol package for singer-lines.

Re-exports the line writer and parser so downstream code can import from
`singer_lines.protocol` directly.
"""

from singer_lines.protocol.reader import iter_messages, parse_message
from singer_lines.protocol.writer import LINE_TERMINATOR, MessageWriter, serialize_message

__all__ = [
    "LINE_TERMINATOR",
    "MessageWriter",
    "iter_messages",
    "parse_message",
    "serialize_message",
]
