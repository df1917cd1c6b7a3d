"""
Infrastructure package for singer-lines.

Centralizes I/O concerns (output sinks and their lifecycle), decoupled from
message modelling and line encoding.
"""

from singer_lines.infrastructure.sinks import Sink, open_sink, open_writer

__all__ = [
    "Sink",
    "open_sink",
    "open_writer",
]
