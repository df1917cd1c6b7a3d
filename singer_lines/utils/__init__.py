"""
Utilities package for singer-lines.

Exports shared helpers for cross-cutting concerns such as logging.
Keep this package lightweight and free of protocol logic.
"""

from singer_lines.utils.logging import JsonFormatter, configure_logging, get_logger

__all__ = [
    "JsonFormatter",
    "configure_logging",
    "get_logger",
]
