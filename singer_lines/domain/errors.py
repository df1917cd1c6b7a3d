"""
Error taxonomy for the singer-lines protocol.

Every failure raised by this package derives from `SingerError` and carries a
`kind` string naming its category:

- MalformedPayload: caller-supplied record/schema/state bytes are not a JSON object
- MissingField: a decoded message lacks a field required for its type
- InvalidMessage: a line is not a JSON object or has an unusable structure
- UnknownMessageType: the `type` tag is not one of the recognized literals
- SinkWriteFailure: the output sink rejected or partially completed a write

Nothing here is retried internally; callers decide whether to resend.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SingerError(Exception):
    """
    Base exception for all protocol errors.

    Attributes:
        message: Human-readable error description
        context: Additional context dict for debugging (line number, stream, ...)
        cause: Original exception if wrapping
    """

    kind: str = "SingerError"

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.context:
            details = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            parts.append(details)
        if self.cause is not None:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


class MalformedPayload(SingerError, ValueError):
    """Raw payload bytes are not valid JSON or not a JSON object."""

    kind = "MalformedPayload"


class InvalidMessage(SingerError, ValueError):
    """Decoded line is not a JSON object or has no usable structure."""

    kind = "InvalidMessage"


class MissingField(SingerError, ValueError):
    """A message read from the wire lacks a required field."""

    kind = "MissingField"

    def __init__(
        self,
        field: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.field = field
        super().__init__(f"message is missing required key: {field}", context=context)


class UnknownMessageType(SingerError, ValueError):
    """The `type` tag is present but not a recognized message type."""

    kind = "UnknownMessageType"

    def __init__(
        self,
        message_type: Any,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message_type = message_type
        super().__init__(f"unknown message type: {message_type!r}", context=context)


class SinkWriteFailure(SingerError, OSError):
    """The output sink rejected a write or accepted only part of a line."""

    kind = "SinkWriteFailure"


__all__ = [
    "SingerError",
    "MalformedPayload",
    "InvalidMessage",
    "MissingField",
    "UnknownMessageType",
    "SinkWriteFailure",
]
