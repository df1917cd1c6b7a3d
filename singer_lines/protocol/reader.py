"""
Line parser for singer-lines messages.

`parse_message` turns one line of JSON into one typed message. Required fields
must be present; optional fields are recovered when they have the expected
shape and otherwise fall back to their zero value. Every failure surfaces as a
typed `SingerError` subclass.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple, Union

from singer_lines.domain.canonical import RawJson, as_text, loads
from singer_lines.domain.errors import (
    InvalidMessage,
    MissingField,
    SingerError,
    UnknownMessageType,
)
from singer_lines.domain.models import (
    ACTIVATE_VERSION,
    KEY_BOOKMARK_PROPERTIES,
    KEY_KEY_PROPERTIES,
    KEY_RECORD,
    KEY_SCHEMA,
    KEY_STREAM,
    KEY_TIME_EXTRACTED,
    KEY_TYPE,
    KEY_VALUE,
    KEY_VERSION,
    RECORD,
    SCHEMA,
    STATE,
    ActivateVersionMessage,
    Message,
    RecordMessage,
    SchemaMessage,
    StateMessage,
)
from singer_lines.utils.logging import get_logger

log = get_logger(__name__)


def _require(obj: Dict[str, Any], *keys: str) -> None:
    for key in keys:
        if key not in obj:
            raise MissingField(key, context={"type": obj.get(KEY_TYPE)})


def _string(obj: Dict[str, Any], key: str) -> str:
    value = obj[key]
    if not isinstance(value, str):
        raise InvalidMessage(
            f"{key} must be a string, got {type(value).__name__}",
            context={"type": obj.get(KEY_TYPE), "field": key},
        )
    return value


def _object(obj: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = obj[key]
    if not isinstance(value, dict):
        raise InvalidMessage(
            f"{key} must be a JSON object, got {type(value).__name__}",
            context={"type": obj.get(KEY_TYPE), "field": key},
        )
    return value


def _optional_string(obj: Dict[str, Any], key: str) -> str:
    value = obj.get(key)
    return value if isinstance(value, str) else ""


def _optional_timestamp(obj: Dict[str, Any], key: str) -> Optional[datetime]:
    value = obj.get(key)
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        log.debug("Ignoring unparseable timestamp", extra={"field": key, "value": value})
        return None


def _optional_strings(obj: Dict[str, Any], key: str) -> Tuple[str, ...]:
    value = obj.get(key)
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return tuple(value)
    return ()


def _decode_line(line: RawJson) -> Dict[str, Any]:
    try:
        text = as_text(line)
    except UnicodeDecodeError as exc:
        raise InvalidMessage("line is not valid UTF-8", cause=exc) from exc
    if not text.strip():
        raise InvalidMessage("line is empty")
    try:
        obj = loads(text)
    except ValueError as exc:
        raise InvalidMessage("line is not valid JSON", cause=exc) from exc
    if not isinstance(obj, dict):
        raise InvalidMessage(f"line must be a JSON object, got {type(obj).__name__}")
    return obj


def parse_message(line: RawJson) -> Message:
    """
    Parse one line of JSON into a message.

    Raises
    ------
    InvalidMessage
        The line is not a JSON object, or a required field has the wrong shape.
    MissingField
        The `type` tag or a field required by the message type is absent.
    UnknownMessageType
        The `type` tag is not RECORD, SCHEMA, STATE or ACTIVATE_VERSION.
    """
    obj = _decode_line(line)
    _require(obj, KEY_TYPE)
    message_type = obj[KEY_TYPE]

    if message_type == RECORD:
        _require(obj, KEY_STREAM, KEY_RECORD)
        return RecordMessage(
            stream=_string(obj, KEY_STREAM),
            record=_object(obj, KEY_RECORD),
            version=_optional_string(obj, KEY_VERSION),
            time_extracted=_optional_timestamp(obj, KEY_TIME_EXTRACTED),
        )

    if message_type == SCHEMA:
        _require(obj, KEY_STREAM, KEY_SCHEMA)
        return SchemaMessage(
            stream=_string(obj, KEY_STREAM),
            schema=_object(obj, KEY_SCHEMA),
            key_properties=_optional_strings(obj, KEY_KEY_PROPERTIES),
            bookmark_properties=_optional_strings(obj, KEY_BOOKMARK_PROPERTIES),
        )

    if message_type == STATE:
        _require(obj, KEY_VALUE)
        return StateMessage(value=_object(obj, KEY_VALUE))

    if message_type == ACTIVATE_VERSION:
        _require(obj, KEY_STREAM, KEY_VERSION)
        return ActivateVersionMessage(
            stream=_string(obj, KEY_STREAM),
            version=_string(obj, KEY_VERSION),
        )

    raise UnknownMessageType(message_type)


def iter_messages(lines: Iterable[Union[str, bytes]]) -> Iterator[Message]:
    """
    Parse messages from an iterable of lines, e.g. an open file.

    Blank lines are skipped. The first failure propagates with its 1-based
    line number added to the error context.
    """
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            yield parse_message(line)
        except SingerError as exc:
            exc.context.setdefault("line", line_number)
            raise


__all__ = ["iter_messages", "parse_message"]
