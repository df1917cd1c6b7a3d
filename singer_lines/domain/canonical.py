"""
Canonical JSON handling for message payloads.

Raw record, schema and state payloads arrive as JSON bytes produced elsewhere.
They are decoded into plain Python containers with one twist: non-integer
numbers become `decimal.Decimal` so that `12.0` or `1.10` are written back
exactly as they were read. Integers stay `int`.

`encode_json` is the matching writer. It emits compact, UTF-8, order-preserving
JSON and renders `Decimal` and `datetime` values in their wire form.
"""

from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Union

from singer_lines.domain.errors import MalformedPayload

RawJson = Union[bytes, bytearray, memoryview, str]

# Calendar zero (0001-01-01T00:00:00Z), treated the same as an unset timestamp.
ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} is not valid JSON")


def loads(text: str) -> Any:
    """Decode JSON text keeping non-integer numbers as Decimal."""
    return json.loads(text, parse_float=Decimal, parse_constant=_reject_constant)


def as_text(raw: RawJson) -> str:
    """Return raw JSON input as text, decoding bytes as UTF-8."""
    if isinstance(raw, str):
        return raw
    return bytes(raw).decode("utf-8")


def decode_object(raw: RawJson, field: str) -> Dict[str, Any]:
    """
    Decode a raw JSON payload that must be an object.

    Parameters
    ----------
    raw : bytes | str
        JSON text supplied by the producer.
    field : str
        Wire field the payload is destined for (record, schema, value); used in errors.

    Raises
    ------
    MalformedPayload
        If the input is not UTF-8, not valid JSON, or not a JSON object.
    """
    try:
        value = loads(as_text(raw))
    except (UnicodeDecodeError, ValueError) as exc:
        raise MalformedPayload(
            f"{field} payload is not valid JSON", context={"field": field}, cause=exc
        ) from exc
    if not isinstance(value, dict):
        raise MalformedPayload(
            f"{field} payload must be a JSON object, got {type(value).__name__}",
            context={"field": field},
        )
    return value


def is_zero_time(value: datetime | None) -> bool:
    """True when a timestamp is unset: None or the calendar zero."""
    if value is None:
        return True
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value == ZERO_TIME


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as RFC 3339 with an explicit offset."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def to_utf8(text: str) -> bytes:
    """
    Encode text as UTF-8, replacing lone surrogates with U+FFFD.

    JSON escapes such as `\\ud800` decode to unpaired surrogates, which UTF-8
    cannot represent.
    """
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError:
        repaired = text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace")
        return repaired.encode("utf-8")


def _encode_number(value: Union[int, float, Decimal]) -> str:
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"cannot encode non-finite number {value}")
        return str(value)
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"cannot encode non-finite number {value}")
    return json.dumps(value)


def encode_json(value: Any) -> str:
    """
    Encode a JSON value compactly, preserving mapping order.

    Supported values: None, bool, int, float, Decimal, str, datetime, and
    lists/tuples/dicts of those. Mapping keys must be strings.
    """
    if value is None or isinstance(value, (bool, str)):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (int, float, Decimal)):
        return _encode_number(value)
    if isinstance(value, datetime):
        return json.dumps(format_timestamp(value))
    if isinstance(value, dict):
        items = []
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"JSON object keys must be str, not {type(key).__name__}")
            items.append(f"{json.dumps(key, ensure_ascii=False)}:{encode_json(item)}")
        return "{" + ",".join(items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(encode_json(item) for item in value) + "]"
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


__all__ = [
    "RawJson",
    "ZERO_TIME",
    "as_text",
    "decode_object",
    "encode_json",
    "format_timestamp",
    "is_zero_time",
    "loads",
    "to_utf8",
]
