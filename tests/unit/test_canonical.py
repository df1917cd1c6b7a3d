from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from singer_lines.domain.canonical import (
    decode_object,
    encode_json,
    format_timestamp,
    is_zero_time,
    to_utf8,
)
from singer_lines.domain.errors import MalformedPayload


def test_decode_object_keeps_integers_as_int():
    value = decode_object(b'{"id": 12}', "record")

    assert value == {"id": 12}
    assert isinstance(value["id"], int)


def test_decode_object_keeps_decimal_text():
    value = decode_object(b'{"price": 12.0, "rate": 1.10, "tiny": 1e-7}', "record")

    assert value["price"] == Decimal("12.0")
    assert encode_json(value) == '{"price":12.0,"rate":1.10,"tiny":1E-7}'


def test_decode_object_preserves_key_order():
    value = decode_object('{"b": 1, "a": {"z": 1, "y": 2}}', "schema")

    assert list(value) == ["b", "a"]
    assert list(value["a"]) == ["z", "y"]


@pytest.mark.parametrize(
    "raw",
    [b"[1, 2]", b'"text"', b"42", b"null", b"true"],
)
def test_decode_object_rejects_non_objects(raw: bytes):
    with pytest.raises(MalformedPayload) as excinfo:
        decode_object(raw, "record")

    assert excinfo.value.context == {"field": "record"}
    assert excinfo.value.kind == "MalformedPayload"


@pytest.mark.parametrize(
    "raw",
    [b"{not json", b"", b'{"a": NaN}', b'{"a": Infinity}', b"\xff\xfe"],
)
def test_decode_object_rejects_invalid_json(raw: bytes):
    with pytest.raises(MalformedPayload) as excinfo:
        decode_object(raw, "value")

    assert excinfo.value.cause is not None
    assert isinstance(excinfo.value, ValueError)


def test_encode_json_is_compact_and_utf8():
    assert encode_json({"name": "Zoë", "tags": ["a", None, True]}) == (
        '{"name":"Zoë","tags":["a",null,true]}'
    )


def test_encode_json_renders_timestamps():
    value = {"at": datetime(2000, 1, 1, tzinfo=timezone(timedelta(hours=-5)))}

    assert encode_json(value) == '{"at":"2000-01-01T00:00:00-05:00"}'


def test_encode_json_rejects_non_string_keys():
    with pytest.raises(TypeError):
        encode_json({1: "a"})


def test_encode_json_rejects_non_finite_numbers():
    with pytest.raises(ValueError):
        encode_json({"a": float("nan")})


def test_encode_json_rejects_unknown_types():
    with pytest.raises(TypeError):
        encode_json({"a": object()})


def test_format_timestamp_assumes_utc_for_naive():
    assert format_timestamp(datetime(2021, 3, 4, 5, 6, 7)) == "2021-03-04T05:06:07+00:00"


def test_is_zero_time():
    assert is_zero_time(None)
    assert is_zero_time(datetime.min)
    assert not is_zero_time(datetime(1970, 1, 1, tzinfo=timezone.utc))


def test_to_utf8_replaces_lone_surrogates():
    assert to_utf8("a\ud800b") == "a�b".encode("utf-8")
    assert to_utf8("Zoë") == "Zoë".encode("utf-8")
