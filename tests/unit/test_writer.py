from __future__ import annotations

import io
from datetime import datetime, timedelta, timezone

import pytest

from singer_lines.domain.errors import MalformedPayload, SinkWriteFailure
from singer_lines.domain.models import StateMessage
from singer_lines.infrastructure.sinks import Sink
from singer_lines.protocol.reader import parse_message
from singer_lines.protocol.writer import MessageWriter, serialize_message

EXPECTED_TWO_RECORDS = (
    b'{"type":"RECORD","stream":"users","record":{"id":1,"name":"Chris"}}\n'
    b'{"type":"RECORD","stream":"users","record":{"id":2,"name":"Mike"}}\n'
)


class _ShortWriteSink:
    """Accepts one byte less than it is given."""

    def __init__(self) -> None:
        self.calls = 0

    def write(self, data: bytes) -> int:
        self.calls += 1
        return len(data) - 1


class _BrokenPipeSink:
    def write(self, data: bytes) -> int:
        del data
        raise BrokenPipeError("reader went away")


class _RecordingSink:
    def __init__(self) -> None:
        self.chunks: list[bytes] = []
        self.flushes = 0

    def write(self, data: bytes) -> None:
        self.chunks.append(data)

    def flush(self) -> None:
        self.flushes += 1


def test_write_record_emits_one_line(writer: MessageWriter, sink: io.BytesIO):
    writer.write_record("streamValue", b'{"id":12,"name": "foo"}')

    assert sink.getvalue() == (
        b'{"type":"RECORD","stream":"streamValue","record":{"id":12,"name":"foo"}}\n'
    )


def test_write_records_emits_lines_in_order(writer: MessageWriter, sink: io.BytesIO):
    count = writer.write_records(
        "users", [b'{"id":1,"name":"Chris"}', b'{"id":2,"name":"Mike"}']
    )

    assert count == 2
    assert sink.getvalue() == EXPECTED_TWO_RECORDS


def test_write_records_halts_on_first_malformed_payload(writer: MessageWriter, sink: io.BytesIO):
    payloads = [b'{"id": 1}', b"not json", b'{"id": 3}']

    with pytest.raises(MalformedPayload):
        writer.write_records("users", payloads)

    assert sink.getvalue() == b'{"type":"RECORD","stream":"users","record":{"id":1}}\n'


def test_write_record_optionals(writer: MessageWriter, sink: io.BytesIO, decode_lines):
    extracted = datetime(2000, 1, 1, tzinfo=timezone(timedelta(hours=-5)))

    writer.write_record("users", b'{"id": 1}')
    writer.write_record("users", b'{"id": 2}', version="", time_extracted=None)
    writer.write_record("users", b'{"id": 3}', version="v1", time_extracted=extracted)

    first, second, third = decode_lines(sink.getvalue())
    assert "version" not in first and "time_extracted" not in first
    assert "version" not in second and "time_extracted" not in second
    assert third["version"] == "v1"
    assert third["time_extracted"] == "2000-01-01T00:00:00-05:00"


def test_write_record_preserves_numbers(writer: MessageWriter, sink: io.BytesIO):
    writer.write_record("prices", b'{"id": 12, "amount": 12.0, "rate": 0.10}')

    assert b'"record":{"id":12,"amount":12.0,"rate":0.10}' in sink.getvalue()


def test_write_schema(writer: MessageWriter, sink: io.BytesIO, users_schema: bytes):
    writer.write_schema("users", users_schema, ["name"])

    assert sink.getvalue() == (
        b'{"type":"SCHEMA","stream":"users",'
        b'"schema":{"type":"object","properties":{"name":{"type":"string"}}},'
        b'"key_properties":["name"]}\n'
    )


def test_write_schema_with_bookmarks(writer: MessageWriter, sink: io.BytesIO, users_schema: bytes):
    writer.write_schema("users", users_schema, ["name"], bookmark_properties=["name", "updated"])

    assert sink.getvalue().endswith(
        b'"key_properties":["name"],"bookmark_properties":["name","updated"]}\n'
    )


def test_write_state(writer: MessageWriter, sink: io.BytesIO, decode_lines):
    writer.write_state(b'{"users": 2, "locations": 1}')

    assert decode_lines(sink.getvalue()) == [
        {"type": "STATE", "value": {"users": 2, "locations": 1}}
    ]


def test_write_activate_version(writer: MessageWriter, sink: io.BytesIO):
    writer.write_activate_version("users", "1700000000")

    assert sink.getvalue() == (
        b'{"type":"ACTIVATE_VERSION","stream":"users","version":"1700000000"}\n'
    )


def test_each_message_is_a_single_write():
    sink = _RecordingSink()
    writer = MessageWriter(sink)

    writer.write_records("users", [b'{"id": 1}', b'{"id": 2}'])

    assert len(sink.chunks) == 2
    assert all(chunk.endswith(b"\n") and chunk.count(b"\n") == 1 for chunk in sink.chunks)
    assert sink.flushes == 2


def test_flush_can_be_disabled():
    sink = _RecordingSink()

    MessageWriter(sink, flush=False).write_state(b"{}")

    assert sink.flushes == 0


def test_partial_write_raises_sink_write_failure():
    sink = _ShortWriteSink()
    writer = MessageWriter(sink)

    with pytest.raises(SinkWriteFailure) as excinfo:
        writer.write_state(b'{"users": 2}')

    assert excinfo.value.context["message_type"] == "STATE"
    assert sink.calls == 1


def test_sink_error_is_wrapped():
    writer = MessageWriter(_BrokenPipeSink())

    with pytest.raises(SinkWriteFailure) as excinfo:
        writer.write_activate_version("users", "2")

    assert isinstance(excinfo.value.__cause__, BrokenPipeError)
    assert isinstance(excinfo.value, OSError)


def test_closed_sink_raises_sink_write_failure():
    sink = io.BytesIO()
    sink.close()

    with pytest.raises(SinkWriteFailure):
        MessageWriter(sink).write_state(b"{}")


def test_serialize_message_has_no_terminator():
    assert serialize_message(StateMessage(value={})) == '{"type":"STATE","value":{}}'


def test_sinks_satisfy_protocol():
    assert isinstance(io.BytesIO(), Sink)
    assert isinstance(_RecordingSink(), Sink)


def test_lone_surrogate_in_payload_is_replaced(writer: MessageWriter, sink: io.BytesIO):
    writer.write_record("users", b'{"a":"\\ud800","b":"ok"}')

    assert sink.getvalue() == (
        '{"type":"RECORD","stream":"users","record":{"a":"�","b":"ok"}}\n'.encode("utf-8")
    )


def test_parsed_message_with_lone_surrogate_can_be_rewritten(
    writer: MessageWriter, sink: io.BytesIO, decode_lines
):
    message = parse_message('{"type":"STATE","value":{"\\udc00key":"x\\ud83d"}}')

    writer.write_message(message)

    assert decode_lines(sink.getvalue()) == [
        {"type": "STATE", "value": {"�key": "x�"}}
    ]


def test_write_schema_single_key_property_name(writer: MessageWriter, sink: io.BytesIO):
    writer.write_schema("users", b"{}", key_properties="id", bookmark_properties="updated_at")

    assert sink.getvalue() == (
        b'{"type":"SCHEMA","stream":"users","schema":{},'
        b'"key_properties":["id"],"bookmark_properties":["updated_at"]}\n'
    )
