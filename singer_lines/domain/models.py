"""
Message models for the singer-lines protocol.

Four message kinds travel on the wire, one JSON object per line, told apart by
their `type` tag: RECORD, SCHEMA, STATE and ACTIVATE_VERSION. Each kind is a
frozen pydantic model whose `type` field is a fixed literal, so a model can
only ever carry its own discriminator.

Optional fields follow a zero-value convention: an empty version string, an
unset timestamp or an empty bookmark list means "absent" and is left out of
the wire mapping entirely.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Iterable, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator

from singer_lines.domain.canonical import RawJson, decode_object, is_zero_time

# Wire keys
KEY_TYPE = "type"
KEY_STREAM = "stream"
KEY_RECORD = "record"
KEY_SCHEMA = "schema"
KEY_VERSION = "version"
KEY_TIME_EXTRACTED = "time_extracted"
KEY_KEY_PROPERTIES = "key_properties"
KEY_BOOKMARK_PROPERTIES = "bookmark_properties"
KEY_VALUE = "value"

# Discriminators
RECORD = "RECORD"
SCHEMA = "SCHEMA"
STATE = "STATE"
ACTIVATE_VERSION = "ACTIVATE_VERSION"

MESSAGE_TYPES: Tuple[str, ...] = (RECORD, SCHEMA, STATE, ACTIVATE_VERSION)

_FROZEN = {
    "frozen": True,
    "populate_by_name": True,
    "arbitrary_types_allowed": False,
    "extra": "forbid",
}


class RecordMessage(BaseModel):
    """
    One data row belonging to a stream.
    """

    type: Literal["RECORD"] = Field(RECORD, description="Message discriminator.")
    stream: str = Field(..., description="Name of the stream the row belongs to.")
    record: Dict[str, Any] = Field(..., description="The row as a JSON object.")
    version: str = Field("", description="Table version; empty when unversioned.")
    time_extracted: Optional[datetime] = Field(
        None, description="When the row was extracted; None when unknown."
    )

    model_config = _FROZEN

    @field_validator("time_extracted")
    @classmethod
    def _normalize_time_extracted(cls, value: Optional[datetime]) -> Optional[datetime]:
        if is_zero_time(value):
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def from_raw(
        cls,
        stream: str,
        raw_record: RawJson,
        version: str = "",
        time_extracted: Optional[datetime] = None,
    ) -> "RecordMessage":
        """Build a RECORD from raw JSON bytes; raises MalformedPayload on bad input."""
        return cls(
            stream=stream,
            record=decode_object(raw_record, KEY_RECORD),
            version=version,
            time_extracted=time_extracted,
        )

    def as_wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {
            KEY_TYPE: self.type,
            KEY_STREAM: self.stream,
            KEY_RECORD: self.record,
        }
        if self.version:
            wire[KEY_VERSION] = self.version
        if self.time_extracted is not None:
            wire[KEY_TIME_EXTRACTED] = self.time_extracted
        return wire


class SchemaMessage(BaseModel):
    """
    Structural description of a stream plus its key and bookmark properties.
    """

    type: Literal["SCHEMA"] = Field(SCHEMA, description="Message discriminator.")
    stream: str = Field(..., description="Name of the described stream.")
    schema_: Dict[str, Any] = Field(..., alias="schema", description="JSON Schema object.")
    key_properties: Tuple[str, ...] = Field(
        (), description="Fields that uniquely identify a record, in order."
    )
    bookmark_properties: Tuple[str, ...] = Field(
        (), description="Fields used to track incremental progress, in order."
    )

    model_config = _FROZEN

    @field_validator("key_properties", "bookmark_properties", mode="before")
    @classmethod
    def _single_name_is_one_property(cls, value: Any) -> Any:
        # A bare name is one property, not a sequence of characters
        if isinstance(value, (bytes, bytearray)):
            value = bytes(value).decode("utf-8")
        if isinstance(value, str):
            return (value,)
        if value is None:
            return ()
        try:
            return tuple(value)
        except TypeError:
            return value

    @property
    def schema(self) -> Dict[str, Any]:  # type: ignore[override]
        return self.schema_

    @classmethod
    def from_raw(
        cls,
        stream: str,
        raw_schema: RawJson,
        key_properties: Iterable[str] = (),
        bookmark_properties: Iterable[str] = (),
    ) -> "SchemaMessage":
        """Build a SCHEMA from raw JSON bytes; raises MalformedPayload on bad input."""
        return cls(
            stream=stream,
            schema=decode_object(raw_schema, KEY_SCHEMA),
            key_properties=key_properties,
            bookmark_properties=bookmark_properties,
        )

    def as_wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {
            KEY_TYPE: self.type,
            KEY_STREAM: self.stream,
            KEY_SCHEMA: self.schema_,
            KEY_KEY_PROPERTIES: list(self.key_properties),
        }
        if self.bookmark_properties:
            wire[KEY_BOOKMARK_PROPERTIES] = list(self.bookmark_properties)
        return wire


class StateMessage(BaseModel):
    """
    Global checkpoint snapshot used to resume extraction.
    """

    type: Literal["STATE"] = Field(STATE, description="Message discriminator.")
    value: Dict[str, Any] = Field(..., description="Opaque checkpoint object.")

    model_config = _FROZEN

    @classmethod
    def from_raw(cls, raw_value: RawJson) -> "StateMessage":
        """Build a STATE from raw JSON bytes; raises MalformedPayload on bad input."""
        return cls(value=decode_object(raw_value, KEY_VALUE))

    def as_wire(self) -> Dict[str, Any]:
        return {KEY_TYPE: self.type, KEY_VALUE: self.value}


class ActivateVersionMessage(BaseModel):
    """
    Signals that a stream should cut over to a new table version.
    """

    type: Literal["ACTIVATE_VERSION"] = Field(
        ACTIVATE_VERSION, description="Message discriminator."
    )
    stream: str = Field(..., description="Stream being cut over.")
    version: str = Field(..., description="The version to activate.")

    model_config = _FROZEN

    def as_wire(self) -> Dict[str, Any]:
        return {KEY_TYPE: self.type, KEY_STREAM: self.stream, KEY_VERSION: self.version}


Message = Annotated[
    Union[RecordMessage, SchemaMessage, StateMessage, ActivateVersionMessage],
    Field(discriminator="type"),
]


__all__ = [
    "ACTIVATE_VERSION",
    "MESSAGE_TYPES",
    "RECORD",
    "SCHEMA",
    "STATE",
    "ActivateVersionMessage",
    "Message",
    "RecordMessage",
    "SchemaMessage",
    "StateMessage",
]
