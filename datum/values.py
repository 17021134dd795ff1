from __future__ import annotations

import base64
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .errors import UnsupportedValue

KEYID_DELIMITER = "\n"

# Deepest nesting of maps a key path or a written value may reach.
MAX_DEPTH = 128


class EncryptedValue(BaseModel):
    """
    Ciphertext plus the id of the key that produced it.

    The store never looks inside: both fields are round-tripped byte for byte.
    key_id is written in front of the ciphertext separated by a newline, so it
    must not contain one.
    """

    model_config = ConfigDict(frozen=True)

    key_id: str = Field(serialization_alias="keyid")
    ciphertext: bytes = Field(serialization_alias="value")

    @field_validator("key_id")
    @classmethod
    def _no_delimiter(cls, v: str) -> str:
        if KEYID_DELIMITER in v:
            raise ValueError("key id must not contain a newline")
        return v

    @field_serializer("ciphertext", when_used="json")
    def _ciphertext_b64(self, v: bytes) -> str:
        return base64.b64encode(v).decode("ascii")


Scalar = Union[str, int, float, bool]
Document = dict[str, Any]
Value = Union[Scalar, Document, EncryptedValue]


class ValueKind(str, Enum):
    SCALAR = "scalar"
    DOCUMENT = "document"
    ENCRYPTED = "encrypted"


def kind_of(value: Any) -> ValueKind:
    """
    Classify a value into one of the closed set of storable kinds.

    Raises UnsupportedValue for anything else (None, lists, bytes, ...).
    """
    if isinstance(value, EncryptedValue):
        return ValueKind.ENCRYPTED
    if isinstance(value, dict):
        return ValueKind.DOCUMENT
    # bool is a subclass of int; both are scalars
    if isinstance(value, (str, int, float)):
        return ValueKind.SCALAR
    raise UnsupportedValue(f"unsupported value type: {type(value).__name__}")


def check_value(value: Any, depth: int = 0) -> None:
    """Validate a whole value tree, including document keys and nesting depth."""
    kind = kind_of(value)
    if kind is ValueKind.DOCUMENT:
        if depth >= MAX_DEPTH:
            raise UnsupportedValue(f"documents nest deeper than {MAX_DEPTH} levels")
        for k, v in value.items():
            if not isinstance(k, str):
                raise UnsupportedValue(f"document keys must be strings, got {type(k).__name__}")
            check_value(v, depth + 1)


def copy_value(value: Value) -> Value:
    """
    Copy the Document nodes of a value tree so the result shares no map with the input.
    Scalars and EncryptedValue are immutable and are shared.
    """
    if kind_of(value) is ValueKind.DOCUMENT:
        return {k: copy_value(v) for k, v in value.items()}
    return value


def to_plain(value: Value) -> Any:
    """Render a value tree with only JSON/TOML-friendly types."""
    kind = kind_of(value)
    if kind is ValueKind.DOCUMENT:
        return {k: to_plain(v) for k, v in value.items()}
    if kind is ValueKind.ENCRYPTED:
        return value.model_dump(mode="json", by_alias=True)
    return value
