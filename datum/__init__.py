from __future__ import annotations

from .backend import DatumBackend
from .codec import decode, encode
from .document import get_path, prune, set_path
from .errors import (
    CorruptAliasMapping,
    CorruptEncoding,
    DatumError,
    InvalidPath,
    InvalidStoreKey,
    NotAMap,
    PersistenceError,
    ReservedToken,
    UnsupportedValue,
)
from .service import AsyncDatumService
from .tokens import TokenKind, TokenResolver, UUIDTokenGenerator, classify
from .values import Document, EncryptedValue, Value, ValueKind

__all__ = [
    "DatumBackend",
    "AsyncDatumService",
    "TokenResolver",
    "TokenKind",
    "UUIDTokenGenerator",
    "classify",
    "encode",
    "decode",
    "get_path",
    "set_path",
    "prune",
    "Document",
    "EncryptedValue",
    "Value",
    "ValueKind",
    "DatumError",
    "CorruptEncoding",
    "NotAMap",
    "CorruptAliasMapping",
    "PersistenceError",
    "InvalidPath",
    "InvalidStoreKey",
    "ReservedToken",
    "UnsupportedValue",
]
