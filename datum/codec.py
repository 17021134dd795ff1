from __future__ import annotations

from typing import Any

import msgpack
from msgpack.exceptions import UnpackException

from .errors import CorruptEncoding, UnsupportedValue
from .values import KEYID_DELIMITER, Document, EncryptedValue, Value, ValueKind, kind_of


# msgpack extension type carrying an EncryptedValue: b"<keyid>\n<ciphertext>"
ENCRYPTED_EXT_TYPE = 0x47

_DELIMITER = KEYID_DELIMITER.encode("ascii")


def encode(doc: Document) -> bytes:
    """
    Serialize a document to msgpack.

    Key order follows the dict's iteration order; no canonical ordering is applied.
    """
    if kind_of(doc) is not ValueKind.DOCUMENT:
        raise UnsupportedValue("only documents can be encoded")
    try:
        return msgpack.packb(_to_wire(doc), use_bin_type=True)
    except (OverflowError, ValueError, RecursionError) as e:
        raise UnsupportedValue(f"document does not encode: {e}") from e


def decode(blob: bytes | None) -> Document:
    """
    Parse a msgpack blob back into a document.

    Missing and empty blobs both decode to an empty document.
    """
    if not blob:
        return {}
    try:
        raw = msgpack.unpackb(blob, raw=False, ext_hook=_ext_hook)
    except (ValueError, TypeError, RecursionError, UnpackException) as e:
        raise CorruptEncoding(f"blob does not decode: {e}") from e
    if not isinstance(raw, dict):
        raise CorruptEncoding(f"top level is {type(raw).__name__}, not a map")
    try:
        return _from_wire(raw)
    except RecursionError as e:
        raise CorruptEncoding("blob nests too deeply") from e


def _to_wire(value: Value) -> Any:
    kind = kind_of(value)
    if kind is ValueKind.SCALAR:
        return value
    if kind is ValueKind.DOCUMENT:
        out: dict[str, Any] = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise UnsupportedValue(f"document keys must be strings, got {type(k).__name__}")
            out[k] = _to_wire(v)
        return out
    if kind is ValueKind.ENCRYPTED:
        payload = value.key_id.encode("utf-8") + _DELIMITER + value.ciphertext
        return msgpack.ExtType(ENCRYPTED_EXT_TYPE, payload)
    raise UnsupportedValue(f"unhandled value kind {kind}")


def _ext_hook(code: int, data: bytes) -> Any:
    if code != ENCRYPTED_EXT_TYPE:
        return msgpack.ExtType(code, data)
    key_id, sep, ciphertext = data.partition(_DELIMITER)
    if not sep:
        return msgpack.ExtType(code, data)
    return EncryptedValue(key_id=key_id.decode("utf-8"), ciphertext=ciphertext)


def _from_wire(value: Any) -> Any:
    if isinstance(value, msgpack.ExtType):
        raise CorruptEncoding(f"unsupported or malformed extension type {value.code:#x}")
    try:
        kind = kind_of(value)
    except UnsupportedValue as e:
        raise CorruptEncoding(str(e)) from e
    if kind is ValueKind.DOCUMENT:
        out: Document = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise CorruptEncoding(f"map key {k!r} is not a string")
            out[k] = _from_wire(v)
        return out
    return value
