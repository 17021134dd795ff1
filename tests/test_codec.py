from __future__ import annotations

import msgpack
import pytest
from pydantic import ValidationError

from datum.codec import ENCRYPTED_EXT_TYPE, decode, encode
from datum.errors import CorruptEncoding, UnsupportedValue
from datum.values import EncryptedValue


def test_single_key_document_matches_plain_msgpack():
    assert encode({"blah": "foo"}) == msgpack.packb({"blah": "foo"}, use_bin_type=True)


def test_nested_document_roundtrip():
    doc = {
        "name": "vektra",
        "port": 8080,
        "ratio": 0.25,
        "enabled": True,
        "db": {"host": "localhost", "pool": {"min": 1, "max": 10}},
    }
    assert decode(encode(doc)) == doc


def test_booleans_stay_booleans():
    got = decode(encode({"on": True, "off": False, "one": 1}))
    assert got["on"] is True
    assert got["off"] is False
    assert got["one"] == 1 and got["one"] is not True


def test_missing_and_empty_blobs_decode_to_empty_document():
    assert decode(None) == {}
    assert decode(b"") == {}


def test_encrypted_value_roundtrip():
    enc = EncryptedValue(key_id="k1", ciphertext=bytes([0x66, 0x6F, 0x6F]))

    got = decode(encode({"secret": enc}))

    assert isinstance(got["secret"], EncryptedValue)
    assert got["secret"].key_id == "k1"
    assert got["secret"].ciphertext == b"foo"


def test_encrypted_value_wire_format():
    blob = encode({"secret": EncryptedValue(key_id="a1b2c3", ciphertext=b"foo")})

    raw = msgpack.unpackb(blob, raw=False)

    assert raw["secret"] == msgpack.ExtType(ENCRYPTED_EXT_TYPE, b"a1b2c3\nfoo")


def test_ciphertext_may_contain_the_delimiter():
    enc = EncryptedValue(key_id="k", ciphertext=b"line1\nline2\n\x00\xff")
    got = decode(encode({"s": {"nested": enc}}))
    assert got["s"]["nested"] == enc


def test_key_id_must_not_contain_newline():
    with pytest.raises(ValidationError):
        EncryptedValue(key_id="bad\nkey", ciphertext=b"x")


@pytest.mark.parametrize(
    "value",
    [
        [1, 2, 3],
        b"raw-bytes",
        {"nested": None},
        {1: "int key"},
    ],
)
def test_encode_rejects_values_outside_the_union(value):
    with pytest.raises(UnsupportedValue):
        encode({"k": value})


def test_encode_rejects_huge_integers():
    with pytest.raises(UnsupportedValue):
        encode({"k": 2**70})


@pytest.mark.parametrize(
    "blob",
    [
        msgpack.packb({"a": "hello"}, use_bin_type=True)[:-2],
        msgpack.packb({"a": 1}, use_bin_type=True) + b"\x01",
        msgpack.packb([1, 2], use_bin_type=True),
        msgpack.packb("just a string", use_bin_type=True),
        msgpack.packb({"a": [1, 2]}, use_bin_type=True),
        msgpack.packb({"a": None}, use_bin_type=True),
        msgpack.packb({"a": msgpack.ExtType(5, b"x")}, use_bin_type=True),
        msgpack.packb({"a": msgpack.ExtType(ENCRYPTED_EXT_TYPE, b"no-delimiter")}, use_bin_type=True),
    ],
)
def test_decode_rejects_malformed_blobs(blob):
    with pytest.raises(CorruptEncoding):
        decode(blob)


def test_encode_rejects_documents_nested_too_deeply():
    doc: dict = {"leaf": 1}
    for _ in range(5000):
        doc = {"n": doc}
    with pytest.raises(UnsupportedValue):
        encode(doc)


def test_decode_rejects_blobs_nested_too_deeply():
    blob = b"\x81\xa1n" * 5000 + b"\x01"
    with pytest.raises(CorruptEncoding):
        decode(blob)
