import json
import stat

import pytest

from sigtool.lib.encoding import (
    decode_key_record,
    decode_signature,
    encode_key_record,
    encode_signature,
)
from sigtool.lib.errors import (
    InvalidKeyError,
    MalformedSignatureError,
    StorageError,
)
from sigtool.lib.models import KeyIdentity, Signature
from sigtool.lib.schemes import Scheme
from sigtool.lib.signature_file import load_signature, save_signature

ECDSA_SIGNATURE = Signature(scheme=Scheme.ECDSA, data=bytes(range(64)))


def test_key_record_encoding_round_trip(make_record):
    record = make_record("alice", Scheme.BLS)

    data = encode_key_record(record)

    loaded = decode_key_record(data)
    assert loaded == record
    assert loaded.identity == KeyIdentity("alice", Scheme.BLS)


def test_key_file_with_unknown_scheme_is_invalid(make_record):
    doc = json.loads(encode_key_record(make_record("alice")))
    doc["scheme"] = "rsa"

    with pytest.raises(InvalidKeyError):
        decode_key_record(json.dumps(doc).encode())


def test_key_file_with_bad_hex_is_invalid(make_record):
    doc = json.loads(encode_key_record(make_record("alice")))
    doc["private_key"] = "zz" + doc["private_key"][2:]

    with pytest.raises(InvalidKeyError):
        decode_key_record(json.dumps(doc).encode())


def test_key_file_with_truncated_key_is_invalid(make_record):
    doc = json.loads(encode_key_record(make_record("alice")))
    doc["private_key"] = doc["private_key"][:-2]

    with pytest.raises(InvalidKeyError, match="length"):
        decode_key_record(json.dumps(doc).encode())


def test_signature_encoding_is_self_describing():
    doc = json.loads(encode_signature(ECDSA_SIGNATURE, created_at=1700000000))

    assert doc == {
        "version": 1,
        "scheme": "ecdsa",
        "algorithm": "ECDSA-secp256k1",
        "signature": ECDSA_SIGNATURE.hex(),
        "created_at": 1700000000,
    }
    assert decode_signature(json.dumps(doc).encode()) == ECDSA_SIGNATURE


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"not json",
        b"[]",
        b'{"scheme": "ecdsa", "algorithm": "ECDSA-secp256k1"}',
        b'{"scheme": "rsa", "algorithm": "RSA", "signature": "00"}',
        b'{"scheme": "ecdsa", "algorithm": "ECDSA-secp256k1", "signature": "0g"}',
    ],
    ids=["empty", "garbage", "array", "no-signature", "unknown-scheme", "bad-hex"],
)
def test_malformed_signature_documents(data):
    with pytest.raises(MalformedSignatureError):
        decode_signature(data)


def test_save_and_load_signature_file(tmp_path):
    path = tmp_path / "message.sig"

    assert save_signature(path, ECDSA_SIGNATURE) == path

    assert load_signature(path) == ECDSA_SIGNATURE
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert [p.name for p in tmp_path.iterdir()] == ["message.sig"]


def test_save_signature_replaces_existing_file(tmp_path):
    path = tmp_path / "message.sig"
    path.write_text("old contents")

    save_signature(path, ECDSA_SIGNATURE)

    assert load_signature(path) == ECDSA_SIGNATURE


def test_load_missing_signature_file(tmp_path):
    with pytest.raises(StorageError):
        load_signature(tmp_path / "missing.sig")


def test_save_signature_into_missing_directory(tmp_path):
    with pytest.raises(StorageError):
        save_signature(tmp_path / "nope" / "message.sig", ECDSA_SIGNATURE)
