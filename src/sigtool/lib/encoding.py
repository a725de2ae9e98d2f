"""
Canonical on-disk encodings for key records and signatures.

Both documents are JSON with hex-encoded binary fields and carry the scheme
tag, so a signature file is self-describing and a key file can be resolved
without any other state.
"""

import time
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from sigtool import config
from sigtool.lib.errors import InvalidKeyError, MalformedSignatureError
from sigtool.lib.models import KeyRecord, Signature
from sigtool.lib.schemes import Scheme, provider_for


class KeyFile(BaseModel):
    """Persisted form of a KeyRecord."""

    version: int = Field(
        config.KEY_FILE_VERSION, description="Key file format version."
    )
    name: str
    scheme: Scheme
    algorithm: str = Field(..., description="Descriptive algorithm name.")
    created_at: int = Field(0, description="UNIX seconds at key generation.")
    public_key: str = Field(..., description="Hex-encoded public key.")
    private_key: str = Field(..., description="Hex-encoded private key.")

    @field_validator("public_key", "private_key")
    @classmethod
    def check_hex(cls, value: str) -> str:
        bytes.fromhex(value)
        return value


class SignatureFile(BaseModel):
    """Persisted form of a Signature."""

    version: int = Field(
        config.SIGNATURE_FILE_VERSION, description="Signature file format version."
    )
    scheme: Scheme
    algorithm: str = Field(..., description="Descriptive algorithm name.")
    signature: str = Field(..., description="Hex-encoded signature bytes.")
    created_at: int = Field(0, description="UNIX seconds at signing.")

    @field_validator("signature")
    @classmethod
    def check_hex(cls, value: str) -> str:
        bytes.fromhex(value)
        return value


def encode_key_record(record: KeyRecord) -> bytes:
    doc = KeyFile(
        name=record.name,
        scheme=record.scheme,
        algorithm=provider_for(record.scheme).algorithm,
        created_at=record.created_at,
        public_key=record.public_key.hex(),
        private_key=record.private_key.hex(),
    )
    return doc.model_dump_json(indent=2).encode("utf-8")


def _parse_key_file(data: bytes, source: str) -> KeyFile:
    try:
        return KeyFile.model_validate_json(data)
    except ValidationError as e:
        raise InvalidKeyError(f"Invalid key file {source}: {e}") from e


def decode_key_record(data: bytes, source: str = "<memory>") -> KeyRecord:
    """
    Parse and validate a key file.

    Args:
        data: Raw key file contents
        source: Label used in error messages

    Returns:
        KeyRecord whose key material is well formed for its scheme

    Raises:
        InvalidKeyError: If the document or its key material is malformed
    """
    doc = _parse_key_file(data, source)
    public_key = bytes.fromhex(doc.public_key)
    private_key = bytes.fromhex(doc.private_key)
    provider_for(doc.scheme).validate_keypair(public_key, private_key)
    return KeyRecord(
        name=doc.name,
        scheme=doc.scheme,
        public_key=public_key,
        private_key=private_key,
        created_at=doc.created_at,
    )


def encode_signature(signature: Signature, created_at: Optional[int] = None) -> bytes:
    doc = SignatureFile(
        scheme=signature.scheme,
        algorithm=provider_for(signature.scheme).algorithm,
        signature=signature.data.hex(),
        created_at=int(time.time()) if created_at is None else created_at,
    )
    return doc.model_dump_json(indent=2).encode("utf-8")


def decode_signature(data: bytes) -> Signature:
    """Parse a signature file, raising MalformedSignatureError on any defect."""
    try:
        doc = SignatureFile.model_validate_json(data)
    except ValidationError as e:
        raise MalformedSignatureError(f"Invalid signature file: {e}") from e
    return Signature(scheme=doc.scheme, data=bytes.fromhex(doc.signature))
