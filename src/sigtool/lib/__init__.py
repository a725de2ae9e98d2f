from sigtool.lib.errors import (
    DuplicateNameError,
    InvalidKeyError,
    InvalidNameError,
    KeyGenerationError,
    KeyNotFoundError,
    MalformedSignatureError,
    SchemeMismatchError,
    SigToolError,
    StorageError,
)
from sigtool.lib.key_store import FileKeyStore, KeyListing, KeyStore, MemoryKeyStore
from sigtool.lib.models import KeyIdentity, KeyRecord, Signature
from sigtool.lib.schemes import Scheme, provider_for
from sigtool.lib.signing_service import SigningService

__all__ = [
    "DuplicateNameError",
    "InvalidKeyError",
    "InvalidNameError",
    "KeyGenerationError",
    "KeyNotFoundError",
    "MalformedSignatureError",
    "SchemeMismatchError",
    "SigToolError",
    "StorageError",
    "FileKeyStore",
    "KeyListing",
    "KeyStore",
    "MemoryKeyStore",
    "KeyIdentity",
    "KeyRecord",
    "Signature",
    "Scheme",
    "provider_for",
    "SigningService",
]
