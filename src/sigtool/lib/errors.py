"""
Error taxonomy shared by the key store, the scheme providers and the CLI.

Every error carries a stable ``exit_code`` so the command line layer can map
failures onto distinct process exit statuses. Exit code 1 is reserved for a
verification verdict of ``false`` and 2 for click usage errors.
"""


class SigToolError(Exception):
    """Base exception for sigtool errors"""

    exit_code = 10


class StorageError(SigToolError):
    """Key store or signature file could not be read or written"""

    exit_code = 10


class KeyGenerationError(SigToolError):
    """The random source failed or was exhausted during key generation"""

    exit_code = 3


class DuplicateNameError(SigToolError):
    """A key with the requested name already exists"""

    exit_code = 4


class KeyNotFoundError(SigToolError):
    """No key with the requested name exists"""

    exit_code = 5


class InvalidKeyError(SigToolError):
    """Stored or supplied key material is malformed for its scheme"""

    exit_code = 6


class MalformedSignatureError(SigToolError):
    """Signature bytes cannot be parsed as the scheme's encoding"""

    exit_code = 7


class SchemeMismatchError(SigToolError):
    """Key, signature and scheme do not belong together"""

    exit_code = 8


class InvalidNameError(SigToolError):
    """A key name is not usable as a store identifier"""

    exit_code = 9


__all__ = [
    "SigToolError",
    "StorageError",
    "KeyGenerationError",
    "DuplicateNameError",
    "KeyNotFoundError",
    "InvalidKeyError",
    "MalformedSignatureError",
    "SchemeMismatchError",
    "InvalidNameError",
]
