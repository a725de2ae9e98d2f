"""
Scheme-agnostic signing facade.

``SigningService`` resolves key names through a KeyStore and dispatches to the
matching scheme provider. It holds no state besides the store handle and the
entropy source used for key generation.
"""

import time
from typing import List, Optional, Sequence

from sigtool.lib.errors import (
    DuplicateNameError,
    InvalidNameError,
    SchemeMismatchError,
)
from sigtool.lib.key_store import KeyListing, KeyStore
from sigtool.lib.log import get_logger
from sigtool.lib.models import KeyRecord, Signature, validate_key_name
from sigtool.lib.schemes import (
    EntropySource,
    Scheme,
    bls_provider,
    provider_for,
    system_entropy,
)

_log = get_logger("signing_service")


class SigningService:
    """Generate, sign and verify with named keys of any supported scheme."""

    def __init__(self, store: KeyStore, entropy: Optional[EntropySource] = None):
        self.store = store
        self._entropy = entropy or system_entropy

    def keygen(self, name: str, scheme: Scheme) -> KeyRecord:
        """
        Generate a keypair under ``scheme`` and store it as ``name``.

        Args:
            name: Unique key name
            scheme: Signature scheme for the new key

        Returns:
            The stored KeyRecord

        Raises:
            InvalidNameError: If the name is not a valid identifier
            DuplicateNameError: If a key with this name already exists
            KeyGenerationError: If the random source fails
        """
        validate_key_name(name)
        scheme = Scheme(scheme)

        # Fail before generating; insert() is the authoritative check.
        if name in self.store:
            raise DuplicateNameError(f"Key '{name}' already exists")

        provider = provider_for(scheme)
        public_key, private_key = provider.generate(self._entropy)
        record = KeyRecord(
            name=name,
            scheme=scheme,
            public_key=public_key,
            private_key=private_key,
            created_at=int(time.time()),
        )
        self.store.insert(record)

        _log.info("Generated key", name=name, scheme=scheme)
        return record

    def sign(self, name: str, message: bytes) -> Signature:
        record = self.store.get(name)
        data = provider_for(record.scheme).sign(record.private_key, message)
        _log.debug(
            "Signed message", name=name, scheme=record.scheme, size=len(message)
        )
        return Signature(scheme=record.scheme, data=data)

    def verify(self, name: str, message: bytes, signature: Signature) -> bool:
        """
        Verify ``signature`` over ``message`` with the key called ``name``.

        A well formed signature that does not match returns False. A signature
        made under a different scheme than the key raises SchemeMismatchError.
        """
        record = self.store.get(name)
        if signature.scheme != record.scheme:
            raise SchemeMismatchError(
                f"Signature scheme mismatch: {signature.scheme} signature "
                f"presented to {record.scheme} key '{name}'"
            )

        valid = provider_for(record.scheme).verify(
            record.public_key, message, signature.data
        )
        _log.debug("Verified signature", name=name, scheme=record.scheme, valid=valid)
        return valid

    def list_keys(self) -> KeyListing:
        return self.store.list()

    def aggregate(self, signatures: Sequence[Signature]) -> Signature:
        """Combine BLS signatures into a single aggregate BLS signature."""
        for signature in signatures:
            if signature.scheme != Scheme.BLS:
                raise SchemeMismatchError(
                    f"Can only aggregate BLS signatures, found: {signature.scheme}"
                )

        data = bls_provider().aggregate([s.data for s in signatures])
        _log.info("Aggregated signatures", count=len(signatures))
        return Signature(scheme=Scheme.BLS, data=data)

    def verify_aggregate(
        self, names: Sequence[str], message: bytes, signature: Signature
    ) -> bool:
        """
        Verify an aggregate BLS signature made by every key in ``names``
        over the same ``message``.
        """
        if not names:
            raise InvalidNameError("At least one key name is required")
        if signature.scheme != Scheme.BLS:
            raise SchemeMismatchError(
                f"Expected BLS signature, found: {signature.scheme}"
            )

        public_keys: List[bytes] = []
        for name in names:
            record = self.store.get(name)
            if record.scheme != Scheme.BLS:
                raise SchemeMismatchError(f"Key {name} is not a BLS key")
            public_keys.append(record.public_key)

        return bls_provider().verify_aggregate(public_keys, message, signature.data)


__all__ = ["SigningService"]
