"""
Signature scheme providers.

Each supported scheme implements key generation, signing and verification
over raw byte encodings:

- ECDSA over secp256k1 with SHA-256 and RFC 6979 deterministic nonces.
  Private keys are 32-byte scalars, public keys 33-byte compressed SEC1
  points and signatures fixed-length 64-byte ``r || s`` values.
- BLS12-381 with public keys in G1 (48 bytes) and signatures in G2
  (96 bytes), using the proof-of-possession ciphersuite.

The set of schemes is closed: ``provider_for`` maps every ``Scheme`` member to
exactly one provider instance.
"""

import hashlib
import os
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import ecdsa
from ecdsa.util import sigdecode_string, sigencode_string_canonize
from py_ecc.bls import G2ProofOfPossession as bls_pop
from py_ecc.bls.g2_primitives import signature_to_G2
from py_ecc.optimized_bls12_381 import curve_order as BLS_CURVE_ORDER

from sigtool import config
from sigtool.lib.errors import (
    InvalidKeyError,
    KeyGenerationError,
    MalformedSignatureError,
    SchemeMismatchError,
)
from sigtool.lib.log import get_logger

# An entropy source returns exactly ``n`` cryptographically secure bytes.
EntropySource = Callable[[int], bytes]

_log = get_logger("schemes")


class Scheme(str, Enum):
    """Signature scheme tag, chosen at key creation time."""

    ECDSA = "ecdsa"
    BLS = "bls"

    def __str__(self) -> str:
        return self.value

    @property
    def algorithm(self) -> str:
        return provider_for(self).algorithm


def system_entropy(n: int) -> bytes:
    """Default entropy source backed by the operating system CSPRNG."""
    return os.urandom(n)


def draw_entropy(source: EntropySource, n: int) -> bytes:
    """
    Read ``n`` bytes from an entropy source with a bounded retry policy.

    Args:
        source: Callable returning random bytes
        n: Number of bytes required

    Returns:
        Exactly ``n`` bytes from ``source``

    Raises:
        KeyGenerationError: If the source keeps failing or returns short reads
    """
    delay = config.ENTROPY_RETRY_DELAY
    last_error = "no attempts made"

    for attempt in range(1, config.ENTROPY_ATTEMPTS + 1):
        try:
            data = source(n)
        except OSError as e:
            last_error = str(e)
        else:
            if isinstance(data, (bytes, bytearray)) and len(data) == n:
                return bytes(data)
            got = len(data) if isinstance(data, (bytes, bytearray)) else "invalid"
            last_error = f"short read: wanted {n} bytes, got {got}"

        _log.warning(
            "Entropy source failed",
            attempt=attempt,
            attempts=config.ENTROPY_ATTEMPTS,
            error=last_error,
        )
        if attempt < config.ENTROPY_ATTEMPTS:
            time.sleep(delay)
            delay *= 2

    raise KeyGenerationError(
        f"Random source unavailable after {config.ENTROPY_ATTEMPTS} attempts: {last_error}"
    )


class SchemeProvider(ABC):
    """Key generation, signing and verification for one signature scheme."""

    scheme: Scheme
    algorithm: str
    private_key_size: int
    public_key_size: int
    signature_size: int

    @abstractmethod
    def generate(
        self, entropy: Optional[EntropySource] = None
    ) -> Tuple[bytes, bytes]:
        """Return a fresh ``(public_key, private_key)`` pair."""

    @abstractmethod
    def sign(self, private_key: bytes, message: bytes) -> bytes:
        """Sign ``message`` and return the encoded signature."""

    @abstractmethod
    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        """Return whether ``signature`` is valid for ``message`` under ``public_key``."""

    @abstractmethod
    def validate_keypair(self, public_key: bytes, private_key: bytes) -> None:
        """Raise InvalidKeyError unless the pair is well formed and consistent."""

    def _foreign_providers(self) -> List["SchemeProvider"]:
        return [p for p in _PROVIDERS.values() if p.scheme != self.scheme]

    def check_signature_encoding(self, signature: bytes) -> None:
        """
        Check that ``signature`` has this scheme's fixed length.

        Raises:
            SchemeMismatchError: If it has the length of another scheme's signatures
            MalformedSignatureError: For any other wrong length
        """
        if len(signature) == self.signature_size:
            return
        for other in self._foreign_providers():
            if len(signature) == other.signature_size:
                raise SchemeMismatchError(
                    f"{other.algorithm} signature presented to {self.algorithm}"
                )
        raise MalformedSignatureError(
            f"Invalid {self.algorithm} signature length: expected "
            f"{self.signature_size} bytes, got {len(signature)}"
        )

    def check_public_key_scheme(self, public_key: bytes) -> None:
        """Raise SchemeMismatchError for a public key sized for another scheme."""
        if len(public_key) == self.public_key_size:
            return
        for other in self._foreign_providers():
            if len(public_key) == other.public_key_size:
                raise SchemeMismatchError(
                    f"{other.algorithm} public key presented to {self.algorithm}"
                )


class EcdsaProvider(SchemeProvider):
    scheme = Scheme.ECDSA
    algorithm = "ECDSA-secp256k1"
    private_key_size = 32
    public_key_size = 33
    signature_size = 64

    _curve = ecdsa.SECP256k1
    _hashfunc = hashlib.sha256

    def generate(
        self, entropy: Optional[EntropySource] = None
    ) -> Tuple[bytes, bytes]:
        source = entropy or system_entropy
        sk = ecdsa.SigningKey.generate(
            curve=self._curve,
            entropy=lambda n: draw_entropy(source, n),
            hashfunc=self._hashfunc,
        )
        vk = sk.get_verifying_key()
        assert vk is not None, "Verifying key should not be None"
        return vk.to_string("compressed"), sk.to_string()

    def _load_signing_key(self, private_key: bytes) -> ecdsa.SigningKey:
        if len(private_key) != self.private_key_size:
            raise InvalidKeyError(
                f"Invalid ECDSA private key length: expected "
                f"{self.private_key_size} bytes, got {len(private_key)}"
            )
        try:
            return ecdsa.SigningKey.from_string(
                private_key, curve=self._curve, hashfunc=self._hashfunc
            )
        except ecdsa.keys.MalformedPointError as e:
            raise InvalidKeyError(f"Invalid ECDSA private key: {e}") from e

    def _load_verifying_key(self, public_key: bytes) -> ecdsa.VerifyingKey:
        try:
            return ecdsa.VerifyingKey.from_string(
                public_key, curve=self._curve, hashfunc=self._hashfunc
            )
        except (ecdsa.keys.MalformedPointError, ValueError) as e:
            raise InvalidKeyError(f"Invalid ECDSA public key: {e}") from e

    def sign(self, private_key: bytes, message: bytes) -> bytes:
        sk = self._load_signing_key(private_key)
        return sk.sign_deterministic(
            message,
            hashfunc=self._hashfunc,
            sigencode=sigencode_string_canonize,
        )

    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        self.check_signature_encoding(signature)
        self.check_public_key_scheme(public_key)
        vk = self._load_verifying_key(public_key)
        try:
            return vk.verify(
                signature, message, hashfunc=self._hashfunc, sigdecode=sigdecode_string
            )
        except ecdsa.BadSignatureError:
            return False

    def validate_keypair(self, public_key: bytes, private_key: bytes) -> None:
        sk = self._load_signing_key(private_key)
        vk = self._load_verifying_key(public_key)
        derived = sk.get_verifying_key()
        assert derived is not None
        if derived.to_string() != vk.to_string():
            raise InvalidKeyError("ECDSA public key does not match private key")


class BlsProvider(SchemeProvider):
    scheme = Scheme.BLS
    algorithm = "BLS12-381-min-pk"
    private_key_size = 32
    public_key_size = 48
    signature_size = 96

    def generate(
        self, entropy: Optional[EntropySource] = None
    ) -> Tuple[bytes, bytes]:
        ikm = draw_entropy(entropy or system_entropy, config.BLS_IKM_SIZE)
        try:
            sk = bls_pop.KeyGen(ikm)
        except ValueError as e:
            raise KeyGenerationError(f"Failed to generate BLS key: {e}") from e
        return bytes(bls_pop.SkToPk(sk)), sk.to_bytes(self.private_key_size, "big")

    def _load_secret(self, private_key: bytes) -> int:
        if len(private_key) != self.private_key_size:
            raise InvalidKeyError(
                f"Invalid BLS private key length: expected "
                f"{self.private_key_size} bytes, got {len(private_key)}"
            )
        sk = int.from_bytes(private_key, "big")
        if not 0 < sk < BLS_CURVE_ORDER:
            raise InvalidKeyError("Invalid BLS private key: scalar out of range")
        return sk

    def _check_public_key(self, public_key: bytes) -> bytes:
        public_key = bytes(public_key)
        if len(public_key) != self.public_key_size or not bls_pop.KeyValidate(
            public_key
        ):
            raise InvalidKeyError("Invalid BLS public key")
        return public_key

    def sign(self, private_key: bytes, message: bytes) -> bytes:
        sk = self._load_secret(private_key)
        return bytes(bls_pop.Sign(sk, bytes(message)))

    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        self.check_signature_encoding(signature)
        self.check_public_key_scheme(public_key)
        pk = self._check_public_key(public_key)
        return bls_pop.Verify(pk, bytes(message), bytes(signature))

    def validate_keypair(self, public_key: bytes, private_key: bytes) -> None:
        sk = self._load_secret(private_key)
        pk = self._check_public_key(public_key)
        if bytes(bls_pop.SkToPk(sk)) != pk:
            raise InvalidKeyError("BLS public key does not match private key")

    def aggregate(self, signatures: Sequence[bytes]) -> bytes:
        """
        Aggregate BLS signatures into a single signature.

        Args:
            signatures: Non-empty sequence of 96-byte BLS signatures

        Returns:
            The 96-byte aggregate signature

        Raises:
            MalformedSignatureError: If the list is empty or any entry
                does not decode to a G2 point
        """
        if not signatures:
            raise MalformedSignatureError("Cannot aggregate empty signature list")

        for index, signature in enumerate(signatures):
            self.check_signature_encoding(signature)
            try:
                signature_to_G2(bytes(signature))
            except ValueError as e:
                raise MalformedSignatureError(
                    f"Signature {index} is not a valid BLS signature: {e}"
                ) from e

        return bytes(bls_pop.Aggregate([bytes(s) for s in signatures]))

    def verify_aggregate(
        self, public_keys: Sequence[bytes], message: bytes, signature: bytes
    ) -> bool:
        """Verify an aggregate signature where every key signed ``message``."""
        self.check_signature_encoding(signature)
        for pk in public_keys:
            self.check_public_key_scheme(pk)
        pks = [self._check_public_key(pk) for pk in public_keys]
        return bls_pop.FastAggregateVerify(pks, bytes(message), bytes(signature))


_PROVIDERS: Dict[Scheme, SchemeProvider] = {
    Scheme.ECDSA: EcdsaProvider(),
    Scheme.BLS: BlsProvider(),
}


def provider_for(scheme: Scheme) -> SchemeProvider:
    return _PROVIDERS[Scheme(scheme)]


def bls_provider() -> BlsProvider:
    provider = _PROVIDERS[Scheme.BLS]
    assert isinstance(provider, BlsProvider)
    return provider


__all__ = [
    "EntropySource",
    "Scheme",
    "SchemeProvider",
    "EcdsaProvider",
    "BlsProvider",
    "system_entropy",
    "draw_entropy",
    "provider_for",
    "bls_provider",
]
