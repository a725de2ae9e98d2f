import hashlib

import pytest

from sigtool import config
from sigtool.lib.key_store import FileKeyStore, MemoryKeyStore
from sigtool.lib.models import KeyRecord
from sigtool.lib.schemes import Scheme, provider_for
from sigtool.lib.signing_service import SigningService


class DeterministicEntropy:
    """SHA-256 counter stream standing in for the OS random source."""

    def __init__(self, seed: bytes = b"sigtool-test-seed"):
        self.seed = seed
        self.counter = 0
        self.calls = 0

    def __call__(self, n: int) -> bytes:
        self.calls += 1
        out = b""
        while len(out) < n:
            out += hashlib.sha256(self.seed + self.counter.to_bytes(8, "big")).digest()
            self.counter += 1
        return out[:n]


class FailingEntropy:
    """Entropy source that fails a fixed number of times before recovering."""

    def __init__(self, failures: int = 10**6, short: bool = False):
        self.failures = failures
        self.short = short
        self.calls = 0
        self._fallback = DeterministicEntropy(b"recovered")

    def __call__(self, n: int) -> bytes:
        self.calls += 1
        if self.calls <= self.failures:
            if self.short:
                return b"\x00" * (n - 1)
            raise OSError("entropy pool unavailable")
        return self._fallback(n)


@pytest.fixture(autouse=True)
def no_entropy_backoff(monkeypatch):
    """Keep the entropy retry policy but skip its sleeps."""
    monkeypatch.setattr(config, "ENTROPY_RETRY_DELAY", 0)


@pytest.fixture
def entropy():
    return DeterministicEntropy()


@pytest.fixture
def make_entropy():
    return DeterministicEntropy


@pytest.fixture
def failing_entropy():
    return FailingEntropy


@pytest.fixture
def make_record(entropy):
    """Builds a well-formed KeyRecord without touching any store."""

    def _make(name: str, scheme: Scheme = Scheme.ECDSA) -> KeyRecord:
        public_key, private_key = provider_for(scheme).generate(entropy)
        return KeyRecord(
            name=name,
            scheme=scheme,
            public_key=public_key,
            private_key=private_key,
            created_at=1700000000,
        )

    return _make


@pytest.fixture
def keystore_dir(tmp_path):
    return tmp_path / "keystore"


@pytest.fixture
def file_store(keystore_dir):
    return FileKeyStore(keystore_dir)


@pytest.fixture
def memory_store():
    return MemoryKeyStore()


@pytest.fixture(params=["memory", "file"])
def store(request, keystore_dir):
    """Runs a test against both key store implementations."""
    if request.param == "memory":
        return MemoryKeyStore()
    return FileKeyStore(keystore_dir)


@pytest.fixture
def service(file_store, entropy):
    return SigningService(file_store, entropy=entropy)
