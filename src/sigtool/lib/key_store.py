"""
Key stores mapping key names to KeyRecords.

``FileKeyStore`` keeps one JSON document per key in a private directory.
Inserts are written to a temporary file, flushed to disk and then hard-linked
into place, so a key file is either absent or complete and an existing name
is never overwritten, even by a concurrent process. ``MemoryKeyStore`` offers
the same interface without persistence.
"""

import os
import stat
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterator, Union

from sigtool import config
from sigtool.lib.encoding import decode_key_record, encode_key_record
from sigtool.lib.errors import (
    DuplicateNameError,
    InvalidKeyError,
    InvalidNameError,
    KeyNotFoundError,
    StorageError,
)
from sigtool.lib.log import get_logger
from sigtool.lib.models import KeyIdentity, KeyRecord, validate_key_name
from sigtool.lib.schemes import provider_for

_log = get_logger("key_store")


class KeyListing:
    """
    Lazy, restartable view over the identities held by a store.

    Every iteration re-reads the store, in lexicographic name order.
    """

    def __init__(self, store: "KeyStore"):
        self._store = store

    def __iter__(self) -> Iterator[KeyIdentity]:
        return self._store._iter_identities()

    def __repr__(self) -> str:
        return f"KeyListing({self._store!r})"


class KeyStore(ABC):
    """Collection of KeyRecords addressed by unique name."""

    @abstractmethod
    def insert(self, record: KeyRecord) -> None:
        """Persist a new record; raise DuplicateNameError if the name exists."""

    @abstractmethod
    def get(self, name: str) -> KeyRecord:
        """Return the record for ``name``; raise KeyNotFoundError if absent."""

    @abstractmethod
    def _iter_identities(self) -> Iterator[KeyIdentity]:
        pass

    @abstractmethod
    def __contains__(self, name: object) -> bool:
        pass

    def list(self) -> KeyListing:
        return KeyListing(self)

    @staticmethod
    def check_record(record: KeyRecord) -> None:
        """
        Reject a record that could never be read back.

        Raises:
            InvalidNameError: If the name is not a valid identifier
            InvalidKeyError: If the key material is malformed for its scheme
        """
        validate_key_name(record.name)
        provider_for(record.scheme).validate_keypair(
            record.public_key, record.private_key
        )


class MemoryKeyStore(KeyStore):
    def __init__(self):
        self._records: Dict[str, KeyRecord] = {}
        self._lock = threading.Lock()

    def insert(self, record: KeyRecord) -> None:
        self.check_record(record)
        with self._lock:
            if record.name in self._records:
                raise DuplicateNameError(f"Key '{record.name}' already exists")
            self._records[record.name] = record

    def __contains__(self, name: object) -> bool:
        try:
            validate_key_name(name)
        except InvalidNameError:
            return False
        return name in self._records

    def get(self, name: str) -> KeyRecord:
        validate_key_name(name)
        try:
            return self._records[name]
        except KeyError:
            raise KeyNotFoundError(f"Key not found: {name}") from None

    def _iter_identities(self) -> Iterator[KeyIdentity]:
        for name in sorted(self._records):
            yield self._records[name].identity

    def __repr__(self) -> str:
        return f"MemoryKeyStore(keys={len(self._records)})"


class FileKeyStore(KeyStore):
    """Durable store: one ``<name>.json`` file per key under ``root``."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).expanduser()
        try:
            created = not self.root.exists()
            self.root.mkdir(mode=0o700, parents=True, exist_ok=True)
            if created:
                # mkdir() applies the umask to the requested mode.
                os.chmod(self.root, 0o700)
            mode = stat.S_IMODE(self.root.stat().st_mode)
        except OSError as e:
            raise StorageError(f"Cannot open key store at {self.root}: {e}") from e

        # Existing directories keep their mode.
        if mode & 0o077:
            _log.warning(
                "Key store directory is accessible to other users",
                path=self.root,
                mode=oct(mode),
            )

    def key_path(self, name: str) -> Path:
        return self.root / f"{validate_key_name(name)}{config.KEY_FILE_SUFFIX}"

    def insert(self, record: KeyRecord) -> None:
        self.check_record(record)
        path = self.key_path(record.name)
        data = encode_key_record(record)

        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self.root), prefix=".tmp-", suffix=config.KEY_FILE_SUFFIX
            )
        except OSError as e:
            raise StorageError(f"Cannot write to key store {self.root}: {e}") from e

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            # link() refuses to replace an existing file, which makes the
            # uniqueness check and the publish step a single atomic operation.
            os.link(tmp_path, path)
        except FileExistsError:
            raise DuplicateNameError(f"Key '{record.name}' already exists") from None
        except OSError as e:
            raise StorageError(f"Failed to save key '{record.name}': {e}") from e
        finally:
            tmp_path.unlink(missing_ok=True)

        self._sync_directory()
        _log.info("Saved key", name=record.name, scheme=record.scheme, path=path)

    def _sync_directory(self) -> None:
        dir_fd = os.open(self.root, os.O_RDONLY)
        try:
            os.fsync(dir_fd)
        except OSError as e:
            # Some filesystems do not support fsync on directories.
            _log.debug("Directory fsync unsupported", path=self.root, error=e)
        finally:
            os.close(dir_fd)

    def get(self, name: str) -> KeyRecord:
        path = self.key_path(name)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            raise KeyNotFoundError(f"Key not found: {name}") from None
        except OSError as e:
            raise StorageError(f"Cannot read key '{name}': {e}") from e

        record = decode_key_record(data, source=str(path))
        if record.name != name:
            raise InvalidKeyError(
                f"Key file {path} holds key '{record.name}', expected '{name}'"
            )
        return record

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        try:
            return self.key_path(name).exists()
        except InvalidNameError:
            return False

    def _iter_identities(self) -> Iterator[KeyIdentity]:
        try:
            paths = sorted(
                (
                    p
                    for p in self.root.glob(f"*{config.KEY_FILE_SUFFIX}")
                    if not p.name.startswith(".")
                ),
                key=lambda p: p.name[: -len(config.KEY_FILE_SUFFIX)],
            )
        except OSError as e:
            raise StorageError(f"Cannot list key store {self.root}: {e}") from e

        # Same checks as get(): unloadable files and misnamed copies are skipped.
        for path in paths:
            try:
                record = self.get(path.name[: -len(config.KEY_FILE_SUFFIX)])
            except KeyNotFoundError:
                continue
            except (StorageError, InvalidKeyError, InvalidNameError) as e:
                _log.warning("Skipping unreadable key file", path=path, error=e)
                continue
            yield record.identity

    def __repr__(self) -> str:
        return f"FileKeyStore({str(self.root)!r})"


__all__ = ["KeyStore", "KeyListing", "MemoryKeyStore", "FileKeyStore"]
