import re
from dataclasses import dataclass, field
from typing import NamedTuple

from sigtool import config
from sigtool.lib.errors import InvalidNameError
from sigtool.lib.schemes import Scheme

_NAME_RE = re.compile(config.KEY_NAME_PATTERN)


def validate_key_name(name: str) -> str:
    """Return ``name`` unchanged if it is a usable key identifier."""
    if not isinstance(name, str) or not _NAME_RE.fullmatch(name):
        raise InvalidNameError(
            f"Invalid key name {name!r}: use letters, digits, '.', '_' or '-', "
            "starting with a letter or digit (max 128 characters)"
        )
    return name


@dataclass(frozen=True)
class KeyRecord:
    """A named keypair for one scheme. Private material never appears in repr."""

    name: str
    scheme: Scheme
    public_key: bytes
    private_key: bytes = field(repr=False)
    created_at: int = field(default=0, compare=False)

    @property
    def identity(self) -> "KeyIdentity":
        return KeyIdentity(self.name, self.scheme)


@dataclass(frozen=True)
class Signature:
    """Scheme-tagged signature bytes."""

    scheme: Scheme
    data: bytes

    def hex(self) -> str:
        return self.data.hex()


class KeyIdentity(NamedTuple):
    """What listing exposes about a stored key."""

    name: str
    scheme: Scheme
