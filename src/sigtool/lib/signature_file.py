import os
import tempfile
from pathlib import Path
from typing import Union

from sigtool.lib.encoding import decode_signature, encode_signature
from sigtool.lib.errors import StorageError
from sigtool.lib.models import Signature


def save_signature(path: Union[str, Path], signature: Signature) -> Path:
    """Atomically write a scheme-tagged signature file readable only by its owner."""
    path = Path(path)
    data = encode_signature(signature)

    try:
        fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=".tmp-sig-")
    except OSError as e:
        raise StorageError(f"Cannot write signature to {path}: {e}") from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        raise StorageError(f"Cannot write signature to {path}: {e}") from e

    return path


def load_signature(path: Union[str, Path]) -> Signature:
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise StorageError(f"Cannot read signature file {path}: {e}") from e
    return decode_signature(data)
