import click
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional

from sigtool.lib.errors import SigToolError
from sigtool.lib.key_store import FileKeyStore
from sigtool.lib.signing_service import SigningService


class CommandError(click.ClickException):
    """ClickException that exits with the status assigned to a SigToolError."""

    def __init__(self, error: SigToolError):
        super().__init__(str(error))
        self.exit_code = error.exit_code


@contextmanager
def reporting_errors():
    """Translate library errors into click errors with distinct exit codes."""
    try:
        yield
    except SigToolError as e:
        raise CommandError(e) from e


class CliState:
    """Per-invocation state; the key store is only opened when first needed."""

    def __init__(self, keystore: str):
        self.keystore_path = Path(keystore).expanduser()
        self._service: Optional[SigningService] = None

    @property
    def service(self) -> SigningService:
        if self._service is None:
            with reporting_errors():
                self._service = SigningService(FileKeyStore(self.keystore_path))
        return self._service


pass_state = click.make_pass_decorator(CliState)


def read_message(message: Optional[str], file: Optional[str]) -> bytes:
    """Return the message given either inline or as a file path."""
    if message is None and file is None:
        raise click.UsageError("Either --message or --file must be provided.")
    if message is not None and file is not None:
        raise click.UsageError("Provide either --message or --file, not both.")

    if message is not None:
        return message.encode("utf-8")
    with open(file, "rb") as f:
        return f.read()


def split_csv(ctx, param, value) -> List[str]:
    """Click callback turning ``a,b,c`` into ``["a", "b", "c"]``."""
    if value is None:
        return []
    items = [item.strip() for item in value.split(",") if item.strip()]
    if not items:
        raise click.BadParameter("expected a comma-separated list")
    return items
