import click

from sigtool import __version__, config
from sigtool.cli.common import CliState
from sigtool.cli.keys import keygen, list_keys
from sigtool.cli.signing import aggregate, sign, verify, verify_aggregate
from sigtool.lib.log import set_level


@click.group()
@click.version_option(__version__, prog_name="sigtool")
@click.option(
    "--keystore",
    envvar=config.KEYSTORE_ENV_VAR,
    default=config.DEFAULT_KEYSTORE_DIR,
    show_default=True,
    type=click.Path(file_okay=False),
    help="Directory holding the key store.",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity.")
@click.pass_context
def cli(ctx, keystore, verbose):
    """Generates named keys and signs messages with ECDSA or BLS."""
    if verbose:
        set_level("DEBUG" if verbose > 1 else "INFO")
    ctx.obj = CliState(keystore)


# Add key management commands
cli.add_command(keygen)
cli.add_command(list_keys)

# Add signing commands
cli.add_command(sign)
cli.add_command(verify)
cli.add_command(aggregate)
cli.add_command(verify_aggregate)


if __name__ == "__main__":
    cli()
