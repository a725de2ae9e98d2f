import click

from sigtool.cli.common import CliState, pass_state, reporting_errors
from sigtool.lib.schemes import Scheme


@click.command("keygen")
@click.option("--name", "-n", required=True, help="Name to identify the key.")
@click.option(
    "--scheme",
    "-s",
    type=click.Choice([scheme.value for scheme in Scheme]),
    default=Scheme.ECDSA.value,
    show_default=True,
    help="Signature scheme to use.",
)
@pass_state
def keygen(state: CliState, name, scheme):
    """Generates a named key pair and saves it to the key store."""
    with reporting_errors():
        record = state.service.keygen(name, Scheme(scheme))

    click.echo(f"Generated {record.scheme.algorithm} key pair: {record.name}")
    click.echo(f"Public key: {record.public_key.hex()}")


@click.command("list-keys")
@pass_state
def list_keys(state: CliState):
    """Lists all saved keys in name order, one 'name<TAB>scheme' per line."""
    with reporting_errors():
        identities = list(state.service.list_keys())

    click.echo(f"Found {len(identities)} keys in {state.keystore_path}", err=True)
    for identity in identities:
        click.echo(f"{identity.name}\t{identity.scheme}")
