import click

from sigtool.cli.common import (
    CliState,
    pass_state,
    read_message,
    reporting_errors,
    split_csv,
)
from sigtool.lib.signature_file import load_signature, save_signature


def _report_verdict(ctx: click.Context, valid: bool) -> None:
    click.echo(f"Signature verification: {'VALID ✓' if valid else 'INVALID ✗'}")
    if not valid:
        ctx.exit(1)


@click.command("sign")
@click.option("--key", "-k", required=True, help="Key to use for signing.")
@click.option("--message", "-m", help="Message to sign (string).")
@click.option(
    "--file",
    "-f",
    type=click.Path(exists=True, dir_okay=False),
    help="File containing the message to sign.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    help="Output file for the signature. Prints hex to stdout if omitted.",
)
@pass_state
def sign(state: CliState, key, message, file, output):
    """Signs a message with a named key."""
    msg = read_message(message, file)

    with reporting_errors():
        signature = state.service.sign(key, msg)
        if output:
            save_signature(output, signature)

    if output:
        click.echo(f"Signature saved to {output}", err=True)
    else:
        click.echo(signature.hex())


@click.command("verify")
@click.option("--key", "-k", required=True, help="Key to use for verification.")
@click.option(
    "--signature",
    "-s",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Signature file to verify.",
)
@click.option("--message", "-m", help="Message that was signed (string).")
@click.option(
    "--file",
    "-f",
    type=click.Path(exists=True, dir_okay=False),
    help="File containing the message that was signed.",
)
@pass_state
@click.pass_context
def verify(ctx, state: CliState, key, signature, message, file):
    """Verifies a signature file against a message and a named key.

    Exits 0 for a valid signature and 1 for a signature that does not match.
    """
    msg = read_message(message, file)

    with reporting_errors():
        sig = load_signature(signature)
        valid = state.service.verify(key, msg, sig)

    _report_verdict(ctx, valid)


@click.command("aggregate")
@click.option(
    "--signatures",
    "-s",
    required=True,
    callback=split_csv,
    help="Signature files to aggregate (comma-separated).",
)
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(dir_okay=False, writable=True),
    help="Output file for the aggregated signature.",
)
@pass_state
def aggregate(state: CliState, signatures, output):
    """Aggregates BLS signatures into a single signature."""
    with reporting_errors():
        loaded = [load_signature(path) for path in signatures]
        aggregated = state.service.aggregate(loaded)
        save_signature(output, aggregated)

    click.echo(
        f"Aggregated {len(loaded)} signatures; saved to {output}",
        err=True,
    )


@click.command("verify-aggregate")
@click.option(
    "--keys",
    "-k",
    required=True,
    callback=split_csv,
    help="Keys whose signatures were aggregated (comma-separated).",
)
@click.option(
    "--signature",
    "-s",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Aggregated signature file to verify.",
)
@click.option("--message", "-m", help="Message that was signed (string).")
@click.option(
    "--file",
    "-f",
    type=click.Path(exists=True, dir_okay=False),
    help="File containing the message that was signed.",
)
@pass_state
@click.pass_context
def verify_aggregate(ctx, state: CliState, keys, signature, message, file):
    """Verifies an aggregated BLS signature over one message."""
    msg = read_message(message, file)

    with reporting_errors():
        sig = load_signature(signature)
        valid = state.service.verify_aggregate(keys, msg, sig)

    _report_verdict(ctx, valid)
