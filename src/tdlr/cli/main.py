"""tdlr CLI entry point."""

import logging

import click


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
def cli(verbose: int):
    """tdlr: route local files to upload destinations."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


# Register subcommands
from tdlr.cli.expr_cmd import expr  # noqa: E402
from tdlr.cli.route_cmd import route  # noqa: E402

cli.add_command(expr)
cli.add_command(route)
