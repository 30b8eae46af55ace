"""Output formatting helpers shared by the CLI commands."""

from pathlib import Path

import click

from tdlr.routing.expressions import ExpressionError


def echo_expression_error(source: str, error: ExpressionError, show_message: bool = True) -> None:
    """Print an expression error with a caret under the offending position."""
    if show_message:
        click.echo(click.style(f"Error: {error}", fg="red"), err=True)
    if error.position is None or error.position > len(source):
        return
    # Show the line the error is on, with the caret aligned beneath it
    line_start = source.rfind("\n", 0, error.position) + 1
    line_end = source.find("\n", error.position)
    if line_end == -1:
        line_end = len(source)
    click.echo(f"  {source[line_start:line_end]}", err=True)
    click.echo("  " + " " * (error.position - line_start) + click.style("^", fg="red"), err=True)


def echo_route(index: int, total: int, path: Path, destination: str) -> None:
    click.echo(
        f"[{index + 1}/{total}] {path} "
        + click.style("->", fg="cyan")
        + f" {destination}"
    )


def echo_skipped(index: int, total: int, path: Path, error: Exception) -> None:
    click.echo(
        f"[{index + 1}/{total}] {path} "
        + click.style(f"✗ skipped: {error}", fg="red")
    )


def echo_summary(destinations: dict[str, list[Path]], skipped: int, failed_paths: int) -> None:
    click.echo()
    if destinations:
        click.echo(click.style("Destinations:", fg="cyan"))
        for destination, paths in destinations.items():
            click.echo(f"  {destination}: {len(paths)} file(s)")

    routed = sum(len(paths) for paths in destinations.values())
    if skipped == 0 and failed_paths == 0:
        click.echo(click.style(f"✓ All {routed} file(s) routed.", fg="green"))
        return

    parts = [click.style(f"{routed} routed", fg="green")]
    if skipped:
        parts.append(click.style(f"{skipped} skipped", fg="red"))
    if failed_paths:
        parts.append(click.style(f"{failed_paths} path(s) failed", fg="yellow"))
    click.echo(click.style("Summary", fg="cyan") + ": " + ", ".join(parts))
