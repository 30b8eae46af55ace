"""Route CLI command: preview where each file of an upload would go."""

from pathlib import Path

import click

from tdlr.cli.output import echo_expression_error, echo_route, echo_skipped, echo_summary
from tdlr.config import ConfigError, RoutingConfig
from tdlr.files import FileFilter, collect_files
from tdlr.routing import ErrorPolicy, Router, RoutingError, TimestampSource
from tdlr.routing.expressions import ExpressionError


def _split_extensions(values: tuple[str, ...]) -> tuple[str, ...] | None:
    """Flatten repeated and comma-separated extension options."""
    items = tuple(
        item.strip() for value in values for item in value.split(",") if item.strip()
    )
    return items or None


@click.command()
@click.option(
    "-p", "--path", "paths",
    multiple=True,
    required=True,
    help="File or directory to route (repeatable).",
)
@click.option("--to", "to", default=None, help="Destination expression, evaluated per file.")
@click.option(
    "-c", "--chat", default=None,
    help="Fixed destination chat (default: Saved Messages).",
)
@click.option(
    "-i", "--include", multiple=True,
    help="Only these extensions, e.g. jpg,png,mp4.",
)
@click.option(
    "-e", "--exclude", multiple=True,
    help="Skip these extensions, e.g. tmp,log.",
)
@click.option(
    "--on-error",
    type=click.Choice([p.value for p in ErrorPolicy]),
    default=None,
    help="abort the run (default) or skip files whose expression fails.",
)
@click.option(
    "--timestamp",
    "timestamp_source",
    type=click.Choice([s.value for s in TimestampSource]),
    default=None,
    help="File timestamp used for date/time variables.",
)
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML config file (default: $TDLR_CONFIG or ./tdlr.yaml).",
)
@click.option(
    "--workers", default=1, show_default=True, type=click.IntRange(min=1),
    help="Evaluate this many files in parallel.",
)
def route(
    paths: tuple[str, ...],
    to: str | None,
    chat: str | None,
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    on_error: str | None,
    timestamp_source: str | None,
    config_path: Path | None,
    workers: int,
):
    """Show the destination each file would be uploaded to."""
    if to is not None and chat is not None:
        raise click.UsageError("--to cannot be used together with --chat")

    try:
        config = RoutingConfig.load(config_path).merge(
            to=to,
            chat=chat,
            include=_split_extensions(include),
            exclude=_split_extensions(exclude),
            on_error=ErrorPolicy(on_error) if on_error else None,
            timestamp_source=TimestampSource(timestamp_source) if timestamp_source else None,
        )
    except ConfigError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    # Compile before touching any file
    try:
        router = Router(
            expression=config.to,
            chat=config.chat,
            on_error=config.on_error,
            timestamp_source=config.timestamp_source,
        )
    except ExpressionError as e:
        echo_expression_error(config.to or "", e)
        raise SystemExit(1)

    collected = collect_files(paths, FileFilter(config.include, config.exclude))
    if not collected.files:
        click.echo(click.style("Error: No valid files to route", fg="red"), err=True)
        raise SystemExit(1)

    try:
        plan = router.plan(collected.files, workers=workers)
    except RoutingError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        if isinstance(e.error, ExpressionError) and config.to:
            echo_expression_error(config.to, e.error, show_message=False)
        click.echo("Aborted: no files were routed.", err=True)
        raise SystemExit(1)

    total = len(collected.files)
    for decision in plan.decisions:
        if decision.ok:
            echo_route(decision.index, total, decision.path, decision.destination)
        else:
            echo_skipped(decision.index, total, decision.path, decision.error)

    echo_summary(plan.destinations(), len(plan.skipped), collected.failed)
