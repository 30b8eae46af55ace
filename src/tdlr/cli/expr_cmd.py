"""Expression CLI commands: check, eval, vars, functions."""

import json
import math
import re
from pathlib import Path

import click

from tdlr.cli.output import echo_expression_error
from tdlr.routing import VARIABLE_KINDS, FileContext, TimestampSource, route
from tdlr.routing.expressions import (
    ExpressionError,
    FunctionCategory,
    Value,
    compile_expression,
    default_registry,
    to_display_string,
)
from tdlr.routing.expressions.values import CONSTANTS

_NUMERAL_RE = re.compile(r"-?\d+(?:\.\d+)?")


def _parse_var(raw: str) -> tuple[str, Value]:
    """Parse a name=value option; true/false become Bool, numerals Number."""
    name, sep, text = raw.partition("=")
    name = name.strip()
    if not sep or not name:
        raise click.BadParameter(f"expected name=value, got {raw!r}", param_hint="--var")
    if name in CONSTANTS:
        raise click.BadParameter(f"{name} is a constant and cannot be set", param_hint="--var")
    if text in ("true", "false"):
        return name, text == "true"
    if _NUMERAL_RE.fullmatch(text):
        number = float(text)
        if not math.isfinite(number):
            raise click.BadParameter(f"{name}: number out of range", param_hint="--var")
        return name, number
    return name, text


@click.group()
def expr():
    """Routing expression tools."""
    pass


@expr.command()
@click.argument("expression")
def check(expression: str):
    """Compile an expression and list what it references."""
    try:
        compiled = compile_expression(expression)
    except ExpressionError as e:
        echo_expression_error(expression, e)
        raise SystemExit(1)

    click.echo(click.style("Expression OK", fg="green", bold=True))
    variables = compiled.variables()
    functions = compiled.functions()
    click.echo(f"Variables: {', '.join(variables) if variables else '(none)'}")
    click.echo(f"Functions: {', '.join(functions) if functions else '(none)'}")

    # Only warnings: a reference on an untaken branch never fails
    for name in compiled.unknown_variables(VARIABLE_KINDS):
        click.echo(click.style(f"Warning: unknown variable '{name}'", fg="yellow"))
    registry = default_registry()
    for name in functions:
        if name not in registry:
            click.echo(click.style(f"Warning: unknown function '{name}'", fg="yellow"))


@expr.command("eval")
@click.argument("expression")
@click.option(
    "--file", "file_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Evaluate against this file's variables.",
)
@click.option("--var", "raw_vars", multiple=True, help="Set a variable, name=value (repeatable).")
@click.option(
    "--route", "as_route", is_flag=True, default=False,
    help="Require a String result, as the --to option does.",
)
@click.option(
    "--timestamp",
    "timestamp_source",
    type=click.Choice([s.value for s in TimestampSource]),
    default=TimestampSource.MODIFIED.value,
    show_default=True,
)
def eval_cmd(
    expression: str,
    file_path: Path | None,
    raw_vars: tuple[str, ...],
    as_route: bool,
    timestamp_source: str,
):
    """Evaluate an expression and print the result."""
    variables: dict[str, Value] = {}
    if file_path is not None:
        file_context = FileContext.from_path(
            file_path, 0, 1, timestamp_source=TimestampSource(timestamp_source)
        )
        variables.update(file_context.to_context().variables)
    variables.update(_parse_var(raw) for raw in raw_vars)

    try:
        compiled = compile_expression(expression)
        result = route(compiled, variables) if as_route else compiled.evaluate(variables)
    except ExpressionError as e:
        echo_expression_error(expression, e)
        raise SystemExit(1)

    click.echo(to_display_string(result))


@expr.command("vars")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--timestamp",
    "timestamp_source",
    type=click.Choice([s.value for s in TimestampSource]),
    default=TimestampSource.MODIFIED.value,
    show_default=True,
)
def vars_cmd(path: Path, timestamp_source: str):
    """Show the variables a file would be routed with."""
    file_context = FileContext.from_path(
        path, 0, 1, timestamp_source=TimestampSource(timestamp_source)
    )
    variables = file_context.to_context().variables
    width = max(len(name) for name in VARIABLE_KINDS)
    for name, kind in VARIABLE_KINDS.items():
        value = variables[name]
        shown = f'"{value}"' if isinstance(value, str) else to_display_string(value)
        click.echo(f"{name:<{width}}  {kind.value:<6}  {shown}")


@expr.command()
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the catalogue as JSON.")
def functions(as_json: bool):
    """List the built-in functions."""
    registry = default_registry()
    if as_json:
        click.echo(json.dumps(registry.export_documentation(), indent=2))
        return

    for category in FunctionCategory:
        definitions = registry.list_by_category(category)
        if not definitions:
            continue
        click.echo(click.style(category.value.title(), fg="cyan", bold=True))
        for func_def in definitions:
            click.echo(f"  {func_def.signature}")
            click.echo(f"      {func_def.description}")
