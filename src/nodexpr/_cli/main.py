import json
import logging
import tomllib
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from nodexpr._analysis import describe, required_bindings
from nodexpr._errors import NodexprError
from nodexpr._evaluate import Precision
from nodexpr._expression import Expression
from nodexpr._io import ExpressionDocument, document_to_expression, load_document
from nodexpr._node import NodeId

from .config import ConfigError, NodexprConfig, get_config
from .render import render_stats

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

PathArgument = Annotated[
    Path | None,
    typer.Argument(help="Path to an expression TOML file (defaults to [tool.nodexpr].input)"),
]
NodeOption = Annotated[
    int | None,
    typer.Option("-n", "--node", help="Id of the node to use instead of the document root"),
]


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Nodexpr CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error: {escape(message)}[/red]")
    return typer.Exit(code=1)


def _load_config() -> NodexprConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _load(path: Path | None, config: NodexprConfig) -> tuple[Expression, ExpressionDocument]:
    """Load the expression document from the CLI path or the configured input."""
    effective_path = path if path is not None else config.input
    if effective_path is None:
        msg = "Expression file required. Pass PATH or configure [tool.nodexpr].input"
        raise _fail(msg)

    err_console.print(f"[cyan]Loading expression from:[/cyan] {effective_path}")
    try:
        document = load_document(effective_path)
    except OSError as e:
        raise _fail(f"Cannot read {effective_path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise _fail(f"Invalid TOML in {effective_path}: {e}") from e
    except ValidationError as e:
        raise _fail(f"Invalid expression document {effective_path}:\n{e}") from e

    try:
        expression = document_to_expression(document)
    except NodexprError as e:
        raise _fail(f"Invalid expression in {effective_path}: {e}") from e

    logger.debug("Expression has %d nodes", len(expression))
    return expression, document


def _select(expression: Expression, node: int | None) -> NodeId:
    try:
        node_id = expression.root if node is None else NodeId(node)
        expression.get(node_id)
    except NodexprError as e:
        raise _fail(str(e)) from e
    return node_id


@app.command("format")
def format_(
    path: PathArgument = None,
    *,
    node: NodeOption = None,
) -> None:
    """Print an expression as fully parenthesized infix text."""
    config = _load_config()
    expression, _ = _load(path, config)
    node_id = _select(expression, node)

    out_console.print(expression.format(node_id), markup=False, highlight=False, soft_wrap=True)


@app.command("eval")
def eval_(
    path: PathArgument = None,
    *,
    node: NodeOption = None,
    bindings: Annotated[
        list[float] | None,
        typer.Option("-b", "--bind", help="Binding value; repeat in variable order (overrides document bindings)"),
    ] = None,
    precision: Annotated[
        Precision | None,
        typer.Option("--precision", help="Arithmetic precision (defaults to [tool.nodexpr].precision or double)"),
    ] = None,
) -> None:
    """Evaluate an expression against a binding vector."""
    config = _load_config()
    expression, document = _load(path, config)
    node_id = _select(expression, node)

    effective_bindings = bindings if bindings else document.bindings
    effective_precision = precision or config.precision or Precision.DOUBLE

    err_console.print(
        f"[cyan]Evaluating node {node_id} with {len(effective_bindings)} binding(s) "
        f"in {effective_precision} precision...[/cyan]",
    )
    try:
        value = expression.evaluate(node_id, effective_bindings, precision=effective_precision)
    except NodexprError as e:
        needed = required_bindings(expression.arena, node_id)
        raise _fail(f"{e} (expression needs {needed})") from e

    out_console.print(repr(value), markup=False, highlight=False)


@app.command()
def check(
    path: PathArgument = None,
    *,
    node: NodeOption = None,
) -> None:
    """Validate an expression document and show its statistics."""
    config = _load_config()
    expression, _ = _load(path, config)
    node_id = _select(expression, node)

    err_console.print()
    render_stats(describe(expression.arena, node_id), node_id, len(expression), out_console)
    err_console.print()
    err_console.print("[green]✓ Expression is valid[/green]")
    err_console.print()


@app.command()
def schema(
    *,
    output: Annotated[
        Path,
        typer.Option("-o", "--output", help="Path to output JSON schema file"),
    ],
    indent: Annotated[
        int,
        typer.Option("--indent", help="JSON indentation spaces"),
    ] = 2,
) -> None:
    """Generate JSON schema for expression documents."""
    err_console.print("[cyan]Generating expression document JSON schema...[/cyan]")
    json_schema = ExpressionDocument.model_json_schema()

    err_console.print(f"[cyan]Writing schema to:[/cyan] {output}")
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w") as f:
        json.dump(json_schema, f, indent=indent)

    err_console.print("[green]✓ Schema generation complete[/green]")


def main() -> None:
    app()
