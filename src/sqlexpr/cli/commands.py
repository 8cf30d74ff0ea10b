"""
Expression commands: tokens, parse and eval.
"""

from __future__ import annotations

import logging

import typer
from rich.table import Table

from sqlexpr.cli.utils import build_bindings, console, describe_binding, print_error
from sqlexpr.core.errors import EvalError, EvalParseError, ParseError
from sqlexpr.core.expression_lang import (
    ParserOptions,
    evaluate,
    parse,
    render_tree,
    tokenize,
)

logger = logging.getLogger(__name__)

EXIT_PARSE_ERROR = 1
EXIT_EVAL_ERROR = 2


def tokens_command(
    expression: str = typer.Argument(..., help="Expression text to tokenize"),
) -> None:
    """Show the tokens of an expression."""
    try:
        tokens = tokenize(expression)
    except ParseError as e:
        print_error(e)
        raise typer.Exit(EXIT_PARSE_ERROR) from e

    table = Table(title="Tokens")
    table.add_column("Offset", justify="right", style="dim")
    table.add_column("Kind")
    table.add_column("Lexeme")
    for tok in tokens:
        table.add_row(str(tok.pos), tok.kind.value, tok.lexeme)
    console.print(table)


def parse_command(
    expression: str = typer.Argument(..., help="Expression text to parse"),
    tree: bool = typer.Option(False, "--tree", "-t", help="Show the indented AST"),
) -> None:
    """Parse an expression and print its canonical form."""
    options = ParserOptions.from_env()
    try:
        expr = parse(expression, options)
    except ParseError as e:
        print_error(e)
        raise typer.Exit(EXIT_PARSE_ERROR) from e

    text = render_tree(expr) if tree else str(expr)
    console.print(text, markup=False, highlight=False, soft_wrap=True)


def eval_command(
    expression: str = typer.Argument(..., help="Expression text to evaluate"),
    var: list[str] = typer.Option(
        [],
        "--var",
        help="Variable binding NAME=VALUE; VALUE is read as a literal (5, 2.5, 'abc', TRUE, NULL)",
    ),
    json_object: str | None = typer.Option(
        None,
        "--json",
        help="JSON object of variable bindings",
    ),
) -> None:
    """Evaluate an expression against variable bindings."""
    bindings = build_bindings(var, json_object)
    for name, value in bindings.items():
        logger.debug(f"Binding {name} = {describe_binding(value)}")

    options = ParserOptions.from_env()
    try:
        result = evaluate(expression, bindings, options)
    except EvalParseError as e:
        print_error(e)
        raise typer.Exit(EXIT_PARSE_ERROR) from e
    except EvalError as e:
        print_error(e)
        raise typer.Exit(EXIT_EVAL_ERROR) from e

    console.print("true" if result else "false", highlight=False)
