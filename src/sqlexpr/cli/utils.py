"""
sqlexpr CLI utilities.

Shared helpers used by the CLI commands.
"""

from __future__ import annotations

import json
import platform
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from sqlexpr.core.errors import LexError, SqlExprError
from sqlexpr.core.expression_lang.tokenizer import TokenKind, tokenize
from sqlexpr.core.ir.expressions import ValueLiteral

console = Console()

_LITERAL_KINDS = frozenset(
    {
        TokenKind.INT,
        TokenKind.FLOAT,
        TokenKind.STRING,
        TokenKind.TRUE,
        TokenKind.FALSE,
        TokenKind.NULL,
    }
)


def get_version() -> str:
    """Get sqlexpr version from package metadata."""
    from sqlexpr import __version__

    return __version__


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        console.print(f"[bold]sqlexpr[/bold] {get_version()}")
        console.print(
            f"Python {platform.python_version()} ({platform.python_implementation()})"
        )
        raise typer.Exit()


def print_error(error: SqlExprError) -> None:
    """Print an error with its rendered source context."""
    console.print(f"[red]Error:[/red] {escape(str(error))}", soft_wrap=True)


def parse_literal_text(text: str) -> Any:
    """
    Read a command-line value the way the expression language reads literals.

    ``5``, ``-2.5``, ``'abc'``, ``TRUE`` and ``NULL`` become the matching
    Python values; anything else is kept as the raw string.
    """
    try:
        tokens = tokenize(text)
    except LexError:
        return text

    kinds = [t.kind for t in tokens]
    negative = False
    if kinds[:1] in ([TokenKind.MINUS], [TokenKind.PLUS]):
        negative = kinds[0] == TokenKind.MINUS
        if kinds[1:2] not in ([TokenKind.INT], [TokenKind.FLOAT]):
            return text
        tokens = tokens[1:]
        kinds = kinds[1:]

    if len(tokens) != 2 or kinds[0] not in _LITERAL_KINDS:
        return text

    tok = tokens[0]
    if tok.kind == TokenKind.NULL:
        return None
    if tok.kind in (TokenKind.TRUE, TokenKind.FALSE):
        return tok.kind == TokenKind.TRUE
    if negative:
        return -tok.value  # type: ignore[operator]
    return tok.value


def build_bindings(assignments: list[str], json_object: str | None) -> dict[str, Any]:
    """
    Merge ``--json`` and ``--var NAME=VALUE`` options into one binding map.

    ``--var`` entries override keys from ``--json``.

    Raises:
        typer.BadParameter: On malformed input.
    """
    bindings: dict[str, Any] = {}

    if json_object:
        try:
            data = json.loads(json_object)
        except json.JSONDecodeError as e:
            raise typer.BadParameter(f"Invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise typer.BadParameter("--json must be a JSON object")
        bindings.update(data)

    for assignment in assignments:
        name, sep, raw = assignment.partition("=")
        name = name.strip()
        if not sep or not name:
            raise typer.BadParameter(f"Expected NAME=VALUE, got {assignment!r}")
        bindings[name] = parse_literal_text(raw)

    return bindings


def describe_binding(value: Any) -> str:
    """Render a binding the way it would be written in an expression."""
    try:
        return str(ValueLiteral.of(value))
    except (TypeError, ValueError):
        return repr(value)
