"""
sqlexpr CLI Package.

- commands.py: tokens, parse and eval commands
- utils.py: Shared utilities (version, binding parsing, error output)
"""

from __future__ import annotations

import logging
import sys

import typer

from sqlexpr.cli.commands import eval_command, parse_command, tokens_command
from sqlexpr.cli.utils import get_version, version_callback

app = typer.Typer(
    help="""sqlexpr – parse and evaluate SQL-like boolean filter expressions

Examples:
  sqlexpr tokens "price * qty > 100"
  sqlexpr parse --tree "NOT (a OR b) AND c IS NULL"
  sqlexpr eval "age BETWEEN 18 AND 65" --var age=30
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """sqlexpr CLI main callback for global options."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


app.command(name="tokens")(tokens_command)
app.command(name="parse")(parse_command)
app.command(name="eval")(eval_command)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


__all__ = ["app", "main", "get_version", "version_callback"]


if __name__ == "__main__":
    main(sys.argv[1:])
