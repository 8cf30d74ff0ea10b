"""
sqlexpr - typed parsing and evaluation of SQL-like boolean filter expressions.

    >>> from sqlexpr import evaluate
    >>> evaluate("age BETWEEN 18 AND 65", {"age": 30})
    True
"""

from __future__ import annotations

import re
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

from .core import ir
from .core.errors import (
    EvalArithmeticError,
    EvalError,
    EvalParseError,
    EvalTypeError,
    EvaluationDepthError,
    LexError,
    LexErrorKind,
    NestingDepthError,
    NullValueError,
    ParseError,
    SqlExprError,
    TypeMismatchError,
    UnboundVariableError,
)
from .core.expression_lang import (
    ParserOptions,
    evaluate,
    evaluate_expr,
    parse,
    render_tree,
    substitute,
    tokenize,
)
from .core.ir import BooleanExpr, RelationalExpr, ValueExpr, ValueLiteral


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    try:
        return _metadata_version("sqlexpr")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "ir",
    # API
    "tokenize",
    "parse",
    "evaluate",
    "evaluate_expr",
    "substitute",
    "render_tree",
    "ParserOptions",
    # AST
    "BooleanExpr",
    "RelationalExpr",
    "ValueExpr",
    "ValueLiteral",
    # Errors
    "SqlExprError",
    "ParseError",
    "LexError",
    "LexErrorKind",
    "NestingDepthError",
    "EvalError",
    "EvalParseError",
    "UnboundVariableError",
    "EvalTypeError",
    "TypeMismatchError",
    "NullValueError",
    "EvalArithmeticError",
    "EvaluationDepthError",
]
