"""
sqlexpr filter expression language.

Tokenizer, parser, substitution and evaluator for SQL-like boolean filters.

Usage:
    from sqlexpr.core.expression_lang import parse, evaluate

    expr = parse("age BETWEEN 18 AND 65 AND name LIKE 'A%'")
    result = evaluate("a / b = 2.5", {"a": 10, "b": 4})
    # result is True
"""

from sqlexpr.core.expression_lang.evaluator import evaluate, evaluate_expr
from sqlexpr.core.expression_lang.options import ParserOptions
from sqlexpr.core.expression_lang.parser import parse
from sqlexpr.core.expression_lang.printer import format_debug_dump, render_tree
from sqlexpr.core.expression_lang.substitution import substitute, to_runtime_bindings
from sqlexpr.core.expression_lang.tokenizer import Token, TokenKind, tokenize

__all__ = [
    "ParserOptions",
    "Token",
    "TokenKind",
    "evaluate",
    "evaluate_expr",
    "format_debug_dump",
    "parse",
    "render_tree",
    "substitute",
    "to_runtime_bindings",
    "tokenize",
]
