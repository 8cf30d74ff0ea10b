"""
Indented tree rendering of parsed expressions.

Used for the parser's debug dump and by ``sqlexpr parse --tree``.
"""

from __future__ import annotations

from sqlexpr.core.ir.expressions import (
    ArithmeticExpr,
    ArithmeticOp,
    Between,
    BooleanExpr,
    BooleanLiteral,
    BooleanVariable,
    Comparison,
    Equality,
    In,
    IsNull,
    Like,
    LogicalExpr,
    LogicalOp,
    NotExpr,
    Relational,
    RelationalExpr,
    SignOp,
    UnaryExpr,
    ValueExpr,
    ValueLiteral,
    ValueVariable,
    quote_string,
)

INDENT = "   "

_ARITHMETIC_NAMES: dict[ArithmeticOp, str] = {
    ArithmeticOp.ADD: "Add",
    ArithmeticOp.SUB: "Subtract",
    ArithmeticOp.MUL: "Multiply",
    ArithmeticOp.DIV: "Divide",
    ArithmeticOp.MOD: "Modulo",
}

_SIGN_NAMES: dict[SignOp, str] = {
    SignOp.PLUS: "UnaryPlus",
    SignOp.MINUS: "UnaryMinus",
}


def _flag(value: bool) -> str:
    return "true" if value else "false"


def render_tree(expr: BooleanExpr | RelationalExpr | ValueExpr) -> str:
    """Render any node as an indented tree, one node per line."""
    lines: list[str] = []
    # Walked with a stack; AND/OR and arithmetic chains can be thousands of levels deep
    stack: list[tuple[object, int]] = [(expr, 0)]
    while stack:
        node, depth = stack.pop()
        label, children = _describe(node)
        lines.append(INDENT * depth + label)
        stack.extend((child, depth + 1) for child in reversed(children))
    return "\n".join(lines)


def format_debug_dump(source: str, expr: BooleanExpr) -> str:
    """The parser's debug dump: the input text followed by its tree."""
    return f"Input: {source}\nAST:\n{render_tree(expr)}"


def _describe(node: object) -> tuple[str, tuple[object, ...]]:
    """Return a node's label and its children in display order."""
    # Boolean layer
    if isinstance(node, LogicalExpr):
        return ("Or" if node.op == LogicalOp.OR else "And"), (node.left, node.right)
    if isinstance(node, NotExpr):
        return "Not", (node.operand,)
    if isinstance(node, BooleanLiteral):
        return f"BooleanLiteral: {_flag(node.value)}", ()
    if isinstance(node, BooleanVariable | ValueVariable):
        return f"Variable: {node.name}", ()
    if isinstance(node, Relational):
        return "Relational", (node.predicate,)

    # Relational layer
    if isinstance(node, Equality):
        return f"Equality: {node.op.value}", (node.left, node.right)
    if isinstance(node, Comparison):
        return f"Comparison: {node.op.value}", (node.left, node.right)
    if isinstance(node, Like):
        escape = "None" if node.escape is None else quote_string(node.escape)
        label = (
            f"Like: negated={_flag(node.negated)}, pattern={quote_string(node.pattern)}, "
            f"escape={escape}"
        )
        return label, (node.expr,)
    if isinstance(node, Between):
        return f"Between: negated={_flag(node.negated)}", (node.expr, node.lower, node.upper)
    if isinstance(node, In):
        values = ", ".join(str(v) for v in node.values)
        return f"In: negated={_flag(node.negated)}, values=[{values}]", (node.expr,)
    if isinstance(node, IsNull):
        return f"IsNull: negated={_flag(node.negated)}", (node.expr,)

    # Value layer
    if isinstance(node, ArithmeticExpr):
        return _ARITHMETIC_NAMES[node.op], (node.left, node.right)
    if isinstance(node, UnaryExpr):
        return _SIGN_NAMES[node.op], (node.operand,)
    if isinstance(node, ValueLiteral):
        if node.is_null:
            return "Literal: NULL", ()
        return f"Literal: {node.kind.value} {node}", ()
    raise TypeError(f"Cannot render node of type {type(node).__name__}")
