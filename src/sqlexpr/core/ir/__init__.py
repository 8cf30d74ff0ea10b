"""
sqlexpr Intermediate Representation (IR) types.

All AST node types are re-exported from this package.
"""

from .expressions import (
    INT64_MAX,
    INT64_MIN,
    ArithmeticExpr,
    ArithmeticOp,
    Between,
    BooleanExpr,
    BooleanLiteral,
    BooleanVariable,
    Comparison,
    ComparisonOp,
    Equality,
    EqualityOp,
    In,
    IsNull,
    Like,
    LiteralKind,
    LogicalExpr,
    LogicalOp,
    NotExpr,
    Relational,
    RelationalExpr,
    RuntimeValue,
    SignOp,
    UnaryExpr,
    ValueExpr,
    ValueLiteral,
    ValueVariable,
    quote_string,
)

__all__ = [
    "INT64_MAX",
    "INT64_MIN",
    # Boolean layer
    "BooleanExpr",
    "BooleanLiteral",
    "BooleanVariable",
    "LogicalExpr",
    "LogicalOp",
    "NotExpr",
    "Relational",
    # Relational layer
    "RelationalExpr",
    "Equality",
    "EqualityOp",
    "Comparison",
    "ComparisonOp",
    "Like",
    "Between",
    "In",
    "IsNull",
    # Value layer
    "ValueExpr",
    "ValueLiteral",
    "ValueVariable",
    "ArithmeticExpr",
    "ArithmeticOp",
    "UnaryExpr",
    "SignOp",
    "LiteralKind",
    "RuntimeValue",
    "quote_string",
]
