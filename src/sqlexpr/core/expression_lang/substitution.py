"""
Variable substitution: the first evaluation phase.

Replaces every variable in a parsed tree with its bound value, producing a
tree with no variables left. The whole tree is substituted before anything
is evaluated, so a branch that AND/OR would later skip still needs its
variables bound.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from sqlexpr.core.errors import EvalTypeError, EvaluationDepthError, UnboundVariableError
from sqlexpr.core.expression_lang.options import DEFAULT_EVAL_MAX_DEPTH
from sqlexpr.core.ir.expressions import (
    ArithmeticExpr,
    Between,
    BooleanExpr,
    BooleanLiteral,
    BooleanVariable,
    Comparison,
    Equality,
    In,
    IsNull,
    Like,
    LiteralKind,
    LogicalExpr,
    NotExpr,
    Relational,
    RelationalExpr,
    UnaryExpr,
    ValueExpr,
    ValueLiteral,
    ValueVariable,
)

logger = logging.getLogger(__name__)

Bindings = Mapping[str, Any]


def to_runtime_bindings(bindings: Bindings) -> dict[str, ValueLiteral]:
    """Convert plain Python values (or ValueLiterals) to runtime values.

    Raises:
        EvalTypeError: If a value is not int, float, str, bool or None, or an
            int does not fit in 64 bits.
    """
    converted: dict[str, ValueLiteral] = {}
    for name, value in bindings.items():
        try:
            converted[name] = ValueLiteral.of(value)
        except (TypeError, ValidationError) as e:
            raise EvalTypeError(
                operation="variable binding",
                expected="64-bit integer, float, string, boolean or None",
                actual=type(value).__name__,
                location=f"variable '{name}'",
            ) from e
    return converted


def substitute(
    expr: BooleanExpr,
    bindings: Bindings,
    max_depth: int = DEFAULT_EVAL_MAX_DEPTH,
) -> BooleanExpr:
    """Return a copy of ``expr`` with every variable replaced by its value.

    Boolean-position variables must be bound to booleans; value-position
    variables may hold any runtime value, including NULL.

    Raises:
        UnboundVariableError: If a variable has no binding.
        EvalTypeError: If a boolean-position variable is bound to a non-boolean,
            or a binding is not a supported value.
        EvaluationDepthError: If the tree is nested deeper than ``max_depth``.
    """
    return _Substituter(to_runtime_bindings(bindings), max_depth).boolean(expr, 0)


class _Substituter:
    def __init__(self, bindings: dict[str, ValueLiteral], max_depth: int) -> None:
        self.bindings = bindings
        self.max_depth = max_depth

    def lookup(self, name: str) -> ValueLiteral:
        try:
            return self.bindings[name]
        except KeyError:
            raise UnboundVariableError(name, sorted(self.bindings)) from None

    def check_depth(self, depth: int) -> None:
        if depth > self.max_depth:
            raise EvaluationDepthError(self.max_depth)

    def boolean(self, expr: BooleanExpr, depth: int) -> BooleanExpr:
        self.check_depth(depth)

        if isinstance(expr, BooleanLiteral):
            return expr

        if isinstance(expr, BooleanVariable):
            value = self.lookup(expr.name)
            if value.kind != LiteralKind.BOOLEAN:
                raise EvalTypeError(
                    operation="boolean variable",
                    expected="boolean",
                    actual=value.type_name,
                    location=f"variable '{expr.name}'",
                )
            logger.debug(f"Substituted boolean variable {expr.name} = {value}")
            return BooleanLiteral(value=value.value)

        if isinstance(expr, LogicalExpr):
            operands = [self.boolean(operand, depth + 1) for operand in expr.chain()]
            result = operands[0]
            for operand in operands[1:]:
                result = LogicalExpr(op=expr.op, left=result, right=operand)
            return result

        if isinstance(expr, NotExpr):
            return NotExpr(operand=self.boolean(expr.operand, depth + 1))

        if isinstance(expr, Relational):
            return Relational(predicate=self.relational(expr.predicate, depth + 1))

        raise TypeError(f"Unknown boolean expression type: {type(expr).__name__}")

    def relational(self, expr: RelationalExpr, depth: int) -> RelationalExpr:
        self.check_depth(depth)
        d = depth + 1

        if isinstance(expr, Equality | Comparison):
            return expr.model_copy(
                update={"left": self.value(expr.left, d), "right": self.value(expr.right, d)}
            )

        if isinstance(expr, Between):
            return expr.model_copy(
                update={
                    "expr": self.value(expr.expr, d),
                    "lower": self.value(expr.lower, d),
                    "upper": self.value(expr.upper, d),
                }
            )

        if isinstance(expr, Like | In | IsNull):
            return expr.model_copy(update={"expr": self.value(expr.expr, d)})

        raise TypeError(f"Unknown relational expression type: {type(expr).__name__}")

    def value(self, expr: ValueExpr, depth: int) -> ValueExpr:
        self.check_depth(depth)

        if isinstance(expr, ValueLiteral):
            return expr

        if isinstance(expr, ValueVariable):
            value = self.lookup(expr.name)
            logger.debug(f"Substituted variable {expr.name} = {value}")
            return value

        if isinstance(expr, ArithmeticExpr):
            first, steps = expr.chain()
            result = self.value(first, depth + 1)
            for op, right in steps:
                result = ArithmeticExpr(op=op, left=result, right=self.value(right, depth + 1))
            return result

        if isinstance(expr, UnaryExpr):
            return UnaryExpr(op=expr.op, operand=self.value(expr.operand, depth + 1))

        raise TypeError(f"Unknown value expression type: {type(expr).__name__}")
