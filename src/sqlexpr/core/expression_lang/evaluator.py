"""
Expression evaluator for sqlexpr filter expressions.

Evaluation runs in two phases: ``substitute`` replaces every variable with
its bound value, then the variable-free tree is walked to a boolean. Pure
evaluation: no I/O, no side effects, and no use of Python's eval().

NULL is strict: it may only be tested with IS [NOT] NULL. Any other
operation that receives NULL raises NullValueError.
"""

from __future__ import annotations

import logging
import math
import re
from functools import lru_cache

from sqlexpr.core.errors import (
    EvalArithmeticError,
    EvalParseError,
    EvalTypeError,
    EvaluationDepthError,
    NullValueError,
    ParseError,
    TypeMismatchError,
)
from sqlexpr.core.expression_lang.options import ParserOptions
from sqlexpr.core.expression_lang.parser import parse
from sqlexpr.core.expression_lang.substitution import Bindings, substitute
from sqlexpr.core.ir.expressions import (
    INT64_MAX,
    INT64_MIN,
    ArithmeticExpr,
    ArithmeticOp,
    Between,
    BooleanExpr,
    BooleanLiteral,
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
    SignOp,
    UnaryExpr,
    ValueExpr,
    ValueLiteral,
)

logger = logging.getLogger(__name__)

_ARITHMETIC_NAMES: dict[ArithmeticOp, str] = {
    ArithmeticOp.ADD: "addition",
    ArithmeticOp.SUB: "subtraction",
    ArithmeticOp.MUL: "multiplication",
    ArithmeticOp.DIV: "division",
    ArithmeticOp.MOD: "modulo",
}


def evaluate(
    source: str,
    bindings: Bindings,
    options: ParserOptions | None = None,
) -> bool:
    """Parse and evaluate a filter expression against variable bindings.

    Args:
        source: Expression text, e.g. ``"age >= 18 AND status = 'active'"``
        bindings: Variable name -> value. Values may be int, float, str,
            bool, None, or ValueLiteral.
        options: Parser settings; also supplies the evaluation depth limit.

    Returns:
        The boolean result.

    Raises:
        EvalParseError: If the text does not parse (chained to the ParseError).
        UnboundVariableError: If any variable in the tree is unbound.
        EvalTypeError: On operands of the wrong kind.
        NullValueError: If NULL reaches anything but IS [NOT] NULL.
        EvalArithmeticError: On division/modulo by zero or integer overflow.
    """
    options = options or ParserOptions()
    try:
        expr = parse(source, options)
    except ParseError as e:
        raise EvalParseError(e) from e
    return evaluate_expr(expr, bindings, options)


def evaluate_expr(
    expr: BooleanExpr,
    bindings: Bindings,
    options: ParserOptions | None = None,
) -> bool:
    """Evaluate an already-parsed expression against variable bindings."""
    max_depth = (options or ParserOptions()).eval_max_depth
    resolved = substitute(expr, bindings, max_depth)
    result = _Evaluator(max_depth).boolean(resolved, 0)
    logger.debug(f"Evaluated to {result}")
    return result


class _Evaluator:
    """Walks a fully substituted tree."""

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth

    def check_depth(self, depth: int) -> None:
        if depth > self.max_depth:
            raise EvaluationDepthError(self.max_depth)

    # -- Boolean layer --

    def boolean(self, expr: BooleanExpr, depth: int) -> bool:
        self.check_depth(depth)

        if isinstance(expr, BooleanLiteral):
            return expr.value

        if isinstance(expr, LogicalExpr):
            # AND stops at the first FALSE operand, OR at the first TRUE
            stop = expr.op == LogicalOp.OR
            for operand in expr.chain():
                if self.boolean(operand, depth + 1) == stop:
                    return stop
            return not stop

        if isinstance(expr, NotExpr):
            return not self.boolean(expr.operand, depth + 1)

        if isinstance(expr, Relational):
            return self.relational(expr.predicate, depth + 1)

        raise TypeError(f"Cannot evaluate unsubstituted node: {type(expr).__name__}")

    # -- Relational layer --

    def relational(self, expr: RelationalExpr, depth: int) -> bool:
        self.check_depth(depth)
        d = depth + 1

        if isinstance(expr, Equality):
            result = _equals(self.value(expr.left, d), self.value(expr.right, d))
            return result if expr.op == EqualityOp.EQ else not result

        if isinstance(expr, Comparison):
            return _compare(expr.op, self.value(expr.left, d), self.value(expr.right, d))

        if isinstance(expr, Like):
            return _like(expr, self.value(expr.expr, d))

        if isinstance(expr, Between):
            return _between(
                self.value(expr.expr, d),
                self.value(expr.lower, d),
                self.value(expr.upper, d),
                expr.negated,
            )

        if isinstance(expr, In):
            return _in(self.value(expr.expr, d), expr.values, expr.negated)

        if isinstance(expr, IsNull):
            return self.value(expr.expr, d).is_null != expr.negated

        raise TypeError(f"Unknown relational expression type: {type(expr).__name__}")

    # -- Value layer --

    def value(self, expr: ValueExpr, depth: int) -> ValueLiteral:
        self.check_depth(depth)

        if isinstance(expr, ValueLiteral):
            return expr

        if isinstance(expr, ArithmeticExpr):
            first, steps = expr.chain()
            result = self.value(first, depth + 1)
            for op, right in steps:
                result = _arithmetic(op, result, self.value(right, depth + 1))
            return result

        if isinstance(expr, UnaryExpr):
            return _unary(expr.op, self.value(expr.operand, depth + 1))

        raise TypeError(f"Cannot evaluate unsubstituted node: {type(expr).__name__}")


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------


def _require_numeric(operation: str, operand: ValueLiteral, location: str) -> None:
    if operand.is_null:
        raise NullValueError(operation)
    if not operand.is_numeric:
        raise EvalTypeError(operation, "numeric", operand.type_name, location)


def _int_result(operation: str, value: int) -> ValueLiteral:
    if not INT64_MIN <= value <= INT64_MAX:
        raise EvalArithmeticError(operation, "Integer overflow")
    return ValueLiteral(kind=LiteralKind.INTEGER, value=value)


def _float_result(value: float) -> ValueLiteral:
    return ValueLiteral(kind=LiteralKind.FLOAT, value=value)


def _arithmetic(op: ArithmeticOp, left: ValueLiteral, right: ValueLiteral) -> ValueLiteral:
    operation = _ARITHMETIC_NAMES[op]
    if left.is_null or right.is_null:
        raise NullValueError(operation)
    _require_numeric(operation, left, "left operand")
    _require_numeric(operation, right, "right operand")

    if op in (ArithmeticOp.DIV, ArithmeticOp.MOD) and right.value == 0:
        what = "Division" if op == ArithmeticOp.DIV else "Modulo"
        raise EvalArithmeticError(operation, f"{what} by zero")

    # Division always promotes to float
    if op == ArithmeticOp.DIV:
        return _float_result(float(left.value) / float(right.value))  # type: ignore[arg-type]

    if left.kind == LiteralKind.INTEGER and right.kind == LiteralKind.INTEGER:
        a: int = left.value  # type: ignore[assignment]
        b: int = right.value  # type: ignore[assignment]
        if op == ArithmeticOp.ADD:
            return _int_result(operation, a + b)
        if op == ArithmeticOp.SUB:
            return _int_result(operation, a - b)
        if op == ArithmeticOp.MUL:
            return _int_result(operation, a * b)
        # Truncated remainder: the result takes the sign of the dividend
        remainder = abs(a) % abs(b)
        return _int_result(operation, -remainder if a < 0 else remainder)

    x = float(left.value)  # type: ignore[arg-type]
    y = float(right.value)  # type: ignore[arg-type]
    if op == ArithmeticOp.ADD:
        return _float_result(x + y)
    if op == ArithmeticOp.SUB:
        return _float_result(x - y)
    if op == ArithmeticOp.MUL:
        return _float_result(x * y)
    return _float_result(math.fmod(x, y))


def _unary(op: SignOp, operand: ValueLiteral) -> ValueLiteral:
    operation = "unary minus" if op == SignOp.MINUS else "unary plus"
    _require_numeric(operation, operand, "operand")
    if op == SignOp.PLUS:
        return operand
    if operand.kind == LiteralKind.INTEGER:
        return _int_result(operation, -operand.value)  # type: ignore[operator]
    return _float_result(-operand.value)  # type: ignore[operator]


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


def _numeric_pair(a: ValueLiteral, b: ValueLiteral) -> tuple[int | float, int | float]:
    """Integer pairs compare exactly; any float promotes both sides."""
    if a.kind == LiteralKind.INTEGER and b.kind == LiteralKind.INTEGER:
        return a.value, b.value  # type: ignore[return-value]
    return float(a.value), float(b.value)  # type: ignore[arg-type]


def _equals(left: ValueLiteral, right: ValueLiteral) -> bool:
    if left.is_null or right.is_null:
        raise NullValueError("equality")
    if left.is_numeric and right.is_numeric:
        a, b = _numeric_pair(left, right)
        return a == b
    if left.kind != right.kind:
        raise TypeMismatchError("equality", left.type_name, right.type_name)
    return left.value == right.value


def _ordered_pair(
    operation: str, left: ValueLiteral, right: ValueLiteral
) -> tuple[int | float | str, int | float | str]:
    """Check two operands can be ordered and return their comparable values."""
    if left.is_null or right.is_null:
        raise NullValueError(operation)
    for operand, location in ((left, "left operand"), (right, "right operand")):
        if operand.kind == LiteralKind.BOOLEAN:
            raise EvalTypeError(operation, "numeric or string", "boolean", location)
    if left.is_numeric and right.is_numeric:
        return _numeric_pair(left, right)
    if left.kind == LiteralKind.STRING and right.kind == LiteralKind.STRING:
        return left.value, right.value  # type: ignore[return-value]
    raise TypeMismatchError(operation, left.type_name, right.type_name)


def _compare(op: ComparisonOp, left: ValueLiteral, right: ValueLiteral) -> bool:
    a, b = _ordered_pair("comparison", left, right)
    if op == ComparisonOp.GT:
        return a > b  # type: ignore[operator]
    if op == ComparisonOp.GE:
        return a >= b  # type: ignore[operator]
    if op == ComparisonOp.LT:
        return a < b  # type: ignore[operator]
    return a <= b  # type: ignore[operator]


def _between(
    value: ValueLiteral, lower: ValueLiteral, upper: ValueLiteral, negated: bool
) -> bool:
    low_side, lo = _ordered_pair("BETWEEN", value, lower)
    high_side, hi = _ordered_pair("BETWEEN", value, upper)
    result = lo <= low_side and high_side <= hi  # type: ignore[operator]
    return not result if negated else result


def _in(value: ValueLiteral, values: list[ValueLiteral], negated: bool) -> bool:
    if value.is_null:
        raise NullValueError("IN")
    first = values[0]
    if value.is_numeric and first.is_numeric:
        found = any(a == b for a, b in (_numeric_pair(value, v) for v in values))
    elif value.kind == LiteralKind.STRING and first.kind == LiteralKind.STRING:
        found = any(value.value == v.value for v in values)
    else:
        raise EvalTypeError(
            "IN",
            f"value comparable with {first.type_name} list",
            value.type_name,
            "left operand",
        )
    return not found if negated else found


# ---------------------------------------------------------------------------
# LIKE
# ---------------------------------------------------------------------------


@lru_cache(maxsize=256)
def _like_regex(pattern: str, escape: str | None) -> re.Pattern[str]:
    """Translate a LIKE pattern into a compiled regex for fullmatch."""
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if escape is not None and c == escape:
            # The next character is literal; a trailing escape is dropped
            i += 1
            if i < len(pattern):
                parts.append(re.escape(pattern[i]))
        elif c == "%":
            parts.append(".*")
        elif c == "_":
            parts.append(".")
        else:
            parts.append(re.escape(c))
        i += 1
    return re.compile("".join(parts), re.DOTALL)


def _like(expr: Like, value: ValueLiteral) -> bool:
    if value.is_null:
        raise NullValueError("LIKE")
    if value.kind != LiteralKind.STRING:
        raise EvalTypeError("LIKE", "string", value.type_name, "left operand")
    regex = _like_regex(expr.pattern, expr.escape)
    matched = regex.fullmatch(value.value) is not None  # type: ignore[arg-type]
    return not matched if expr.negated else matched
