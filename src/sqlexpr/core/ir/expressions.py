"""
Typed expression AST for sqlexpr.

The tree has three layers, each a closed union of frozen models:

- BooleanExpr: the root of every parse; TRUE/FALSE, boolean variables,
  AND/OR, NOT, and relational predicates
- RelationalExpr: produces a boolean from value operands (=, <, LIKE,
  BETWEEN, IN, IS NULL)
- ValueExpr: numeric/string operands; literals, variables, arithmetic

A ValueExpr can never be the root. Every node renders back to parseable
expression text via ``str()``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# ---------------------------------------------------------------------------
# Literal values
# ---------------------------------------------------------------------------


class LiteralKind(StrEnum):
    """Kinds of literal and runtime values."""

    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    BOOLEAN = "boolean"
    NULL = "NULL"


_KIND_TYPES: dict[LiteralKind, type] = {
    LiteralKind.INTEGER: int,
    LiteralKind.FLOAT: float,
    LiteralKind.STRING: str,
    LiteralKind.BOOLEAN: bool,
}


def quote_string(text: str) -> str:
    """Render text as a single-quoted literal, doubling embedded quotes."""
    return "'" + text.replace("'", "''") + "'"


class ValueLiteral(BaseModel):
    """
    A literal value: 64-bit integer, float, string, boolean, or NULL.

    Also used as the runtime value space for variable bindings.
    """

    kind: LiteralKind
    value: int | float | str | bool | None = Field(default=None, description="Python value")

    model_config = ConfigDict(frozen=True, strict=True)

    @model_validator(mode="after")
    def _check_value(self) -> ValueLiteral:
        if self.kind == LiteralKind.NULL:
            if self.value is not None:
                raise ValueError("NULL literal cannot carry a value")
            return self
        expected = _KIND_TYPES[self.kind]
        if type(self.value) is not expected:
            raise ValueError(
                f"{self.kind} literal requires {expected.__name__}, "
                f"got {type(self.value).__name__}"
            )
        if self.kind == LiteralKind.INTEGER and not INT64_MIN <= self.value <= INT64_MAX:
            raise ValueError(f"integer {self.value} is outside the 64-bit signed range")
        return self

    @classmethod
    def of(cls, value: Any) -> ValueLiteral:
        """Build a literal from a plain Python value."""
        if isinstance(value, ValueLiteral):
            return value
        if value is None:
            return cls(kind=LiteralKind.NULL)
        # bool first: bool is a subclass of int
        if isinstance(value, bool):
            return cls(kind=LiteralKind.BOOLEAN, value=value)
        if isinstance(value, int):
            return cls(kind=LiteralKind.INTEGER, value=int(value))
        if isinstance(value, float):
            return cls(kind=LiteralKind.FLOAT, value=float(value))
        if isinstance(value, str):
            return cls(kind=LiteralKind.STRING, value=str(value))
        raise TypeError(f"Unsupported literal value type: {type(value).__name__}")

    @classmethod
    def null(cls) -> ValueLiteral:
        return cls(kind=LiteralKind.NULL)

    @property
    def is_null(self) -> bool:
        return self.kind == LiteralKind.NULL

    @property
    def is_numeric(self) -> bool:
        return self.kind in (LiteralKind.INTEGER, LiteralKind.FLOAT)

    @property
    def type_name(self) -> str:
        return self.kind.value

    def __str__(self) -> str:
        if self.kind == LiteralKind.NULL:
            return "NULL"
        if self.kind == LiteralKind.BOOLEAN:
            return "TRUE" if self.value else "FALSE"
        if self.kind == LiteralKind.STRING:
            return quote_string(self.value)  # type: ignore[arg-type]
        if self.kind == LiteralKind.FLOAT:
            return repr(self.value)
        return str(self.value)


RuntimeValue = ValueLiteral


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class ArithmeticOp(StrEnum):
    """Binary arithmetic operators."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"

    @property
    def precedence_group(self) -> frozenset[ArithmeticOp]:
        """Operators that share this operator's precedence level."""
        if self in (ArithmeticOp.ADD, ArithmeticOp.SUB):
            return frozenset({ArithmeticOp.ADD, ArithmeticOp.SUB})
        return frozenset({ArithmeticOp.MUL, ArithmeticOp.DIV, ArithmeticOp.MOD})


class SignOp(StrEnum):
    """Unary sign operators."""

    PLUS = "+"
    MINUS = "-"


class EqualityOp(StrEnum):
    """Equality operators; ``!=`` parses to NE as well."""

    EQ = "="
    NE = "<>"


class ComparisonOp(StrEnum):
    """Ordering operators."""

    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="


class LogicalOp(StrEnum):
    """Boolean connectives."""

    AND = "AND"
    OR = "OR"


# ---------------------------------------------------------------------------
# Value expressions
# ---------------------------------------------------------------------------


class ValueVariable(BaseModel):
    """Variable in value position; may be bound to any runtime value."""

    name: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.name


class ArithmeticExpr(BaseModel):
    """Binary arithmetic: left op right."""

    op: ArithmeticOp
    left: ValueExpr
    right: ValueExpr

    model_config = ConfigDict(frozen=True)

    def chain(self) -> tuple[ValueExpr, list[tuple[ArithmeticOp, ValueExpr]]]:
        """
        Unwind the left-leaning run of same-precedence operators.

        ``a - b + c`` gives ``(a, [(SUB, b), (ADD, c)])``.
        """
        group = self.op.precedence_group
        steps: list[tuple[ArithmeticOp, ValueExpr]] = []
        node: ValueExpr = self
        while isinstance(node, ArithmeticExpr) and node.op in group:
            steps.append((node.op, node.right))
            node = node.left
        steps.reverse()
        return node, steps

    def __str__(self) -> str:
        first, steps = self.chain()
        rest = "".join(f" {op.value} {right}" for op, right in steps)
        return f"({first}{rest})"


class UnaryExpr(BaseModel):
    """Unary plus or minus."""

    op: SignOp
    operand: ValueExpr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        inner = str(self.operand)
        # "--" would start a line comment
        if inner[:1] in ("-", "+"):
            return f"{self.op.value} {inner}"
        return f"{self.op.value}{inner}"


# ---------------------------------------------------------------------------
# Relational expressions
# ---------------------------------------------------------------------------


class Equality(BaseModel):
    """left = right, left <> right."""

    left: ValueExpr
    op: EqualityOp
    right: ValueExpr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.left} {self.op.value} {self.right}"


class Comparison(BaseModel):
    """left > right, left >= right, left < right, left <= right."""

    left: ValueExpr
    op: ComparisonOp
    right: ValueExpr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.left} {self.op.value} {self.right}"


class Like(BaseModel):
    """
    Pattern match: expr [NOT] LIKE 'pattern' [ESCAPE 'c'].

    ``%`` matches any run of characters, ``_`` exactly one.
    """

    expr: ValueExpr
    pattern: str
    escape: str | None = None
    negated: bool = False

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        op = "NOT LIKE" if self.negated else "LIKE"
        text = f"{self.expr} {op} {quote_string(self.pattern)}"
        if self.escape is not None:
            text += f" ESCAPE {quote_string(self.escape)}"
        return text


class Between(BaseModel):
    """Inclusive range check: expr [NOT] BETWEEN lower AND upper."""

    expr: ValueExpr
    lower: ValueExpr
    upper: ValueExpr
    negated: bool = False

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        op = "NOT BETWEEN" if self.negated else "BETWEEN"
        return f"{self.expr} {op} {self.lower} AND {self.upper}"


class In(BaseModel):
    """Membership test against a homogeneous literal list."""

    expr: ValueExpr
    values: list[ValueLiteral] = Field(description="Literals of one exact kind")
    negated: bool = False

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        op = "NOT IN" if self.negated else "IN"
        values_str = ", ".join(str(v) for v in self.values)
        return f"{self.expr} {op} ({values_str})"


class IsNull(BaseModel):
    """expr IS [NOT] NULL."""

    expr: ValueExpr
    negated: bool = False

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        op = "IS NOT NULL" if self.negated else "IS NULL"
        return f"{self.expr} {op}"


# ---------------------------------------------------------------------------
# Boolean expressions
# ---------------------------------------------------------------------------


class BooleanLiteral(BaseModel):
    """TRUE or FALSE in boolean position."""

    value: bool

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return "TRUE" if self.value else "FALSE"


class BooleanVariable(BaseModel):
    """Variable in boolean position; must be bound to a boolean."""

    name: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.name


class LogicalExpr(BaseModel):
    """left AND right, left OR right."""

    op: LogicalOp
    left: BooleanExpr
    right: BooleanExpr

    model_config = ConfigDict(frozen=True)

    def chain(self) -> list[BooleanExpr]:
        """Operands of the left-leaning run of this operator, leftmost first."""
        operands: list[BooleanExpr] = []
        node: BooleanExpr = self
        while isinstance(node, LogicalExpr) and node.op == self.op:
            operands.append(node.right)
            node = node.left
        operands.append(node)
        operands.reverse()
        return operands

    def __str__(self) -> str:
        joined = f" {self.op.value} ".join(str(operand) for operand in self.chain())
        return f"({joined})"


class NotExpr(BaseModel):
    """NOT operand."""

    operand: BooleanExpr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"NOT {self.operand}"


class Relational(BaseModel):
    """A relational predicate used as a boolean term."""

    predicate: RelationalExpr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return str(self.predicate)


# ---------------------------------------------------------------------------
# Union types
# ---------------------------------------------------------------------------

ValueExpr = ValueLiteral | ValueVariable | ArithmeticExpr | UnaryExpr
RelationalExpr = Equality | Comparison | Like | Between | In | IsNull
BooleanExpr = BooleanLiteral | BooleanVariable | LogicalExpr | NotExpr | Relational

# Rebuild models for recursive forward references
ArithmeticExpr.model_rebuild()
UnaryExpr.model_rebuild()
Equality.model_rebuild()
Comparison.model_rebuild()
Like.model_rebuild()
Between.model_rebuild()
In.model_rebuild()
IsNull.model_rebuild()
LogicalExpr.model_rebuild()
NotExpr.model_rebuild()
Relational.model_rebuild()
