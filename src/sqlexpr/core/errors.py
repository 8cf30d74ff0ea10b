"""
Error types for sqlexpr lexing, parsing, and evaluation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class SqlExprError(Exception):
    """Base exception for all sqlexpr errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.message} {self.context.format()}"
        return self.message


@dataclass(frozen=True)
class ErrorContext:
    """
    Source location of an error.

    Attributes:
        source: The complete original input text
        offset: Absolute character offset (0-indexed) of the fault
    """

    source: str
    offset: int

    @property
    def line(self) -> int:
        """Line number (1-indexed) containing the offset."""
        return self.source.count("\n", 0, self.offset) + 1

    @property
    def column(self) -> int:
        """Column number (1-indexed) of the offset within its line."""
        line_start = self.source.rfind("\n", 0, self.offset) + 1
        return self.offset - line_start + 1

    def format(self) -> str:
        """
        Format the location and echo the input with a marker.

        Returns:
            String like "at offset 4 (line 1, column 5)" followed by the
            numbered input lines and a ``^`` under the fault.
        """
        location = f"at offset {self.offset} (line {self.line}, column {self.column})"
        return f"{location}\n{self._format_snippet()}"

    def _format_snippet(self) -> str:
        """Number every input line and mark the error column."""
        formatted = []
        for i, text in enumerate(self.source.split("\n"), start=1):
            prefix = f"{i:4d} | "
            formatted.append(prefix + text)
            if i == self.line:
                formatted.append(" " * (len(prefix) + self.column - 1) + "^")
        return "\n".join(formatted)


# ---------------------------------------------------------------------------
# Front-end errors
# ---------------------------------------------------------------------------


class ParseError(SqlExprError):
    """
    Raised when an expression cannot be parsed.

    Examples:
    - Unexpected tokens
    - A value expression used where a boolean is required
    - BETWEEN / IN literal type violations
    """

    def __init__(self, message: str, offset: int, source: str):
        self.offset = offset
        self.source = source
        super().__init__(message, ErrorContext(source=source, offset=offset))


class LexErrorKind(StrEnum):
    """Character-level failure categories."""

    UNTERMINATED_STRING = "unterminated_string"
    UNTERMINATED_COMMENT = "unterminated_comment"
    MALFORMED_NUMBER = "malformed_number"
    UNEXPECTED_CHARACTER = "unexpected_character"


class LexError(ParseError):
    """Raised when the input cannot be split into tokens."""

    def __init__(self, kind: LexErrorKind, message: str, offset: int, source: str):
        self.kind = kind
        super().__init__(message, offset, source)


class NestingDepthError(ParseError):
    """Raised when parentheses, NOT or signs nest deeper than allowed."""

    pass


# ---------------------------------------------------------------------------
# Evaluation errors
# ---------------------------------------------------------------------------


class EvalError(SqlExprError):
    """Base class for failures while evaluating an expression."""

    pass


class EvalParseError(EvalError):
    """The text handed to ``evaluate`` did not parse."""

    def __init__(self, parse_error: ParseError):
        self.parse_error = parse_error
        super().__init__(str(parse_error))


class UnboundVariableError(EvalError):
    """A variable is referenced but absent from the bindings."""

    def __init__(self, name: str, available_names: list[str]):
        self.name = name
        self.available_names = available_names
        available = ", ".join(available_names) if available_names else "none"
        super().__init__(f"Unbound variable '{name}' (available: {available})")


class EvalTypeError(EvalError):
    """An operand has a kind the operation does not accept."""

    def __init__(self, operation: str, expected: str, actual: str, location: str):
        self.operation = operation
        self.expected = expected
        self.actual = actual
        self.location = location
        super().__init__(
            f"Type error in {operation}: expected {expected}, got {actual} ({location})"
        )


class TypeMismatchError(EvalTypeError):
    """The two operands of a binary operator belong to different type classes."""

    def __init__(self, operation: str, left_type: str, right_type: str):
        self.left_type = left_type
        self.right_type = right_type
        super().__init__(
            operation,
            expected="operands of the same type class",
            actual=f"{left_type} and {right_type}",
            location="binary operands",
        )


class NullValueError(EvalError):
    """NULL reached an operation other than IS [NOT] NULL."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            f"NULL value in {operation}; NULL is only allowed with IS NULL / IS NOT NULL"
        )


class EvalArithmeticError(EvalError):
    """Division or modulo by zero, or 64-bit integer overflow."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{message} in {operation}")


class EvaluationDepthError(EvalError):
    """The expression tree is nested deeper than the evaluator allows."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"Expression nesting exceeds the evaluation limit of {max_depth}")
