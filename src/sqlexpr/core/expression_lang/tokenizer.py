"""
Tokenizer for the sqlexpr filter language.

Converts an expression string into a sequence of typed tokens. Whitespace
and comments (``-- ...`` to end of line, ``/* ... */``) are discarded here
and never reach the parser.
"""

from __future__ import annotations

import math
import re
from enum import StrEnum, auto

from sqlexpr.core.errors import LexError, LexErrorKind
from sqlexpr.core.ir.expressions import INT64_MAX


class TokenKind(StrEnum):
    """Token types for the filter language."""

    # Literals
    INT = auto()
    FLOAT = auto()
    STRING = auto()

    # Identifiers and keywords
    IDENT = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    LIKE = auto()
    ESCAPE = auto()
    BETWEEN = auto()
    IN = auto()
    IS = auto()
    NULL = auto()
    TRUE = auto()
    FALSE = auto()

    # Operators
    EQ = auto()
    NE = auto()
    GT = auto()
    GE = auto()
    LT = auto()
    LE = auto()
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    PERCENT = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()

    # End of input
    EOF = auto()


class Token:
    """A single token from the tokenizer.

    ``value`` holds the decoded literal for INT, FLOAT and STRING tokens
    (e.g. 26 for ``0x1A``, ``it's`` for ``'it''s'``) and the lexeme otherwise.
    """

    __slots__ = ("kind", "lexeme", "pos", "value")

    def __init__(
        self,
        kind: TokenKind,
        lexeme: str,
        pos: int,
        value: int | float | str | None = None,
    ) -> None:
        self.kind = kind
        self.lexeme = lexeme
        self.pos = pos
        self.value = lexeme if value is None else value

    def describe(self) -> str:
        """Human-readable form used in error messages."""
        if self.kind == TokenKind.EOF:
            return "end of input"
        if self.kind == TokenKind.IDENT:
            return f"identifier '{self.lexeme}'"
        if self.kind == TokenKind.STRING:
            return f"string {self.lexeme}"
        if self.kind == TokenKind.INT:
            return f"integer {self.lexeme}"
        if self.kind == TokenKind.FLOAT:
            return f"float {self.lexeme}"
        return f"'{self.lexeme}'"

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.lexeme!r}, pos={self.pos})"


KEYWORDS: dict[str, TokenKind] = {
    "and": TokenKind.AND,
    "or": TokenKind.OR,
    "not": TokenKind.NOT,
    "like": TokenKind.LIKE,
    "escape": TokenKind.ESCAPE,
    "between": TokenKind.BETWEEN,
    "in": TokenKind.IN,
    "is": TokenKind.IS,
    "null": TokenKind.NULL,
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
}

_TWO_CHAR_OPS: dict[str, TokenKind] = {
    "<>": TokenKind.NE,
    "!=": TokenKind.NE,
    "<=": TokenKind.LE,
    ">=": TokenKind.GE,
}

_SINGLE_CHAR_OPS: dict[str, TokenKind] = {
    "=": TokenKind.EQ,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "%": TokenKind.PERCENT,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ",": TokenKind.COMMA,
}

_HEX_RE = re.compile(r"0[xX]([0-9a-fA-F]*)")
_FLOAT_RE = re.compile(r"(?:\d+\.\d*|\.\d+)(?:[eE][+-]?\d+)?|\d+[eE][+-]?\d+")
_INT_RE = re.compile(r"\d+")


def _is_ident_start(c: str) -> bool:
    return c.isalpha() or c in "_$"


def _is_ident_char(c: str) -> bool:
    return c.isalnum() or c in "_$"


def tokenize(source: str) -> list[Token]:
    """Tokenize an expression string into a list of tokens ending with EOF.

    Raises:
        LexError: On an unterminated string or block comment, a malformed
            numeric literal, or an unexpected character.
    """
    tokens: list[Token] = []
    i = 0
    n = len(source)

    while i < n:
        c = source[i]

        # Skip whitespace
        if c.isspace():
            i += 1
            continue

        # Comments
        if source.startswith("--", i):
            end = source.find("\n", i)
            i = n if end == -1 else end + 1
            continue
        if source.startswith("/*", i):
            end = source.find("*/", i + 2)
            if end == -1:
                raise LexError(
                    LexErrorKind.UNTERMINATED_COMMENT, "Unterminated block comment", i, source
                )
            i = end + 2
            continue

        # String literals
        if c == "'":
            i, tok = _read_string(source, i)
            tokens.append(tok)
            continue

        # Numbers
        if c.isdigit() or (c == "." and i + 1 < n and source[i + 1].isdigit()):
            i, tok = _read_number(source, i)
            tokens.append(tok)
            continue

        # Identifiers and keywords
        if _is_ident_start(c):
            start = i
            while i < n and _is_ident_char(source[i]):
                i += 1
            word = source[start:i]
            kind = KEYWORDS.get(word.lower(), TokenKind.IDENT)
            tokens.append(Token(kind, word, start))
            continue

        # Two-character operators
        two = source[i : i + 2]
        if two in _TWO_CHAR_OPS:
            tokens.append(Token(_TWO_CHAR_OPS[two], two, i))
            i += 2
            continue

        # Single-character operators and punctuation
        if c in _SINGLE_CHAR_OPS:
            tokens.append(Token(_SINGLE_CHAR_OPS[c], c, i))
            i += 1
            continue

        raise LexError(
            LexErrorKind.UNEXPECTED_CHARACTER, f"Unexpected character: {c!r}", i, source
        )

    tokens.append(Token(TokenKind.EOF, "", n))
    return tokens


def _read_string(source: str, start: int) -> tuple[int, Token]:
    """Read a single-quoted string literal; ``''`` is an escaped quote."""
    i = start + 1
    n = len(source)
    chars: list[str] = []

    while i < n:
        c = source[i]
        if c == "'":
            if source.startswith("''", i):
                chars.append("'")
                i += 2
                continue
            lexeme = source[start : i + 1]
            return i + 1, Token(TokenKind.STRING, lexeme, start, "".join(chars))
        chars.append(c)
        i += 1

    raise LexError(
        LexErrorKind.UNTERMINATED_STRING, "Unterminated string literal", start, source
    )


def _malformed(message: str, pos: int, source: str) -> LexError:
    return LexError(LexErrorKind.MALFORMED_NUMBER, message, pos, source)


def _read_number(source: str, start: int) -> tuple[int, Token]:
    """Read a hex, octal, decimal integer or floating point literal."""
    m = _HEX_RE.match(source, start)
    if m:
        digits = m.group(1)
        end = m.end()
        if not digits:
            raise _malformed("Invalid hexadecimal literal: no digits after 0x", start, source)
        _check_terminated(source, end, start)
        return end, _int_token(source, start, end, int(digits, 16))

    m = _FLOAT_RE.match(source, start)
    if m:
        end = m.end()
        _check_terminated(source, end, start)
        value = float(m.group(0))
        if math.isinf(value):
            raise _malformed(f"Float literal out of range: {m.group(0)}", start, source)
        return end, Token(TokenKind.FLOAT, m.group(0), start, value)

    m = _INT_RE.match(source, start)
    assert m is not None
    digits = m.group(0)
    end = m.end()

    if len(digits) > 1 and digits.startswith("0"):
        if any(d in "89" for d in digits):
            raise _malformed(f"Invalid octal literal: {digits}", start, source)
        _check_terminated(source, end, start)
        return end, _int_token(source, start, end, int(digits, 8))

    # Long suffix is accepted and ignored
    if end < len(source) and source[end] in "lL":
        end += 1
    _check_terminated(source, end, start)
    return end, _int_token(source, start, end, int(digits))


def _check_terminated(source: str, end: int, start: int) -> None:
    """A number must not run straight into an identifier character or a dot."""
    if end < len(source) and (_is_ident_char(source[end]) or source[end] == "."):
        j = end
        while j < len(source) and (_is_ident_char(source[j]) or source[j] == "."):
            j += 1
        raise _malformed(f"Malformed numeric literal: {source[start:j]}", start, source)


def _int_token(source: str, start: int, end: int, value: int) -> Token:
    lexeme = source[start:end]
    if value > INT64_MAX:
        raise _malformed(f"Integer literal out of 64-bit range: {lexeme}", start, source)
    return Token(TokenKind.INT, lexeme, start, value)
