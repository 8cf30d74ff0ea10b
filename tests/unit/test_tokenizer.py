"""Tests for the sqlexpr tokenizer.

Covers:
- Keywords, identifiers, operators and punctuation
- Numeric literal forms (decimal, hex, octal, float, L suffix)
- Strings and comments
- Lexical error kinds and offsets
"""

from __future__ import annotations

import pytest

from sqlexpr.core.errors import LexError, LexErrorKind, ParseError
from sqlexpr.core.expression_lang.tokenizer import TokenKind, tokenize


def kinds(source: str) -> list[TokenKind]:
    return [t.kind for t in tokenize(source)]


# ============================================================================
# Token kinds
# ============================================================================


class TestTokenKinds:
    """Tokenizer produces correct token sequences."""

    def test_empty_input_is_just_eof(self) -> None:
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.EOF
        assert tokens[0].pos == 0

    def test_keywords(self) -> None:
        source = "AND OR NOT LIKE ESCAPE BETWEEN IN IS NULL TRUE FALSE"
        assert kinds(source) == [
            TokenKind.AND,
            TokenKind.OR,
            TokenKind.NOT,
            TokenKind.LIKE,
            TokenKind.ESCAPE,
            TokenKind.BETWEEN,
            TokenKind.IN,
            TokenKind.IS,
            TokenKind.NULL,
            TokenKind.TRUE,
            TokenKind.FALSE,
            TokenKind.EOF,
        ]

    def test_keywords_case_insensitive(self) -> None:
        assert kinds("and Or nOt between") == [
            TokenKind.AND,
            TokenKind.OR,
            TokenKind.NOT,
            TokenKind.BETWEEN,
            TokenKind.EOF,
        ]

    def test_keyword_keeps_original_lexeme(self) -> None:
        assert tokenize("Null")[0].lexeme == "Null"

    def test_identifiers(self) -> None:
        tokens = tokenize("user_id $price _x1 andrew")
        assert [t.kind for t in tokens[:-1]] == [TokenKind.IDENT] * 4
        assert [t.lexeme for t in tokens[:-1]] == ["user_id", "$price", "_x1", "andrew"]

    def test_operators(self) -> None:
        assert kinds("= <> != > >= < <= + - * / %") == [
            TokenKind.EQ,
            TokenKind.NE,
            TokenKind.NE,
            TokenKind.GT,
            TokenKind.GE,
            TokenKind.LT,
            TokenKind.LE,
            TokenKind.PLUS,
            TokenKind.MINUS,
            TokenKind.STAR,
            TokenKind.SLASH,
            TokenKind.PERCENT,
            TokenKind.EOF,
        ]

    def test_operators_without_spaces(self) -> None:
        assert kinds("a<=b") == [TokenKind.IDENT, TokenKind.LE, TokenKind.IDENT, TokenKind.EOF]

    def test_punctuation(self) -> None:
        assert kinds("(,)") == [
            TokenKind.LPAREN,
            TokenKind.COMMA,
            TokenKind.RPAREN,
            TokenKind.EOF,
        ]

    def test_positions(self) -> None:
        tokens = tokenize("x  >= 10")
        assert [t.pos for t in tokens] == [0, 3, 6, 8]


# ============================================================================
# Numeric literals
# ============================================================================


class TestNumbers:
    """Integer and float literal forms."""

    def test_decimal_integer(self) -> None:
        tok = tokenize("42")[0]
        assert tok.kind == TokenKind.INT
        assert tok.value == 42

    def test_long_suffix(self) -> None:
        for source in ("42L", "42l"):
            tok = tokenize(source)[0]
            assert tok.kind == TokenKind.INT
            assert tok.value == 42
            assert tok.lexeme == source

    def test_hexadecimal(self) -> None:
        assert tokenize("0x1A")[0].value == 26
        assert tokenize("0XfF")[0].value == 255

    def test_octal(self) -> None:
        tok = tokenize("017")[0]
        assert tok.kind == TokenKind.INT
        assert tok.value == 15

    def test_zero(self) -> None:
        assert tokenize("0")[0].value == 0

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("1.5", 1.5),
            ("1.", 1.0),
            (".5", 0.5),
            ("1e-5", 1e-5),
            ("2.5E+3", 2500.0),
            ("3e2", 300.0),
        ],
    )
    def test_floats(self, source: str, expected: float) -> None:
        tok = tokenize(source)[0]
        assert tok.kind == TokenKind.FLOAT
        assert tok.value == expected

    def test_int64_max(self) -> None:
        assert tokenize("9223372036854775807")[0].value == 2**63 - 1

    @pytest.mark.parametrize(
        "source",
        ["0x1G", "0x", "1e", "1.2.3", "12abc", "019", "08", "9223372036854775808", "1e999"],
    )
    def test_malformed_numbers(self, source: str) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize(source)
        assert exc_info.value.kind == LexErrorKind.MALFORMED_NUMBER
        assert exc_info.value.offset == 0

    def test_malformed_number_offset(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize("x > 12abc")
        assert exc_info.value.offset == 4


# ============================================================================
# Strings and comments
# ============================================================================


class TestStringsAndComments:
    """String literals and discarded comments."""

    def test_string(self) -> None:
        tok = tokenize("'hello'")[0]
        assert tok.kind == TokenKind.STRING
        assert tok.value == "hello"
        assert tok.lexeme == "'hello'"

    def test_doubled_quote(self) -> None:
        assert tokenize("'it''s'")[0].value == "it's"

    def test_empty_string(self) -> None:
        assert tokenize("''")[0].value == ""

    def test_string_keeps_keywords_and_comment_markers(self) -> None:
        assert tokenize("'AND -- /* x'")[0].value == "AND -- /* x"

    def test_line_comment(self) -> None:
        assert kinds("a -- trailing\n= 1") == [
            TokenKind.IDENT,
            TokenKind.EQ,
            TokenKind.INT,
            TokenKind.EOF,
        ]

    def test_line_comment_at_end(self) -> None:
        assert kinds("a -- no newline") == [TokenKind.IDENT, TokenKind.EOF]

    def test_block_comment(self) -> None:
        assert kinds("a /* multi\nline */ = 1") == [
            TokenKind.IDENT,
            TokenKind.EQ,
            TokenKind.INT,
            TokenKind.EOF,
        ]

    def test_block_comments_do_not_nest(self) -> None:
        # The first */ closes the comment, leaving "*/" behind
        assert kinds("/* a /* b */ c */") == [
            TokenKind.IDENT,
            TokenKind.STAR,
            TokenKind.SLASH,
            TokenKind.EOF,
        ]


# ============================================================================
# Errors
# ============================================================================


class TestLexErrors:
    """Each failure category reports its kind and offset."""

    def test_unterminated_string(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize("name = 'abc")
        assert exc_info.value.kind == LexErrorKind.UNTERMINATED_STRING
        assert exc_info.value.offset == 7

    def test_unterminated_comment(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize("a = 1 /* open")
        assert exc_info.value.kind == LexErrorKind.UNTERMINATED_COMMENT
        assert exc_info.value.offset == 6

    @pytest.mark.parametrize("source,offset", [('a = "x"', 4), ("a ! b", 2), ("a # b", 2)])
    def test_unexpected_character(self, source: str, offset: int) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize(source)
        assert exc_info.value.kind == LexErrorKind.UNEXPECTED_CHARACTER
        assert exc_info.value.offset == offset

    def test_lex_error_is_parse_error(self) -> None:
        with pytest.raises(ParseError):
            tokenize("@")

    def test_error_echoes_input_with_marker(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize("a = 1\nAND b ? 2")
        err = exc_info.value
        assert err.source == "a = 1\nAND b ? 2"
        assert err.context is not None
        assert err.context.line == 2
        assert err.context.column == 7
        message = str(err)
        assert "at offset 12 (line 2, column 7)" in message
        assert "   1 | a = 1" in message
        assert "   2 | AND b ? 2" in message
        assert "\n" + " " * 13 + "^" in message
