"""
Recursive descent parser for sqlexpr filter expressions.

Grammar (precedence low to high):
    boolean_expr  → or_expr
    or_expr       → and_expr ("OR" and_expr)*
    and_expr      → term ("AND" term)*
    term          → "NOT" term | "(" boolean_expr ")" | TRUE | FALSE
                  | IDENT | relational
    relational    → value (("=" | "<>" | "!=" | ">" | ">=" | "<" | "<=") value
                  | "NOT"? "LIKE" STRING ("ESCAPE" STRING)?
                  | "NOT"? "BETWEEN" value "AND" value
                  | "NOT"? "IN" "(" literal ("," literal)* ")"
                  | "IS" "NOT"? "NULL")
    value         → multiply (("+" | "-") multiply)*
    multiply      → unary (("*" | "/" | "%") unary)*
    unary         → ("+" | "-") unary | primary
    primary       → INT | FLOAT | STRING | TRUE | FALSE | NULL | IDENT
                  | "(" value ")"

Boolean and value productions are disjoint, so a bare value such as ``42`` or
``(x + 1)`` is rejected at the top level. A parenthesis at the start of a
term is first read as a nested boolean expression; when that fails, or when
the closing parenthesis is followed by a relational or arithmetic operator,
the parser rewinds and reads it as the left operand of a relational
expression instead.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlexpr.core.errors import NestingDepthError, ParseError
from sqlexpr.core.expression_lang.options import ParserOptions
from sqlexpr.core.expression_lang.printer import format_debug_dump
from sqlexpr.core.expression_lang.tokenizer import Token, TokenKind, tokenize
from sqlexpr.core.ir.expressions import (
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
    SignOp,
    UnaryExpr,
    ValueExpr,
    ValueLiteral,
    ValueVariable,
)

logger = logging.getLogger(__name__)

_EQUALITY_OPS: dict[TokenKind, EqualityOp] = {
    TokenKind.EQ: EqualityOp.EQ,
    TokenKind.NE: EqualityOp.NE,
}

_COMPARISON_OPS: dict[TokenKind, ComparisonOp] = {
    TokenKind.GT: ComparisonOp.GT,
    TokenKind.GE: ComparisonOp.GE,
    TokenKind.LT: ComparisonOp.LT,
    TokenKind.LE: ComparisonOp.LE,
}

_ADDITIVE_OPS: dict[TokenKind, ArithmeticOp] = {
    TokenKind.PLUS: ArithmeticOp.ADD,
    TokenKind.MINUS: ArithmeticOp.SUB,
}

_MULTIPLICATIVE_OPS: dict[TokenKind, ArithmeticOp] = {
    TokenKind.STAR: ArithmeticOp.MUL,
    TokenKind.SLASH: ArithmeticOp.DIV,
    TokenKind.PERCENT: ArithmeticOp.MOD,
}

_SIGN_OPS: dict[TokenKind, SignOp] = {
    TokenKind.PLUS: SignOp.PLUS,
    TokenKind.MINUS: SignOp.MINUS,
}

# Tokens that continue a value into a relational expression
_RELATIONAL_STARTERS = frozenset(
    {
        *_EQUALITY_OPS,
        *_COMPARISON_OPS,
        TokenKind.LIKE,
        TokenKind.BETWEEN,
        TokenKind.IN,
        TokenKind.IS,
    }
)
_ARITHMETIC_STARTERS = frozenset({*_ADDITIVE_OPS, *_MULTIPLICATIVE_OPS})
_NEGATABLE = frozenset({TokenKind.LIKE, TokenKind.BETWEEN, TokenKind.IN})
_OPERAND_FOLLOWERS = _RELATIONAL_STARTERS | _ARITHMETIC_STARTERS | {TokenKind.NOT}

_LITERAL_TOKENS = frozenset(
    {
        TokenKind.INT,
        TokenKind.FLOAT,
        TokenKind.STRING,
        TokenKind.NULL,
        TokenKind.TRUE,
        TokenKind.FALSE,
    }
)


def _literal_from_token(tok: Token) -> ValueLiteral:
    if tok.kind == TokenKind.INT:
        return ValueLiteral(kind=LiteralKind.INTEGER, value=tok.value)
    if tok.kind == TokenKind.FLOAT:
        return ValueLiteral(kind=LiteralKind.FLOAT, value=tok.value)
    if tok.kind == TokenKind.STRING:
        return ValueLiteral(kind=LiteralKind.STRING, value=tok.value)
    if tok.kind == TokenKind.NULL:
        return ValueLiteral.null()
    return ValueLiteral(kind=LiteralKind.BOOLEAN, value=tok.kind == TokenKind.TRUE)


def _negate(lit: ValueLiteral) -> ValueLiteral:
    return ValueLiteral(kind=lit.kind, value=-lit.value)  # type: ignore[operator]


class _Parser:
    """Recursive descent parser over a token list."""

    def __init__(self, tokens: list[Token], source: str, max_depth: int) -> None:
        self.tokens = tokens
        self.source = source
        self.pos = 0
        self.depth = 0
        self.max_depth = max_depth

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]  # EOF

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def expect(self, kind: TokenKind, what: str | None = None) -> Token:
        tok = self.current
        if tok.kind != kind:
            raise self.error(f"Expected {what or kind.upper()}, got {tok.describe()}", tok)
        return self.advance()

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.current.kind in kinds:
            return self.advance()
        return None

    def error(self, message: str, tok: Token | None = None) -> ParseError:
        pos = (tok or self.current).pos
        return ParseError(message, pos, self.source)

    @contextmanager
    def nested(self, tok: Token) -> Iterator[None]:
        """Count one level of parenthesis, NOT or sign nesting."""
        self.depth += 1
        try:
            if self.depth > self.max_depth:
                raise NestingDepthError(
                    f"Expression nesting exceeds maximum depth of {self.max_depth}",
                    tok.pos,
                    self.source,
                )
            yield
        finally:
            self.depth -= 1

    # -- Boolean layer --

    def parse_boolean_expr(self) -> BooleanExpr:
        return self.parse_or_expr()

    def parse_or_expr(self) -> BooleanExpr:
        """and_expr ("OR" and_expr)*"""
        left = self.parse_and_expr()
        while self.match(TokenKind.OR):
            right = self.parse_and_expr()
            left = LogicalExpr(op=LogicalOp.OR, left=left, right=right)
        return left

    def parse_and_expr(self) -> BooleanExpr:
        """term ("AND" term)*"""
        left = self.parse_term()
        while self.match(TokenKind.AND):
            right = self.parse_term()
            left = LogicalExpr(op=LogicalOp.AND, left=left, right=right)
        return left

    def parse_term(self) -> BooleanExpr:
        tok = self.current

        if tok.kind == TokenKind.NOT:
            self.advance()
            with self.nested(tok):
                operand = self.parse_term()
            return NotExpr(operand=operand)

        if tok.kind == TokenKind.LPAREN:
            return self._parse_parenthesized_term()

        if tok.kind in (TokenKind.IDENT, TokenKind.TRUE, TokenKind.FALSE):
            # One token of lookahead: a bare boolean, or the left operand
            # of a relational expression
            if self.peek(1).kind in _OPERAND_FOLLOWERS:
                return Relational(predicate=self.parse_relational())
            self.advance()
            if tok.kind == TokenKind.IDENT:
                return BooleanVariable(name=tok.lexeme)
            return BooleanLiteral(value=tok.kind == TokenKind.TRUE)

        return Relational(predicate=self.parse_relational())

    def _parse_parenthesized_term(self) -> BooleanExpr:
        start = self.pos
        open_tok = self.current
        try:
            with self.nested(open_tok):
                self.advance()
                inner = self.parse_boolean_expr()
                self.expect(TokenKind.RPAREN, "')'")
        except NestingDepthError:
            raise
        except ParseError as exc:
            logger.debug(
                f"Group at offset {open_tok.pos} is not a boolean expression "
                f"({exc.message}); reparsing as relational"
            )
            self.pos = start
            return self._reparse_as_relational(exc)

        if self._continues_as_relational():
            logger.debug(
                f"Group at offset {open_tok.pos} is followed by "
                f"{self.current.describe()}; reparsing as relational"
            )
            self.pos = start
            return Relational(predicate=self.parse_relational())
        return inner

    def _reparse_as_relational(self, group_error: ParseError) -> BooleanExpr:
        """Retry a failed boolean group as the left operand of a relational.

        If both readings fail, the error that got further into the input is
        raised.
        """
        try:
            return Relational(predicate=self.parse_relational())
        except NestingDepthError:
            raise
        except ParseError as exc:
            if group_error.offset > exc.offset:
                raise group_error from None
            raise

    def _continues_as_relational(self) -> bool:
        kind = self.current.kind
        if kind in _RELATIONAL_STARTERS or kind in _ARITHMETIC_STARTERS:
            return True
        return kind == TokenKind.NOT and self.peek(1).kind in _NEGATABLE

    # -- Relational layer --

    def parse_relational(self) -> RelationalExpr:
        left = self.parse_value_expr()
        tok = self.current

        if tok.kind in _EQUALITY_OPS:
            self.advance()
            return Equality(left=left, op=_EQUALITY_OPS[tok.kind], right=self.parse_value_expr())

        if tok.kind in _COMPARISON_OPS:
            self.advance()
            return Comparison(
                left=left, op=_COMPARISON_OPS[tok.kind], right=self.parse_value_expr()
            )

        if tok.kind == TokenKind.IS:
            self.advance()
            negated = self.match(TokenKind.NOT) is not None
            self.expect(TokenKind.NULL, "NULL")
            return IsNull(expr=left, negated=negated)

        negated = False
        if tok.kind == TokenKind.NOT:
            self.advance()
            negated = True
            tok = self.current
            if tok.kind not in _NEGATABLE:
                raise self.error(
                    f"Expected LIKE, BETWEEN, or IN after NOT, got {tok.describe()}", tok
                )

        if tok.kind == TokenKind.LIKE:
            self.advance()
            return self._parse_like(left, negated)
        if tok.kind == TokenKind.BETWEEN:
            self.advance()
            return self._parse_between(left, negated)
        if tok.kind == TokenKind.IN:
            self.advance()
            return In(expr=left, values=self._parse_in_list(), negated=negated)

        raise self.error(f"Expected relational operator, got {tok.describe()}", tok)

    def _parse_like(self, left: ValueExpr, negated: bool) -> Like:
        pattern = self.expect(TokenKind.STRING, "string literal").value
        escape: str | None = None
        if self.match(TokenKind.ESCAPE):
            esc_tok = self.expect(TokenKind.STRING, "string literal")
            escape = esc_tok.value  # type: ignore[assignment]
            if len(escape) != 1:  # type: ignore[arg-type]
                raise self.error(
                    f"ESCAPE must be a single character, got {esc_tok.lexeme}", esc_tok
                )
        return Like(expr=left, pattern=pattern, escape=escape, negated=negated)

    def _parse_between(self, left: ValueExpr, negated: bool) -> Between:
        op_name = "NOT BETWEEN" if negated else "BETWEEN"

        lower_tok = self.current
        lower = self.parse_value_expr()
        self.expect(TokenKind.AND, "AND")
        upper_tok = self.current
        upper = self.parse_value_expr()

        lower_lit = self._bound_literal(lower, "lower", op_name, lower_tok)
        upper_lit = self._bound_literal(upper, "upper", op_name, upper_tok)

        if lower_lit.is_numeric != upper_lit.is_numeric:
            raise self.error(
                f"{op_name} bounds must be both numeric or both string, "
                f"found {lower_lit.type_name} and {upper_lit.type_name}",
                upper_tok,
            )
        if lower_lit.value > upper_lit.value:  # type: ignore[operator]
            raise self.error(
                f"{op_name} lower bound ({lower_lit}) must be less than or equal "
                f"to upper bound ({upper_lit})",
                lower_tok,
            )
        return Between(expr=left, lower=lower, upper=upper, negated=negated)

    def _bound_literal(
        self, bound: ValueExpr, which: str, op_name: str, tok: Token
    ) -> ValueLiteral:
        """Check that a BETWEEN bound is a literal and return its signed value."""
        lit: ValueLiteral
        if isinstance(bound, ValueLiteral):
            lit = bound
        elif isinstance(bound, UnaryExpr) and isinstance(bound.operand, ValueLiteral):
            if not bound.operand.is_numeric:
                raise self.error(
                    f"Unary {bound.op.name.lower()} can only be applied to numeric "
                    f"literals in {op_name} bounds, found {bound.operand.type_name} "
                    f"as {which} bound",
                    tok,
                )
            lit = bound.operand
            if bound.op == SignOp.MINUS:
                lit = _negate(lit)
        elif isinstance(bound, ValueVariable):
            raise self.error(
                f"Variables are not allowed as {which} bound in {op_name}, "
                f"only literal values",
                tok,
            )
        else:
            raise self.error(
                f"Complex expressions are not allowed as {which} bound in {op_name}, "
                f"only literal values",
                tok,
            )

        if lit.is_null:
            raise self.error(f"NULL is not allowed as {which} bound in {op_name}", tok)
        if lit.kind == LiteralKind.BOOLEAN:
            raise self.error(
                f"Boolean literals are not allowed as {which} bound in {op_name}", tok
            )
        return lit

    def _parse_in_list(self) -> list[ValueLiteral]:
        """"(" literal ("," literal)* ")" with every literal of one exact kind."""
        self.expect(TokenKind.LPAREN, "'('")
        first = self._parse_in_literal()
        values = [first]
        while self.match(TokenKind.COMMA):
            tok = self.current
            lit = self._parse_in_literal()
            if lit.kind != first.kind:
                raise self.error(
                    f"IN list values must all be the same type, "
                    f"found {first.type_name} and {lit.type_name}",
                    tok,
                )
            values.append(lit)
        self.expect(TokenKind.RPAREN, "')'")
        return values

    def _parse_in_literal(self) -> ValueLiteral:
        sign_tok = self.match(TokenKind.PLUS, TokenKind.MINUS)
        tok = self.current
        if tok.kind not in _LITERAL_TOKENS:
            raise self.error(f"Expected literal value, got {tok.describe()}", tok)
        self.advance()
        lit = _literal_from_token(tok)

        if sign_tok is not None and not lit.is_numeric:
            sign = "minus" if sign_tok.kind == TokenKind.MINUS else "plus"
            raise self.error(f"Cannot apply unary {sign} to {lit.type_name}", sign_tok)
        if lit.is_null:
            raise self.error("NULL is not allowed in IN list", tok)
        if lit.kind == LiteralKind.BOOLEAN:
            raise self.error("Boolean literals are not allowed in IN list", tok)

        if sign_tok is not None and sign_tok.kind == TokenKind.MINUS:
            lit = _negate(lit)
        return lit

    # -- Value layer --

    def parse_value_expr(self) -> ValueExpr:
        """multiply (("+" | "-") multiply)*"""
        left = self.parse_multiply()
        while self.current.kind in _ADDITIVE_OPS:
            op = _ADDITIVE_OPS[self.advance().kind]
            right = self.parse_multiply()
            left = ArithmeticExpr(op=op, left=left, right=right)
        return left

    def parse_multiply(self) -> ValueExpr:
        """unary (("*" | "/" | "%") unary)*"""
        left = self.parse_unary()
        while self.current.kind in _MULTIPLICATIVE_OPS:
            op = _MULTIPLICATIVE_OPS[self.advance().kind]
            right = self.parse_unary()
            left = ArithmeticExpr(op=op, left=left, right=right)
        return left

    def parse_unary(self) -> ValueExpr:
        """("+" | "-") unary | primary"""
        tok = self.current
        if tok.kind in _SIGN_OPS:
            self.advance()
            with self.nested(tok):
                operand = self.parse_unary()
            return UnaryExpr(op=_SIGN_OPS[tok.kind], operand=operand)
        return self.parse_primary()

    def parse_primary(self) -> ValueExpr:
        tok = self.current

        if tok.kind in _LITERAL_TOKENS:
            self.advance()
            return _literal_from_token(tok)

        if tok.kind == TokenKind.IDENT:
            self.advance()
            return ValueVariable(name=tok.lexeme)

        if tok.kind == TokenKind.LPAREN:
            with self.nested(tok):
                self.advance()
                inner = self.parse_value_expr()
                self.expect(TokenKind.RPAREN, "')'")
            return inner

        raise self.error(f"Expected value expression, got {tok.describe()}", tok)


def parse(source: str, options: ParserOptions | None = None) -> BooleanExpr:
    """Parse a filter expression into its typed AST.

    Args:
        source: Expression text, e.g. ``"age BETWEEN 18 AND 65 AND name LIKE 'A%'"``
        options: Parser settings; defaults to ``ParserOptions()``

    Returns:
        The root BooleanExpr.

    Raises:
        LexError: If the text cannot be tokenized.
        NestingDepthError: If nesting exceeds ``options.max_depth``.
        ParseError: On any other syntax or literal-type violation.
    """
    options = options or ParserOptions()
    tokens = tokenize(source)
    if tokens[0].kind == TokenKind.EOF:
        raise ParseError("Empty expression", 0, source)

    parser = _Parser(tokens, source, options.max_depth)
    expr = parser.parse_boolean_expr()
    if parser.current.kind != TokenKind.EOF:
        raise parser.error(f"Unexpected token {parser.current.describe()}")

    if options.pretty_print:
        options.dump(format_debug_dump(source, expr))
    return expr
