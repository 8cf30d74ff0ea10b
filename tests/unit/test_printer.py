"""Tests for the indented AST renderer."""

from __future__ import annotations

from sqlexpr.core.expression_lang.parser import parse
from sqlexpr.core.expression_lang.printer import format_debug_dump, render_tree
from sqlexpr.core.ir.expressions import ValueLiteral


class TestRenderTree:
    """One node per line, three spaces per level."""

    def test_logical_tree(self) -> None:
        assert render_tree(parse("NOT a OR TRUE")) == "\n".join(
            [
                "Or",
                "   Not",
                "      Variable: a",
                "   BooleanLiteral: true",
            ]
        )

    def test_comparison_with_arithmetic(self) -> None:
        assert render_tree(parse("-(x + 1) * 2 > 3.5")) == "\n".join(
            [
                "Relational",
                "   Comparison: >",
                "      Multiply",
                "         UnaryMinus",
                "            Add",
                "               Variable: x",
                "               Literal: integer 1",
                "         Literal: integer 2",
                "      Literal: float 3.5",
            ]
        )

    def test_equality_operator_uses_canonical_spelling(self) -> None:
        assert render_tree(parse("a != 'b'")).splitlines()[1] == "   Equality: <>"

    def test_like(self) -> None:
        lines = render_tree(parse("s NOT LIKE 'a%' ESCAPE '!'")).splitlines()
        assert lines[1] == "   Like: negated=true, pattern='a%', escape='!'"
        assert lines[2] == "      Variable: s"

    def test_like_without_escape(self) -> None:
        lines = render_tree(parse("s LIKE 'it''s'")).splitlines()
        assert lines[1] == "   Like: negated=false, pattern='it''s', escape=None"

    def test_between(self) -> None:
        assert render_tree(parse("x BETWEEN -1 AND 5")).splitlines()[1:] == [
            "   Between: negated=false",
            "      Variable: x",
            "      UnaryMinus",
            "         Literal: integer 1",
            "      Literal: integer 5",
        ]

    def test_in(self) -> None:
        lines = render_tree(parse("c IN ('a', 'b')")).splitlines()
        assert lines[1] == "   In: negated=false, values=['a', 'b']"

    def test_is_null(self) -> None:
        lines = render_tree(parse("x IS NOT NULL")).splitlines()
        assert lines[1] == "   IsNull: negated=true"

    def test_value_nodes_render_directly(self) -> None:
        assert render_tree(ValueLiteral.null()) == "Literal: NULL"
        assert render_tree(ValueLiteral.of("x")) == "Literal: string 'x'"

    def test_long_chain(self) -> None:
        lines = render_tree(parse(" AND ".join(["a"] * 1000))).splitlines()
        assert len(lines) == 1999
        assert lines[:2] == ["And", "   And"]
        assert lines[999] == "   " * 999 + "Variable: a"
        assert lines[-1] == "   Variable: a"


class TestDebugDump:
    """Input and AST headers around the tree."""

    def test_headers(self) -> None:
        dump = format_debug_dump("a AND b", parse("a AND b"))
        assert dump == "Input: a AND b\nAST:\nAnd\n   Variable: a\n   Variable: b"
