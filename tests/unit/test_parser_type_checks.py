"""Parse-time literal checks for BETWEEN and IN."""

from __future__ import annotations

import pytest

from sqlexpr.core.errors import ParseError
from sqlexpr.core.expression_lang.parser import parse
from sqlexpr.core.ir.expressions import Between, In, Relational


def parse_error(source: str) -> ParseError:
    with pytest.raises(ParseError) as exc_info:
        parse(source)
    return exc_info.value


# ============================================================================
# BETWEEN
# ============================================================================


class TestBetweenBounds:
    """BETWEEN bounds must be same-family, non-null, non-boolean literals."""

    @pytest.mark.parametrize(
        "source",
        [
            "x BETWEEN 1 AND 10",
            "x BETWEEN 1 AND 10.5",
            "x BETWEEN 1.5 AND 10",
            "x BETWEEN -5 AND +5",
            "x BETWEEN 'a' AND 'z'",
            "x NOT BETWEEN 0x0A AND 012",
            "x BETWEEN 3 AND 3",
        ],
    )
    def test_valid_bounds(self, source: str) -> None:
        expr = parse(source)
        assert isinstance(expr, Relational)
        assert isinstance(expr.predicate, Between)

    def test_value_side_may_be_any_expression(self) -> None:
        expr = parse("(a + b) * 2 BETWEEN 1 AND 10")
        assert isinstance(expr, Relational)
        assert isinstance(expr.predicate, Between)

    def test_variable_bound(self) -> None:
        err = parse_error("x BETWEEN lo AND 10")
        assert err.message == "Variables are not allowed as lower bound in BETWEEN, only literal values"
        assert err.offset == 10

    def test_arithmetic_bound(self) -> None:
        err = parse_error("x BETWEEN 1 AND 2 + 3")
        assert "Complex expressions are not allowed as upper bound in BETWEEN" in err.message
        assert err.offset == 16

    def test_null_bound(self) -> None:
        err = parse_error("x BETWEEN NULL AND 5")
        assert err.message == "NULL is not allowed as lower bound in BETWEEN"
        assert err.offset == 10

    def test_boolean_bound_in_not_between(self) -> None:
        err = parse_error("x NOT BETWEEN 1 AND TRUE")
        assert err.message == "Boolean literals are not allowed as upper bound in NOT BETWEEN"
        assert err.offset == 20

    def test_mixed_families(self) -> None:
        err = parse_error("x BETWEEN 1 AND 'z'")
        assert err.message == "BETWEEN bounds must be both numeric or both string, found integer and string"
        assert err.offset == 16

    def test_signed_string_bound(self) -> None:
        err = parse_error("x BETWEEN -'a' AND 'z'")
        assert "Unary minus can only be applied to numeric literals" in err.message
        assert "lower bound" in err.message

    def test_double_sign_is_complex(self) -> None:
        err = parse_error("x BETWEEN - -1 AND 5")
        assert "Complex expressions are not allowed as lower bound" in err.message

    @pytest.mark.parametrize(
        "source",
        ["x BETWEEN 10 AND 1", "x BETWEEN 2.5 AND 2", "x BETWEEN 1 AND -1", "x BETWEEN 'm' AND 'a'"],
    )
    def test_lower_must_not_exceed_upper(self, source: str) -> None:
        err = parse_error(source)
        assert "lower bound" in err.message
        assert "must be less than or equal to upper bound" in err.message
        assert err.offset == 10


# ============================================================================
# IN
# ============================================================================


class TestInList:
    """IN lists hold literals of exactly one variant."""

    @pytest.mark.parametrize(
        "source",
        ["x IN (1)", "x IN (1, 2, 3)", "x IN (1.5, 2.0)", "x IN ('a', 'b')", "x NOT IN (-1, 0x10)"],
    )
    def test_valid_lists(self, source: str) -> None:
        expr = parse(source)
        assert isinstance(expr, Relational)
        assert isinstance(expr.predicate, In)

    def test_integer_and_float_do_not_mix(self) -> None:
        err = parse_error("x IN (1, 2.5, 3)")
        assert err.message == "IN list values must all be the same type, found integer and float"
        assert err.offset == 9

    def test_string_and_integer_do_not_mix(self) -> None:
        err = parse_error("x IN ('a', 'b', 3)")
        assert err.message == "IN list values must all be the same type, found string and integer"
        assert err.offset == 16

    def test_null_rejected(self) -> None:
        err = parse_error("x IN (1, NULL)")
        assert err.message == "NULL is not allowed in IN list"
        assert err.offset == 9

    def test_boolean_rejected(self) -> None:
        err = parse_error("x IN (TRUE)")
        assert err.message == "Boolean literals are not allowed in IN list"
        assert err.offset == 6

    def test_variable_rejected(self) -> None:
        err = parse_error("x IN (y)")
        assert err.message == "Expected literal value, got identifier 'y'"

    def test_empty_list_rejected(self) -> None:
        err = parse_error("x IN ()")
        assert err.message == "Expected literal value, got ')'"

    def test_signed_string_rejected(self) -> None:
        err = parse_error("x IN (-'a')")
        assert err.message == "Cannot apply unary minus to string"
        assert err.offset == 6

    def test_missing_parenthesis(self) -> None:
        err = parse_error("x IN 1, 2")
        assert err.message == "Expected '(', got integer 1"


# ============================================================================
# Checks inside parentheses
# ============================================================================


class TestGroupedChecks:
    """Literal checks keep their message when the predicate is parenthesized."""

    def test_between_mixed_families_in_group(self) -> None:
        err = parse_error("(age BETWEEN 'a' AND 5) AND ok")
        assert err.message == "BETWEEN bounds must be both numeric or both string, found string and integer"
        assert err.offset == 21

    def test_in_mixed_types_in_group(self) -> None:
        err = parse_error("(x IN (1, 2.5)) OR ok")
        assert err.message == "IN list values must all be the same type, found integer and float"
        assert err.offset == 10

    def test_doubly_parenthesized(self) -> None:
        err = parse_error("((x BETWEEN 1 AND 'z'))")
        assert err.message == "BETWEEN bounds must be both numeric or both string, found integer and string"
        assert err.offset == 18

    def test_value_group_still_reports_missing_operator(self) -> None:
        err = parse_error("(x + 1)")
        assert err.message == "Expected relational operator, got end of input"
        assert err.offset == 7
