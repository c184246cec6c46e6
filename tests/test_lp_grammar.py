"""
Tests for the LP text grammar and the parse tree it produces.
"""

import math

import pytest

from lpmodel.errors import LPModelError, ParseError
from lpmodel.formats.grammar import LP_GRAMMAR
from lpmodel.formats.parser import ParsedBound, ParsedTerm, parse_lp


def terms(expression_text, sense="Maximize"):
    """Parse a one-line objective and return its terms."""
    return parse_lp(f"{sense}\n obj: {expression_text}\nEnd\n").objective.terms


# =============================================================================
# Raw grammar
# =============================================================================

class TestGrammarRules:
    """Individual grammar rules."""

    @pytest.mark.parametrize("text", ["Maximize", "MAX", "minimize", "Min", "maximise", "Minimum"])
    def test_objective_sense(self, text):
        LP_GRAMMAR["objective_sense"].parse(text)

    @pytest.mark.parametrize("text", ["Subject To", "subject  to", "ST", "s.t.", "such that"])
    def test_subject_to(self, text):
        LP_GRAMMAR["subject_to"].parse(text)

    @pytest.mark.parametrize("text", ["x", "x1", "_a.b", "y(1,2)", "a#b", "Z~"])
    def test_variable_name(self, text):
        LP_GRAMMAR["variable_name"].parse(text)

    @pytest.mark.parametrize("text", ["1x", ".x", "End", "bounds", "st", "Binary", "gen"])
    def test_not_a_variable_name(self, text):
        with pytest.raises(Exception):
            LP_GRAMMAR["variable_name"].parse(text)

    @pytest.mark.parametrize("text", ["start", "ending", "binx", "general1", "boundsx"])
    def test_keyword_prefix_is_a_name(self, text):
        LP_GRAMMAR["variable_name"].parse(text)

    @pytest.mark.parametrize("text", ["3", "3.", "3.25", ".5", "1e5", "2.5E-3"])
    def test_number(self, text):
        LP_GRAMMAR["number"].parse(text)

    @pytest.mark.parametrize("text", ["<=", "=<", ">=", "=>", "<", ">", "="])
    def test_sense(self, text):
        LP_GRAMMAR["sense"].parse(text)

    @pytest.mark.parametrize("text", ["-inf", "+inf", "-infinity", "+Infinity", "inf", "- INF"])
    def test_infinity(self, text):
        LP_GRAMMAR["infinity"].parse(text)

    def test_comment_is_whitespace(self):
        LP_GRAMMAR["_"].parse("  \\ a comment\n\t\\ another\n")


# =============================================================================
# Parse tree
# =============================================================================

class TestObjective:
    """Objective section."""

    def test_sense_by_prefix(self):
        assert parse_lp("Max\n x\nEnd").objective.sense == "MAXIMIZE"
        assert parse_lp("MINIMIZE\n x\nEnd").objective.sense == "MINIMIZE"

    def test_label(self):
        parsed = parse_lp("Maximize\n profit: 3 x\nEnd")
        assert parsed.objective.name == "profit"
        assert parsed.objective.terms == [ParsedTerm(3.0, "x")]

    def test_terms_with_signs(self):
        assert terms("3 x - 2 y + z - w") == [
            ParsedTerm(3.0, "x"),
            ParsedTerm(-2.0, "y"),
            ParsedTerm(1.0, "z"),
            ParsedTerm(-1.0, "w"),
        ]

    def test_leading_sign_and_constant(self):
        assert terms("- 2 x + 5") == [ParsedTerm(-2.0, "x"), ParsedTerm(5.0)]

    def test_double_sign(self):
        assert terms("x - -3 y") == [ParsedTerm(1.0, "x"), ParsedTerm(3.0, "y")]

    def test_coefficient_without_space(self):
        assert terms("2x + 1.5e1 y") == [ParsedTerm(2.0, "x"), ParsedTerm(15.0, "y")]

    def test_empty_objective(self):
        parsed = parse_lp("Minimize\n obj:\nSubject To\n c1: x >= 1\nEnd")
        assert parsed.objective.terms == []
        assert parsed.objective.name == "obj"

    def test_quadratic_bracket(self):
        assert terms("x + [ 4 x * y - 2 y ^ 2 ]/2") == [
            ParsedTerm(1.0, "x"),
            ParsedTerm(2.0, "x", "y"),
            ParsedTerm(-1.0, "y", "y"),
        ]

    def test_quadratic_bracket_without_divisor(self):
        assert terms("- [ x * y ]") == [ParsedTerm(-1.0, "x", "y")]


class TestConstraints:
    """Subject To section."""

    def test_constraints_in_order(self):
        parsed = parse_lp(
            "Maximize\n obj: x + y\n"
            "Subject To\n"
            " c1: x + 2 y <= 8\n"
            " limit: 3 x >= -2\n"
            " x - y = 0\n"
            "End\n"
        )
        assert [c.name for c in parsed.constraints] == ["c1", "limit", None]
        assert [c.sense for c in parsed.constraints] == ["<=", ">=", "="]
        assert [c.rhs for c in parsed.constraints] == [8.0, -2.0, 0.0]
        assert parsed.constraints[0].terms == [ParsedTerm(1.0, "x"), ParsedTerm(2.0, "y")]

    @pytest.mark.parametrize("token,sense", [
        ("<", "<="), ("=<", "<="), (">", ">="), ("=>", ">="), ("<=", "<="), ("=", "="),
    ])
    def test_sense_normalization(self, token, sense):
        parsed = parse_lp(f"Max\n x\nST\n x {token} 1\nEnd")
        assert parsed.constraints[0].sense == sense

    def test_constant_on_left(self):
        parsed = parse_lp("Max\n x\nST\n x + 3 <= 8\nEnd")
        assert parsed.constraints[0].terms == [ParsedTerm(1.0, "x"), ParsedTerm(3.0)]

    def test_constraints_section_optional(self):
        parsed = parse_lp("Max\n x\nBounds\n x <= 4\nEnd")
        assert parsed.constraints == []
        assert parsed.bounds == [ParsedBound("x", upper=4.0)]

    def test_multi_line_constraint(self):
        parsed = parse_lp("Max\n x\nST\n c1: x\n   + y\n   <= 2\nEnd")
        assert len(parsed.constraints) == 1
        assert parsed.constraints[0].terms == [ParsedTerm(1.0, "x"), ParsedTerm(1.0, "y")]

    def test_comments(self):
        parsed = parse_lp(
            "\\ header comment\n"
            "Max \\ sense\n"
            " obj: x \\ objective\n"
            "ST\n"
            " c1: x <= 2 \\ trailing\n"
            "End\n"
        )
        assert parsed.constraints[0].rhs == 2.0


class TestSections:
    """Bounds, General and Binary sections."""

    def test_bound_forms(self):
        parsed = parse_lp(
            "Max\n obj: a + b + c + d + e + f + g\n"
            "Bounds\n"
            " a free\n"
            " -inf <= b <= 5\n"
            " c <= 7\n"
            " 2 <= d\n"
            " e >= -3\n"
            " f = 4\n"
            " -1 <= g <= +inf\n"
            "End"
        )
        assert parsed.bounds == [
            ParsedBound("a", lower=-math.inf, upper=math.inf),
            ParsedBound("b", lower=-math.inf, upper=5.0),
            ParsedBound("c", upper=7.0),
            ParsedBound("d", lower=2.0),
            ParsedBound("e", lower=-3.0),
            ParsedBound("f", lower=4.0, upper=4.0),
            ParsedBound("g", lower=-1.0, upper=math.inf),
        ]

    def test_unsigned_infinity_is_positive(self):
        parsed = parse_lp("Max\n x\nBounds\n x <= infinity\nEnd")
        assert parsed.bounds[0].upper == math.inf

    def test_general_and_binary(self):
        parsed = parse_lp("Max\n obj: x + y + z\nGeneral\n x y\nBinary\n z\nEnd")
        assert parsed.general == ["x", "y"]
        assert parsed.binary == ["z"]

    @pytest.mark.parametrize("keyword", ["Generals", "General", "GEN"])
    def test_general_keywords(self, keyword):
        assert parse_lp(f"Max\n x\n{keyword}\n x\nEnd").general == ["x"]

    @pytest.mark.parametrize("keyword", ["Binaries", "Binary", "bin"])
    def test_binary_keywords(self, keyword):
        assert parse_lp(f"Max\n x\n{keyword}\n x\nEnd").binary == ["x"]

    def test_sections_in_any_order(self):
        parsed = parse_lp("Max\n x + y\nBinary\n y\nBounds\n x <= 3\nGeneral\n x\nEnd")
        assert parsed.binary == ["y"]
        assert parsed.general == ["x"]
        assert parsed.bounds == [ParsedBound("x", upper=3.0)]

    def test_empty_sections(self):
        parsed = parse_lp("Max\n x\nSubject To\nBounds\nGeneral\nBinary\nEnd")
        assert parsed.constraints == []
        assert parsed.bounds == []
        assert parsed.general == []
        assert parsed.binary == []

    def test_case_insensitive_keywords(self):
        parsed = parse_lp("maximize\n x\nsubject to\n x <= 1\nbounds\n x >= 0\nend")
        assert len(parsed.constraints) == 1
        assert len(parsed.bounds) == 1


class TestParseErrors:
    """Syntax errors carry a source position."""

    def test_missing_end(self):
        with pytest.raises(ParseError):
            parse_lp("Maximize\n x\n")

    def test_missing_rhs(self):
        with pytest.raises(ParseError) as excinfo:
            parse_lp("Maximize\n obj: x\nSubject To\n c1: x <=\nEnd\n")
        error = excinfo.value
        assert error.line is not None and error.column is not None
        assert error.position >= 0

    def test_garbage_after_end(self):
        with pytest.raises(ParseError) as excinfo:
            parse_lp("Maximize\n x\nEnd\nextra\n")
        assert excinfo.value.line == 4

    def test_missing_objective_sense(self):
        with pytest.raises(ParseError) as excinfo:
            parse_lp("obj: x\nEnd")
        assert excinfo.value.position == 0
        assert excinfo.value.line == 1

    def test_error_hierarchy(self):
        with pytest.raises(LPModelError):
            parse_lp("")
        with pytest.raises(ValueError):
            parse_lp("Subject To\nEnd")
