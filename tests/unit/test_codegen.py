"""
Unit tests for Bud source generation.

Tests the exact shape of generated functions, concatenation folding,
whitespace trimming and string literal escaping.
"""

import pytest

from budplate.codegen import BudSourceGenerator, expression_term, string_literal
from budplate.codegen.trimming import is_whitespace, literal_text, trimmed_span
from budplate.template import parse_template


def generate(source, parameters=None, name="render"):
    return BudSourceGenerator().generate(parse_template(source), name, parameters)


class TestBudSourceGenerator:
    """Test generated Bud programs."""

    def test_expression_with_parameter(self):
        """Test the canonical greeting template."""
        assert generate("Hello, {{= name }}!", ["name"]) == "\n".join([
            "function render(name)",
            'output := ""',
            'output := output + "Hello, " + encode((name) as String) + "!"',
            "output",
            "end",
        ])

    def test_literal_only(self):
        """Test that literal text becomes a single append."""
        assert generate("abc") == "\n".join([
            "function render()",
            'output := ""',
            'output := output + "abc"',
            "output",
            "end",
        ])

    def test_empty_template(self):
        """Test that an empty template still defines a function."""
        assert generate("") == 'function render()\noutput := ""\noutput\nend'

    def test_statement_breaks_chain(self):
        """Test that statements land on their own lines."""
        source = "{{ loop for i := 1 to 5 inclusive }}{{= i }}{{ end }}"
        assert generate(source) == "\n".join([
            "function render()",
            'output := ""',
            "loop for i := 1 to 5 inclusive",
            "output := output + encode((i) as String)",
            "end",
            "output",
            "end",
        ])

    def test_unencoded_expression(self):
        """Test that `:=` skips the encode call."""
        program = generate('{{:= "<b>" }}')
        assert 'output := output + (("<b>") as String)' in program
        assert "encode" not in program

    def test_parameters_in_order(self):
        """Test that parameters keep their order."""
        program = generate("{{= b }}{{= a }}", ["b", "a"])
        assert program.splitlines()[0] == "function render(b, a)"

    def test_custom_function_name(self):
        """Test generating under another function name."""
        assert generate("x", name="page").startswith("function page()")

    def test_trimmed_literals_are_omitted(self):
        """Test that whitespace-only literals removed by trimming vanish."""
        program = generate(' {{=- "a" -}} ')
        assert program.splitlines()[2] == 'output := output + encode(("a") as String)'

    def test_one_sided_trim(self):
        """Test that only the requested side is trimmed."""
        program = generate(' {{=- "a" }} ')
        assert program.splitlines()[2] == 'output := output + encode(("a") as String) + " "'

    def test_statement_text_is_stripped(self):
        """Test that statement bodies are copied without surrounding whitespace."""
        program = generate("{{-   if true   -}}{{ end }}")
        assert "if true" in program.splitlines()

    def test_to_bud_source_matches_generator(self):
        """Test ParsedTemplate.to_bud_source."""
        parsed = parse_template("a{{= b }}")
        assert parsed.to_bud_source("render", ["b"]) == generate("a{{= b }}", ["b"])


class TestStringLiteral:
    """Test Bud string literal escaping."""

    def test_plain_text(self):
        """Test that ordinary text is only quoted."""
        assert string_literal("hello") == '"hello"'

    def test_escapes(self):
        """Test escaping of quotes, backslashes and control characters."""
        assert string_literal('a"b\\c\n\t\r') == '"a\\"b\\\\c\\n\\t\\r"'

    def test_other_control_characters(self):
        """Test the unicode escape form."""
        assert string_literal("\x01") == '"\\u{01}"'

    def test_non_ascii_passes_through(self):
        """Test that non-ASCII text is not escaped."""
        assert string_literal("café ✓") == '"café ✓"'


class TestExpressionTerm:
    """Test expression term construction."""

    @pytest.mark.parametrize("encode, expected", [
        (True, "encode((x + 1) as String)"),
        (False, "((x + 1) as String)"),
    ])
    def test_expression_term(self, encode, expected):
        """Test both encoding modes."""
        assert expression_term("x + 1", encode) == expected


class TestTrimming:
    """Test whitespace trimming helpers."""

    def test_trim_both_sides(self):
        """Test trimming leading and trailing whitespace."""
        assert trimmed_span("  ab  ", 0, 6, True, True) == (2, 4)

    def test_trim_start_only(self):
        """Test trimming leading whitespace only."""
        assert trimmed_span("  ab  ", 0, 6, True, False) == (2, 6)

    def test_trim_end_only(self):
        """Test trimming trailing whitespace only."""
        assert trimmed_span("  ab  ", 0, 6, False, True) == (0, 4)

    def test_all_whitespace(self):
        """Test that an all-whitespace span collapses."""
        start, end = trimmed_span(" \n\t", 0, 3, True, True)
        assert start == end

    def test_literal_text_uses_neighbours(self):
        """Test that neighbour trim flags select the sides to trim."""
        source = "{{ a -}}  x  {{- b }}"
        parsed = parse_template(source)
        first, previous, raw, following, last = parsed.segments
        assert literal_text(source, raw, previous, following) == "x"
        assert literal_text(source, raw, None, None) == "  x  "

    def test_ascii_separators_are_not_trimmed(self):
        """Test that file/group/record/unit separators count as text."""
        assert trimmed_span("\x1c a \x1f", 0, 5, True, True) == (0, 5)
        for char in "\x1c\x1d\x1e\x1f":
            assert not is_whitespace(char)

    @pytest.mark.parametrize("char", [" ", "\t", "\n", "\r", "\x0b", "\x0c", "\x85", "\xa0", "\u2003", "\u3000"])
    def test_unicode_whitespace(self, char):
        """Test characters that trimming removes."""
        assert is_whitespace(char)
