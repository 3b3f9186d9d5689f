"""
Bud program generation for parsed templates.

A template becomes a single Bud function whose parameters are the render
argument names. The body appends to an `output` accumulator and returns it:

    function render(name)
    output := ""
    output := output + "Hello, " + encode((name) as String) + "!"
    output
    end

Literal text and expressions that are not separated by a statement are
folded into one concatenation chain; each statement is copied verbatim
onto its own line and ends the current chain.
"""

from __future__ import annotations

import re
from typing import List, Optional

from ..template import ParsedTemplate, Segment, SegmentKind
from ..utils.logging import get_logger
from .trimming import literal_text

logger = get_logger(__name__)

OUTPUT_VARIABLE = "output"
ENCODE_FUNCTION_NAME = "encode"
DEFAULT_FUNCTION_NAME = "render"

_LITERAL_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
_NEEDS_ESCAPE = re.compile(r'[\\"\x00-\x1f\x7f]')


def _escape_char(match: re.Match) -> str:
    char = match.group()
    escaped = _LITERAL_ESCAPES.get(char)
    if escaped is None:
        escaped = f"\\u{{{ord(char):02x}}}"
    return escaped


def string_literal(text: str) -> str:
    """Format text as a double-quoted Bud string literal."""
    return '"' + _NEEDS_ESCAPE.sub(_escape_char, text) + '"'


def expression_term(expression: str, encode: bool) -> str:
    """
    Bud term for an embedded expression.

    Args:
        expression: Expression text, already stripped
        encode: Wrap the String conversion in the encoder native call

    Returns:
        Term to append to a concatenation chain
    """
    converted = f"(({expression}) as String)"
    if encode:
        return f"{ENCODE_FUNCTION_NAME}{converted}"
    return converted


class BudSourceGenerator:
    """Generates the Bud render function for a parsed template."""

    def __init__(self, output_variable: str = OUTPUT_VARIABLE):
        self.output_variable = output_variable

    def generate(
        self,
        parsed: ParsedTemplate,
        name: str = DEFAULT_FUNCTION_NAME,
        parameters: Optional[List[str]] = None,
    ) -> str:
        """
        Generate Bud source for a parsed template.

        Args:
            parsed: Template segments and their source
            name: Name of the generated function
            parameters: Argument names, in call order

        Returns:
            Bud source defining exactly one function
        """
        parameters = list(parameters or [])
        output = self.output_variable
        source = parsed.source
        segments = parsed.segments

        lines = [
            f"function {name}({', '.join(parameters)})",
            f'{output} := ""',
        ]
        chain: List[str] = []

        def flush_chain() -> None:
            if chain:
                lines.append(f"{output} := {output} + " + " + ".join(chain))
                chain.clear()

        for index, segment in enumerate(segments):
            if segment.kind is SegmentKind.RAW:
                if segment.is_empty:
                    continue
                literal = literal_text(
                    source,
                    segment,
                    self._neighbour(segments, index - 1),
                    self._neighbour(segments, index + 1),
                )
                if literal:
                    chain.append(string_literal(literal))
            elif segment.kind is SegmentKind.STATEMENT:
                flush_chain()
                lines.append(segment.body_text(source).strip())
            else:
                chain.append(expression_term(segment.body_text(source).strip(), segment.encode))

        flush_chain()
        lines.append(output)
        lines.append("end")

        generated = "\n".join(lines)
        logger.debug(f"Generated {len(lines)} lines of Bud for '{name}'")
        return generated

    @staticmethod
    def _neighbour(segments: tuple, index: int) -> Optional[Segment]:
        if 0 <= index < len(segments) and segments[index].is_code:
            return segments[index]
        return None
