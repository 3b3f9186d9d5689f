"""
Bud code generation for templates.

Turns a parsed template into the source of one Bud function, applying
whitespace trimming to literal text as it is emitted.
"""

from .bud_source import (
    DEFAULT_FUNCTION_NAME,
    ENCODE_FUNCTION_NAME,
    OUTPUT_VARIABLE,
    BudSourceGenerator,
    expression_term,
    string_literal,
)
from .trimming import is_whitespace, literal_text, trimmed_span

__all__ = [
    'BudSourceGenerator',
    'DEFAULT_FUNCTION_NAME',
    'ENCODE_FUNCTION_NAME',
    'OUTPUT_VARIABLE',
    'expression_term',
    'string_literal',
    'is_whitespace',
    'literal_text',
    'trimmed_span',
]
