"""
budplate: templates compiled to Bud programs.

Templates mix literal text with Bud code between `{{` and `}}`. Each
render compiles the template into a Bud function and runs it in a fresh
evaluator.

Usage:
    from budplate import Configuration, Template

    Template("Hello, {{= name }}!").render_with({"name": "World"})
    Configuration.for_html().render("{{= title }}")
"""

__version__ = "0.1.0"
__author__ = "budplate developers"
__email__ = "budplate@example.com"

# Public API exports
from .template import (
    Template,
    ParsedTemplate,
    Segment,
    SegmentKind,
    WhitespaceTrimming,
    classify_command,
    parse_template,
)

from .encoding import (
    Encoder,
    NoEncoding,
    HtmlEncoding,
    EncodeFunction,
    register_encoder,
    get_encoder,
    list_encoders,
)

from .renderer import Configuration, render

from .utils.exceptions import (
    BudplateError,
    TemplateError,
    MissingEndBraces,
    UnexpectedEndBraces,
    CompileError,
    RuntimeFault,
    FaultKind,
    ArgumentError,
    UnknownEncoderError,
)

__all__ = [
    "Template",
    "ParsedTemplate",
    "Segment",
    "SegmentKind",
    "WhitespaceTrimming",
    "classify_command",
    "parse_template",
    "Encoder",
    "NoEncoding",
    "HtmlEncoding",
    "EncodeFunction",
    "register_encoder",
    "get_encoder",
    "list_encoders",
    "Configuration",
    "render",
    "BudplateError",
    "TemplateError",
    "MissingEndBraces",
    "UnexpectedEndBraces",
    "CompileError",
    "RuntimeFault",
    "FaultKind",
    "ArgumentError",
    "UnknownEncoderError",
]
