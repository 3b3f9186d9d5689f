"""
Template segmentation.

A template is literal text with embedded commands between `{{` and `}}`.
Parsing splits the text into alternating raw and code segments that refer
back to the source by index ranges; nothing is copied. Each command is
classified by its prefix:

    {{ statement }}       Bud statement, emitted on its own line
    {{= expression }}     expression, passed through the encoder
    {{:= expression }}    expression, concatenated without encoding

A `-` right after the prefix trims whitespace at the end of the preceding
literal; a `-` right before `}}` trims whitespace at the start of the
following literal.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Tuple, Union

from .utils.exceptions import MissingEndBraces, UnexpectedEndBraces
from .utils.logging import get_logger

logger = get_logger(__name__)

OPEN_MARKER = "{{"
CLOSE_MARKER = "}}"
ENCODED_EXPRESSION_PREFIX = "="
RAW_EXPRESSION_PREFIX = ":="
TRIM_MARKER = "-"


class SegmentKind(Enum):
    RAW = "raw"
    STATEMENT = "statement"
    EXPRESSION = "expression"


@dataclass(frozen=True)
class WhitespaceTrimming:
    """Whitespace elision requested by a command."""

    trim_before: bool = False   # trailing whitespace of the preceding literal
    trim_after: bool = False    # leading whitespace of the following literal


NO_TRIMMING = WhitespaceTrimming()


@dataclass(frozen=True)
class CommandClass:
    """Classification of the text between a pair of markers."""

    kind: SegmentKind
    encode: bool
    trimming: WhitespaceTrimming
    body_start: int     # relative to the command text
    body_end: int


def classify_command(command: str) -> CommandClass:
    """
    Classify a raw command string.

    The `=` prefix is checked before `:=`, so `=` selects an encoded
    expression and `:=` an unencoded one; anything else is a statement.

    Args:
        command: Text between `{{` and `}}`

    Returns:
        Kind, encoding flag, trim flags and the body span within `command`
    """
    start = 0
    end = len(command)

    if command.startswith(ENCODED_EXPRESSION_PREFIX):
        kind, encode = SegmentKind.EXPRESSION, True
        start = len(ENCODED_EXPRESSION_PREFIX)
    elif command.startswith(RAW_EXPRESSION_PREFIX):
        kind, encode = SegmentKind.EXPRESSION, False
        start = len(RAW_EXPRESSION_PREFIX)
    else:
        kind, encode = SegmentKind.STATEMENT, False

    trim_before = command.startswith(TRIM_MARKER, start)
    if trim_before:
        start += len(TRIM_MARKER)

    trim_after = end > start and command.endswith(TRIM_MARKER, start)
    if trim_after:
        end -= len(TRIM_MARKER)

    return CommandClass(
        kind=kind,
        encode=encode,
        trimming=WhitespaceTrimming(trim_before, trim_after),
        body_start=start,
        body_end=end,
    )


@dataclass(frozen=True)
class Segment:
    """
    A classified slice of template text.

    `range` is the literal text for raw segments and the whole command
    between the markers for code segments; `body` is the statement or
    expression text with prefix and trim markers removed.
    """

    kind: SegmentKind
    range: Tuple[int, int]
    body: Tuple[int, int]
    trimming: WhitespaceTrimming = NO_TRIMMING
    encode: bool = False

    @property
    def is_code(self) -> bool:
        return self.kind is not SegmentKind.RAW

    @property
    def is_empty(self) -> bool:
        return self.range[0] == self.range[1]

    def text(self, source: str) -> str:
        start, end = self.range
        return source[start:end]

    def body_text(self, source: str) -> str:
        start, end = self.body
        return source[start:end]


def _raw_segment(start: int, end: int) -> Segment:
    return Segment(SegmentKind.RAW, (start, end), (start, end))


def parse_template(source: str) -> 'ParsedTemplate':
    """
    Split template text into segments.

    Args:
        source: Template text

    Returns:
        ParsedTemplate referring to `source`

    Raises:
        MissingEndBraces: If a `{{` is never closed
        UnexpectedEndBraces: If a `}}` appears in literal text
    """
    pieces = source.split(OPEN_MARKER)
    segments = []

    first = pieces[0]
    if CLOSE_MARKER in first:
        raise UnexpectedEndBraces(first.index(CLOSE_MARKER))
    segments.append(_raw_segment(0, len(first)))
    offset = len(first)

    for piece in pieces[1:]:
        open_offset = offset
        piece_start = offset + len(OPEN_MARKER)

        command_parts = piece.split(CLOSE_MARKER)
        if len(command_parts) < 2:
            raise MissingEndBraces(open_offset)
        if len(command_parts) > 2:
            stray = piece_start + len(command_parts[0]) + len(CLOSE_MARKER) + len(command_parts[1])
            raise UnexpectedEndBraces(stray)

        command, raw = command_parts
        command_end = piece_start + len(command)
        classified = classify_command(command)
        segments.append(Segment(
            kind=classified.kind,
            range=(piece_start, command_end),
            body=(piece_start + classified.body_start, piece_start + classified.body_end),
            trimming=classified.trimming,
            encode=classified.encode,
        ))

        raw_start = command_end + len(CLOSE_MARKER)
        segments.append(_raw_segment(raw_start, raw_start + len(raw)))
        offset = piece_start + len(piece)

    return ParsedTemplate(source, tuple(segments))


@dataclass(frozen=True)
class ParsedTemplate:
    """A template's text plus its segment sequence."""

    source: str
    segments: Tuple[Segment, ...]

    def reconstruct(self) -> str:
        """Rebuild the template text by re-inserting the markers."""
        parts = []
        for segment in self.segments:
            if segment.is_code:
                parts.append(OPEN_MARKER + segment.text(self.source) + CLOSE_MARKER)
            else:
                parts.append(segment.text(self.source))
        return "".join(parts)

    def to_bud_source(self, name: str, parameters: Iterable[str] = ()) -> str:
        """Generate the Bud program for this template."""
        from .codegen.bud_source import BudSourceGenerator

        return BudSourceGenerator().generate(self, name, list(parameters))


class Template:
    """
    An immutable template source.

    Rendering goes through `budplate.renderer.Configuration`; the
    `render` helpers here use the default configuration.
    """

    __slots__ = ("_source",)

    def __init__(self, source: str):
        if not isinstance(source, str):
            raise TypeError(f"Template source must be str, not {type(source).__name__}")
        object.__setattr__(self, "_source", source)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Template is immutable")

    @classmethod
    def from_str(cls, template: str) -> 'Template':
        return cls(template)

    @classmethod
    def from_string(cls, template: str) -> 'Template':
        return cls(template)

    @property
    def source(self) -> str:
        return self._source

    def parse(self) -> ParsedTemplate:
        parsed = parse_template(self._source)
        logger.debug(f"Parsed template into {len(parsed.segments)} segments")
        return parsed

    def render(self) -> str:
        return self.render_with(())

    def render_with(self, args: Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]) -> str:
        from .renderer import Configuration

        return Configuration().render_with(self._source, args)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Template):
            return self._source == other._source
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._source)

    def __repr__(self) -> str:
        return f"Template({self._source!r})"

    def __str__(self) -> str:
        return self._source
