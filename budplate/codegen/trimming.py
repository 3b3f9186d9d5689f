"""
Whitespace trimming between literal text and trimmed commands.

Trimming is computed as a narrower slice of the source at emission time;
the template text itself is never modified.
"""

from typing import Optional, Tuple

from ..template import Segment

# str.isspace() also accepts the ASCII separators, which are not Unicode White_Space
_NOT_WHITESPACE = frozenset("\x1c\x1d\x1e\x1f")


def is_whitespace(char: str) -> bool:
    """Unicode White_Space test for a single character."""
    return char.isspace() and char not in _NOT_WHITESPACE


def trimmed_span(
    source: str, start: int, end: int, trim_start: bool, trim_end: bool
) -> Tuple[int, int]:
    """
    Narrow `source[start:end]` by skipping leading and/or trailing whitespace.

    Args:
        source: Template text
        start: Start of the literal
        end: End of the literal
        trim_start: Skip leading whitespace
        trim_end: Skip trailing whitespace

    Returns:
        The narrowed (start, end) span; start == end if nothing is left
    """
    if trim_start:
        while start < end and is_whitespace(source[start]):
            start += 1
    if trim_end:
        while end > start and is_whitespace(source[end - 1]):
            end -= 1
    return start, end


def literal_text(
    source: str,
    segment: Segment,
    previous: Optional[Segment],
    following: Optional[Segment],
) -> str:
    """
    Text of a raw segment after applying its neighbours' trim requests.

    Args:
        source: Template text
        segment: The raw segment being emitted
        previous: The code segment immediately before it, if any
        following: The code segment immediately after it, if any

    Returns:
        The literal text to emit
    """
    trim_start = previous is not None and previous.trimming.trim_after
    trim_end = following is not None and following.trimming.trim_before
    start, end = trimmed_span(source, segment.range[0], segment.range[1], trim_start, trim_end)
    return source[start:end]
