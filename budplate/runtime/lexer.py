"""
Bud tokenizer.

Splits Bud source into tokens. Newlines are significant (they separate
statements); other whitespace and `#` comments are skipped.
"""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass
from typing import Any, List

from ..utils.exceptions import CompileError

KEYWORDS = frozenset({
    "function", "end", "if", "else", "loop", "for", "to", "inclusive",
    "while", "break", "continue", "return", "and", "or", "xor", "not",
    "as", "true", "false",
})

# Longest operators first so ":=" wins over ":" and "<=" over "<"
OPERATORS = (":=", "!=", "<=", ">=", "=", "<", ">", "+", "-", "*", "/", "%", "(", ")", ",")

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<space>[ \t\r]+)
  | (?P<comment>\#[^\n]*)
  | (?P<newline>\n)
  | (?P<real>\d+\.\d+(?:[eE][+-]?\d+)?)
  | (?P<integer>\d+)
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<string>"(?:[^"\\]|\\.)*")
  | (?P<op>""" + "|".join(re.escape(op) for op in OPERATORS) + r""")
    """,
    re.VERBOSE | re.DOTALL,
)

_ESCAPE_PATTERN = re.compile(r"\\(u\{([0-9A-Fa-f]{1,6})\}|.)", re.DOTALL)
_SIMPLE_ESCAPES = {"\\": "\\", '"': '"', "n": "\n", "r": "\r", "t": "\t"}


@dataclass(frozen=True)
class Token:
    """A single lexical token."""

    kind: str       # name, keyword, integer, real, string, op, newline, eof
    text: str
    value: Any
    line: int
    column: int

    def is_keyword(self, word: str) -> bool:
        return self.kind == "keyword" and self.text == word

    def is_op(self, op: str) -> bool:
        return self.kind == "op" and self.text == op


class Lexer:
    """Tokenizer for Bud source text."""

    def __init__(self, source: str):
        self.source = source
        self._line_starts = [0] + [m.end() for m in re.finditer("\n", source)]

    def position(self, offset: int) -> tuple:
        """Translate a character offset into a 1-based (line, column) pair."""
        line = bisect.bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1] + 1

    def error(self, message: str, offset: int) -> CompileError:
        line, column = self.position(offset)
        return CompileError(message, self.source, line, column)

    def tokenize(self) -> List[Token]:
        """
        Tokenize the whole source.

        Returns:
            Token list terminated by an `eof` token

        Raises:
            CompileError: On characters or escapes that are not valid Bud
        """
        tokens: List[Token] = []
        pos = 0
        paren_depth = 0
        length = len(self.source)

        while pos < length:
            match = _TOKEN_PATTERN.match(self.source, pos)
            if match is None:
                if self.source[pos] == '"':
                    raise self.error("Unterminated string literal", pos)
                raise self.error(f"Unexpected character {self.source[pos]!r}", pos)

            kind = match.lastgroup
            text = match.group()
            line, column = self.position(pos)

            if kind == "newline":
                # Newlines inside parentheses do not end a statement
                if paren_depth == 0:
                    tokens.append(Token("newline", text, None, line, column))
            elif kind == "integer":
                tokens.append(Token("integer", text, int(text), line, column))
            elif kind == "real":
                tokens.append(Token("real", text, float(text), line, column))
            elif kind == "name":
                token_kind = "keyword" if text in KEYWORDS else "name"
                tokens.append(Token(token_kind, text, None, line, column))
            elif kind == "string":
                value = self._decode_string(text[1:-1], pos + 1)
                tokens.append(Token("string", text, value, line, column))
            elif kind == "op":
                if text == "(":
                    paren_depth += 1
                elif text == ")" and paren_depth > 0:
                    paren_depth -= 1
                tokens.append(Token("op", text, None, line, column))

            pos = match.end()

        line, column = self.position(length)
        tokens.append(Token("eof", "", None, line, column))
        return tokens

    def _decode_string(self, body: str, offset: int) -> str:
        def replace(match: re.Match) -> str:
            escape = match.group(1)
            if match.group(2) is not None:
                code = int(match.group(2), 16)
                if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
                    raise self.error("Invalid unicode escape", offset + match.start())
                return chr(code)
            if escape in _SIMPLE_ESCAPES:
                return _SIMPLE_ESCAPES[escape]
            raise self.error(f"Invalid escape sequence '\\{escape}'", offset + match.start())

        return _ESCAPE_PATTERN.sub(replace, body)


def tokenize(source: str) -> List[Token]:
    """Tokenize Bud source text."""
    return Lexer(source).tokenize()
