"""Lexical segmentation shared by the matcher, the driver and the expander.

scan_token() finds the next token after an offset: it skips whitespace,
classifies the first byte, and consumes one token. There is no
backtracking and no regex; each call touches every byte at most once.

Token classes:
    - number: digits and ".", then at most one suffix letter u/i/f
    - identifier: letter, "_" or non-ASCII byte, then those plus digits
    - bracket: the opener alone, or in balanced mode everything up to
      the matching closer (nesting of the same bracket kind only;
      unmatched openers run to the end of the buffer)
    - operator: "++" "&&" "+=" "/=" ... as two bytes, other symbols as one
    - string: a double-quoted string, backslash escapes the next byte

Balanced mode is what lets one GENERIC capture absorb a whole nested
expression such as ``f(a, (b + c))``.

"""

from __future__ import annotations

from typing import NamedTuple

from rulewrite.buffer import TextBuffer
from rulewrite.charsets import (
    ASSIGNING_OPERATORS,
    BACKSLASH,
    BRACKET_PAIRS,
    DIGITS,
    DOUBLING_OPERATORS,
    EQUALS,
    IDENTIFIER_BODY,
    IDENTIFIER_START,
    NUMBER_BODY,
    NUMBER_SUFFIXES,
    QUOTE,
    WHITESPACE,
)


class Span(NamedTuple):
    """Half-open byte range [start, end) within a buffer."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def empty(self) -> bool:
        return self.end <= self.start


def skip_whitespace(buffer: TextBuffer, offset: int) -> int:
    """First offset at or after ``offset`` that is not whitespace."""
    while buffer.byte_at(offset) in WHITESPACE:
        offset += 1
    return offset


def scan_token(buffer: TextBuffer, offset: int, *, balanced: bool = False) -> Span | None:
    """Find the token following ``offset``.

    Args:
        buffer: Buffer to read
        offset: Where to start (whitespace is skipped first)
        balanced: Consume a bracket opener together with everything up to
            its matching closer

    Returns:
        The token span, or None when only whitespace remains.
    """
    start = skip_whitespace(buffer, offset)
    first = buffer.byte_at(start)
    if first == -1:
        return None

    if first in DIGITS:
        return Span(start, _scan_number(buffer, start))
    if first in IDENTIFIER_START:
        end = start + 1
        while buffer.byte_at(end) in IDENTIFIER_BODY:
            end += 1
        return Span(start, end)
    if first in BRACKET_PAIRS:
        if balanced:
            return Span(start, _scan_balanced(buffer, start, first, BRACKET_PAIRS[first]))
        return Span(start, start + 1)
    if first == QUOTE:
        return Span(start, _scan_string(buffer, start))

    second = buffer.byte_at(start + 1)
    if first in DOUBLING_OPERATORS and second in (first, EQUALS):
        return Span(start, start + 2)
    if first in ASSIGNING_OPERATORS and second == EQUALS:
        return Span(start, start + 2)
    return Span(start, start + 1)


def _scan_number(buffer: TextBuffer, start: int) -> int:
    end = start
    while buffer.byte_at(end) in NUMBER_BODY:
        end += 1
    if buffer.byte_at(end) in NUMBER_SUFFIXES:
        end += 1
    return end


def _scan_balanced(buffer: TextBuffer, start: int, opener: int, closer: int) -> int:
    depth = 1
    pos = start + 1
    size = len(buffer)
    while pos < size:
        byte = buffer.byte_at(pos)
        pos += 1
        if byte == opener:
            depth += 1
        elif byte == closer:
            depth -= 1
            if depth == 0:
                return pos
    return size


def _scan_string(buffer: TextBuffer, start: int) -> int:
    pos = start + 1
    size = len(buffer)
    while pos < size:
        byte = buffer.byte_at(pos)
        if byte == BACKSLASH:
            pos += 2
            continue
        pos += 1
        if byte == QUOTE:
            return pos
    return size


def tokenize(buffer: TextBuffer, *, balanced: bool = False) -> list[Span]:
    """All token spans of a buffer, mostly useful for debugging and tests."""
    spans: list[Span] = []
    offset = 0
    while (span := scan_token(buffer, offset, balanced=balanced)) is not None:
        spans.append(span)
        offset = span.end
    return spans


def unescape_quoted(token: str) -> str:
    """Contents of a quoted-string token with its escapes resolved.

    The surrounding quotes are dropped, ``\\"`` becomes ``"`` and ``\\\\``
    becomes ``\\``. Other backslashes are kept as written so templates can
    still emit them.

    Example:
        >>> unescape_quoted('"say \\\\"hi\\\\""')
        'say "hi"'
    """
    body = token[1:]
    if body.endswith('"') and not _ends_with_escape(body[:-1]):
        body = body[:-1]
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body) and body[i + 1] in '"\\':
            out.append(body[i + 1])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _ends_with_escape(text: str) -> bool:
    backslashes = len(text) - len(text.rstrip("\\"))
    return backslashes % 2 == 1
