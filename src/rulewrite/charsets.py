"""Byte classes for O(1) token classification.

The lexer works on UTF-8 bytes. Every class is a frozenset of byte
values so membership tests are constant time and the sets can be shared
freely.

Usage:
    from rulewrite.charsets import DIGITS

    if byte in DIGITS:
        ...
"""

WHITESPACE: frozenset[int] = frozenset(b" \t\n\r")

DIGITS: frozenset[int] = frozenset(b"0123456789")

# Numeric literal body and the single suffix letter it may end with
NUMBER_BODY: frozenset[int] = DIGITS | frozenset(b".")
NUMBER_SUFFIXES: frozenset[int] = frozenset(b"uif")

ASCII_LETTERS: frozenset[int] = frozenset(
    b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
)

# Every byte of a multi-byte UTF-8 sequence has the high bit set. Treating
# them as identifier bytes keeps non-ASCII characters inside one token.
NON_ASCII: frozenset[int] = frozenset(range(0x80, 0x100))

IDENTIFIER_START: frozenset[int] = ASCII_LETTERS | frozenset(b"_") | NON_ASCII
IDENTIFIER_BODY: frozenset[int] = IDENTIFIER_START | DIGITS

BRACKET_PAIRS: dict[int, int] = {
    ord("("): ord(")"),
    ord("["): ord("]"),
    ord("{"): ord("}"),
    ord("<"): ord(">"),
}

# Operators that pair with themselves or with "=": ++ -= && |= == ...
DOUBLING_OPERATORS: frozenset[int] = frozenset(b"+-*&|=")
# Operators that only pair with "=": /= ^= %=
ASSIGNING_OPERATORS: frozenset[int] = frozenset(b"/^%")

EQUALS = ord("=")
QUOTE = ord('"')
BACKSLASH = ord("\\")
DOLLAR = ord("$")
NEWLINE = ord("\n")


def is_identifier(text: str) -> bool:
    """Check that text is a single identifier token (capture or extension name)."""
    data = text.encode("utf-8")
    if not data or data[0] not in IDENTIFIER_START:
        return False
    return all(b in IDENTIFIER_BODY for b in data)


def is_continuation_byte(byte: int) -> bool:
    """UTF-8 continuation bytes do not start a new character."""
    return byte & 0xC0 == 0x80
