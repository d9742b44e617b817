"""Source position tracking for diagnostics.

Provides the SourcePosition dataclass used by TextBuffer cursors and
CompilationError records.

Thread Safety:
SourcePosition is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourcePosition:
    """A cursor position inside a text buffer.

    Attributes:
        offset: Byte offset from the start of the buffer (0-indexed)
        line: Line number (1-indexed)
        column: Column in characters (1-indexed)

    Examples:
            >>> pos = SourcePosition(offset=4, line=2, column=1)
            >>> str(pos)
            '2:1'

    """

    offset: int = 0
    line: int = 1
    column: int = 1

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"

    @classmethod
    def start(cls) -> SourcePosition:
        """Position of the first byte of a buffer."""
        return _START


_START = SourcePosition()
