"""Copy-on-write text buffer with a position cursor.

Everything in rulewrite reads input through a TextBuffer. A buffer is a
window (start, end) onto a byte store plus a cursor (offset, line,
column). Offsets are always relative to the buffer's own window.

Storage model:
    - ``bytes`` storage is shared and immutable. Any number of buffers
      may hold it; reading never copies.
    - ``bytearray`` storage is private to exactly one buffer.

The first write through a buffer holding shared storage materializes a
private copy sized to that buffer's window. Creating a view of a buffer
that holds private storage freezes it back into shared storage first, so
after a view exists every side copies before writing. Writes are
therefore never observable through any other buffer.

Storage lifetime is plain reference counting: the store lives as long as
some buffer still refers to it.

Thread Safety:
    TextBuffer instances are not thread-safe. Views may be handed to
    other threads because they never write into shared storage.

"""

from __future__ import annotations

from rulewrite.charsets import NEWLINE, WHITESPACE, is_continuation_byte
from rulewrite.location import SourcePosition


def _char_count(chunk: bytes | bytearray | memoryview) -> int:
    return sum(1 for b in chunk if not is_continuation_byte(b))


class TextBuffer:
    """Byte buffer with copy-on-write views and a line/column cursor.

    Usage:
            >>> buf = TextBuffer("ab\\ncd")
            >>> buf.advance_by(3)
            >>> buf.position
            SourcePosition(offset=3, line=2, column=1)
            >>> view = buf.fork()
            >>> view[0] = ord("X")
            >>> buf.text, view.text
            ('ab\\ncd', 'Xb\\ncd')

    """

    __slots__ = ("_data", "_start", "_end", "_pos", "_line", "_col")

    def __init__(self, source: str | bytes | bytearray = b"") -> None:
        """Create a buffer that owns a copy of source.

        Args:
            source: Text (encoded as UTF-8) or raw bytes
        """
        if isinstance(source, str):
            data = source.encode("utf-8")
        else:
            data = bytes(source)
        self._data: bytes | bytearray = data
        self._start = 0
        self._end = len(data)
        self._pos = 0
        self._line = 1
        self._col = 1

    @classmethod
    def _share(cls, data: bytes, start: int, end: int) -> TextBuffer:
        view = cls.__new__(cls)
        view._data = data
        view._start = start
        view._end = end
        view._pos = 0
        view._line = 1
        view._col = 1
        return view

    # =========================================================================
    # Ownership
    # =========================================================================

    @property
    def owns_storage(self) -> bool:
        """True when the bytes are private to this buffer."""
        return isinstance(self._data, bytearray)

    def shares_storage_with(self, other: TextBuffer) -> bool:
        """True when both buffers read the same underlying store."""
        return self._data is other._data

    def _freeze(self) -> bytes:
        # Private bytes become shared before anyone else may see them.
        if isinstance(self._data, bytearray):
            self._data = bytes(self._data)
        return self._data

    def materialize(self) -> None:
        """Take a private copy of this buffer's window if it is shared.

        Called automatically before any write. Idempotent.
        """
        if isinstance(self._data, bytearray):
            return
        self._data = bytearray(self._data[self._start : self._end])
        self._end -= self._start
        self._start = 0

    def fork(self) -> TextBuffer:
        """A view over the same window with a copy of the cursor."""
        view = self._share(self._freeze(), self._start, self._end)
        view._pos = self._pos
        view._line = self._line
        view._col = self._col
        return view

    def slice(self, start: int, end: int | None = None) -> TextBuffer:
        """A view over a sub-window [start, end) with a fresh cursor.

        Args:
            start: Offset of the first byte (relative to this buffer)
            end: Offset one past the last byte, defaults to the end
        """
        size = self._end - self._start
        if end is None:
            end = size
        if not 0 <= start <= end <= size:
            msg = f"slice [{start}, {end}) outside buffer of size {size}"
            raise IndexError(msg)
        return self._share(self._freeze(), self._start + start, self._start + end)

    # =========================================================================
    # Reading
    # =========================================================================

    def __len__(self) -> int:
        return self._end - self._start

    def __getitem__(self, index: int) -> int:
        size = self._end - self._start
        if index < 0:
            index += size
        if not 0 <= index < size:
            raise IndexError("TextBuffer index out of range")
        return self._data[self._start + index]

    def byte_at(self, index: int) -> int:
        """Byte at offset, or -1 outside the buffer. Never raises."""
        if 0 <= index < self._end - self._start:
            return self._data[self._start + index]
        return -1

    def substring(self, start: int, end: int) -> str:
        """Decoded text of the byte range [start, end)."""
        start = max(0, start)
        end = min(end, self._end - self._start)
        if end <= start:
            return ""
        return bytes(self._data[self._start + start : self._start + end]).decode(
            "utf-8", errors="replace"
        )

    @property
    def text(self) -> str:
        """The whole window as text."""
        return self.substring(0, len(self))

    @property
    def remaining(self) -> int:
        """Bytes left after the cursor."""
        return self._end - self._start - self._pos

    def peek(self, ahead: int = 0) -> int:
        """Byte at cursor + ahead, or -1 past the end."""
        return self.byte_at(self._pos + ahead)

    def find(self, needle: str | bytes | int, start: int = 0, end: int | None = None) -> int:
        """Offset of the first occurrence of needle in [start, end), or -1."""
        if isinstance(needle, str):
            needle = needle.encode("utf-8")
        size = self._end - self._start
        end = size if end is None else min(end, size)
        found = self._data.find(needle, self._start + max(0, start), self._start + end)
        return -1 if found == -1 else found - self._start

    def matches(self, literal: str | bytes, at: int | None = None) -> bool:
        """Check whether literal occurs at offset ``at`` (default: cursor).

        Never reads past the end of the buffer.
        """
        if isinstance(literal, str):
            literal = literal.encode("utf-8")
        at = self._pos if at is None else at
        if at < 0 or len(literal) > len(self) - at:
            return False
        base = self._start + at
        return self._data[base : base + len(literal)] == literal

    # =========================================================================
    # Writing
    # =========================================================================

    def __setitem__(self, index: int, value: int) -> None:
        size = self._end - self._start
        if index < 0:
            index += size
        if not 0 <= index < size:
            raise IndexError("TextBuffer index out of range")
        self.materialize()
        self._data[index] = value

    def write(self, offset: int, data: str | bytes) -> None:
        """Overwrite bytes starting at offset. The length never changes."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        if offset < 0 or offset + len(data) > len(self):
            msg = f"write of {len(data)} bytes at {offset} overflows buffer of size {len(self)}"
            raise IndexError(msg)
        self.materialize()
        self._data[offset : offset + len(data)] = data

    # =========================================================================
    # Cursor
    # =========================================================================

    @property
    def offset(self) -> int:
        return self._pos

    @property
    def position(self) -> SourcePosition:
        return SourcePosition(self._pos, self._line, self._col)

    @property
    def at_end(self) -> bool:
        return self._pos >= self._end - self._start

    def advance(self) -> None:
        """Move past one byte, tracking lines and columns."""
        if self.at_end:
            return
        byte = self._data[self._start + self._pos]
        if byte == NEWLINE:
            self._line += 1
            self._col = 1
        elif not is_continuation_byte(byte):
            self._col += 1
        self._pos += 1

    def advance_by(self, count: int) -> None:
        """Move past up to count bytes (stops at the end)."""
        self.advance_to(self._pos + max(0, count))

    def advance_to(self, offset: int) -> None:
        """Move the cursor to an absolute offset, forward or backward."""
        offset = max(0, min(offset, len(self)))
        if offset < self._pos:
            pos = self.position_at(offset)
            self._pos, self._line, self._col = pos.offset, pos.line, pos.column
            return
        chunk = self._data[self._start + self._pos : self._start + offset]
        newlines = chunk.count(NEWLINE)
        if newlines:
            self._line += newlines
            self._col = 1 + _char_count(chunk[chunk.rfind(NEWLINE) + 1 :])
        else:
            self._col += _char_count(chunk)
        self._pos = offset

    def skip_whitespace(self) -> str:
        """Advance past whitespace and return what was skipped."""
        start = self._pos
        end = start
        while self.byte_at(end) in WHITESPACE:
            end += 1
        self.advance_to(end)
        return self.substring(start, end)

    def position_at(self, offset: int) -> SourcePosition:
        """Line and column of an arbitrary offset, counted from the window start."""
        offset = max(0, min(offset, len(self)))
        chunk = self._data[self._start : self._start + offset]
        last_newline = chunk.rfind(NEWLINE)
        line = 1 + chunk.count(NEWLINE)
        column = 1 + _char_count(chunk[last_newline + 1 :])
        return SourcePosition(offset, line, column)

    # =========================================================================
    # Comparison
    # =========================================================================

    def __eq__(self, other: object) -> bool:
        """Byte-level equality: same cursor and same content."""
        if not isinstance(other, TextBuffer):
            return NotImplemented
        if (self._pos, self._line, self._col) != (other._pos, other._line, other._col):
            return False
        if len(self) != len(other):
            return False
        return (
            self._data[self._start : self._end] == other._data[other._start : other._end]
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        preview = self.substring(self._pos, self._pos + 20)
        return f"TextBuffer({preview!r}, at={self.position}, owned={self.owns_storage})"
