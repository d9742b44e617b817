"""Output accumulation for the driver and the expansion engine.

Rewritten output is assembled from many small pieces (whitespace runs,
pass-through tokens, expansion results). Appending to a list and joining
once keeps that linear.

"""

from __future__ import annotations


class StringBuilder:
    """Append-only string accumulator.

    Usage:
            >>> sb = StringBuilder()
            >>> _ = sb.append("vec").append("4")
            >>> sb.build()
            'vec4'

    """

    __slots__ = ("_parts",)

    def __init__(self) -> None:
        self._parts: list[str] = []

    def append(self, s: str) -> StringBuilder:
        """Append a string (empty strings are skipped)."""
        if s:
            self._parts.append(s)
        return self

    def build(self) -> str:
        """Join everything appended so far."""
        return "".join(self._parts)

    def __len__(self) -> int:
        """Number of pieces appended (not characters)."""
        return len(self._parts)

    def __bool__(self) -> bool:
        return bool(self._parts)
