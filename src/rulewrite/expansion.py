"""Template expansion.

A template is plain text with ``$`` references:

    ``$name``
        First value of capture ``name``, or the output of the extension
        registered as ``name``. Extensions may take parameters written
        right after the name: ``$EXPAND_COUNT(slot)``.

    ``$( ... )``
        Repetition group. The body is emitted once per index, with every
        capture it references replaced by that index's value. The number
        of iterations is the length of the shortest referenced capture.
        Nested groups are expanded first and then behave as literal text.

Example:
    With captures ``{"v": ["1", "2", "3"]}``, the template ``$($v,)``
    expands to ``1,2,3,`` and ``[$(<$v>)]`` to ``[<1><2><3>]``.

Substituted text is never rescanned for further references; the engine
re-parses the whole expansion against the rules instead.

"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from rulewrite.buffer import TextBuffer
from rulewrite.charsets import DOLLAR, IDENTIFIER_START
from rulewrite.errors import ExpansionError, ExtensionError
from rulewrite.lexer import Span, scan_token
from rulewrite.stringbuilder import StringBuilder

if TYPE_CHECKING:
    from rulewrite.engine import Engine
    from rulewrite.extensions.registry import ExtensionRegistry
    from rulewrite.rules import CaptureMap

_OPEN_PAREN = ord("(")
_CLOSE_PAREN = ord(")")


class _Capture(NamedTuple):
    name: str


class _Call(NamedTuple):
    name: str
    params: str | None


class ExpansionEngine:
    """Expands rule templates against a capture map.

    Usage:
            >>> from rulewrite.extensions import ExtensionRegistry
            >>> engine = ExpansionEngine(ExtensionRegistry())
            >>> engine.expand("$($v,)", {"v": ["1", "2", "3"]})
            '1,2,3,'

    Thread Safety:
        Stateless apart from the registry it reads. Stateful extensions
        make concurrent use unsafe.

    """

    __slots__ = ("_extensions", "_engine")

    def __init__(self, extensions: ExtensionRegistry, engine: Engine | None = None) -> None:
        """Initialize expansion engine.

        Args:
            extensions: Registry consulted for ``$NAME`` references
            engine: Handle passed to extensions
        """
        self._extensions = extensions
        self._engine = engine

    def expand(self, template: str, captures: CaptureMap) -> str:
        """Substitute every reference in template.

        Raises:
            ExpansionError: Unknown name, empty capture, malformed
                reference, or a failing extension
        """
        buffer = TextBuffer(template)
        sb = StringBuilder()
        pos = 0
        size = len(buffer)
        while pos < size:
            dollar = buffer.find(DOLLAR, pos)
            if dollar == -1:
                sb.append(buffer.substring(pos, size))
                break
            sb.append(buffer.substring(pos, dollar))
            text, pos = self._expand_reference(buffer, dollar + 1, size, captures)
            sb.append(text)
        return sb.build()

    # =========================================================================
    # References
    # =========================================================================

    def _expand_reference(
        self,
        buffer: TextBuffer,
        pos: int,
        limit: int,
        captures: CaptureMap,
    ) -> tuple[str, int]:
        token = self._reference_token(buffer, pos, limit)
        if buffer.byte_at(token.start) == _OPEN_PAREN:
            return self._expand_group(buffer, token, captures), token.end

        name, params, end = self._named_reference(buffer, token, limit)
        if name in self._extensions:
            return self._call(name, captures, params), end
        return self._capture_value(name, captures), token.end

    def _reference_token(self, buffer: TextBuffer, pos: int, limit: int) -> Span:
        token = scan_token(buffer, pos, balanced=True)
        if token is None or token.start != pos or token.start >= limit:
            raise ExpansionError("Expected expression after $")
        first = buffer.byte_at(token.start)
        if first == _OPEN_PAREN:
            if token.end > limit or buffer.byte_at(token.end - 1) != _CLOSE_PAREN or token.length < 2:
                raise ExpansionError(f"Unterminated group: {buffer.substring(token.start, limit)!r}")
            return token
        if first not in IDENTIFIER_START:
            raise ExpansionError(
                f"Invalid expression after $: {buffer.substring(token.start, token.end)!r}"
            )
        return token

    def _named_reference(
        self,
        buffer: TextBuffer,
        token: Span,
        limit: int,
    ) -> tuple[str, str | None, int]:
        """Name of a reference and, for extensions, its parameter text."""
        name = buffer.substring(token.start, token.end)
        if name not in self._extensions or buffer.byte_at(token.end) != _OPEN_PAREN:
            return name, None, token.end
        group = scan_token(buffer, token.end, balanced=True)
        if group is None or group.end > limit or buffer.byte_at(group.end - 1) != _CLOSE_PAREN:
            raise ExpansionError(f"Unterminated parameters for ${name}")
        return name, buffer.substring(group.start + 1, group.end - 1), group.end

    def _capture_value(self, name: str, captures: CaptureMap, index: int = 0) -> str:
        values = captures.get(name)
        if values is None:
            raise ExpansionError(f'Unknown name "${name}": not a capture or extension')
        if not values:
            raise ExpansionError(f'Capture "{name}" is empty')
        return values[index]

    def _call(self, name: str, captures: CaptureMap, params: str | None) -> str:
        extension = self._extensions.get(name)
        result = extension(self._engine, captures, params)
        if not isinstance(result, str):
            raise ExtensionError(name, f"returned {type(result).__name__}, expected str")
        return result

    # =========================================================================
    # Repetition groups
    # =========================================================================

    def _expand_group(self, buffer: TextBuffer, group: Span, captures: CaptureMap) -> str:
        body_start = group.start + 1
        body_end = group.end - 1

        pieces: list[str | _Capture | _Call] = []
        referenced: list[str] = []
        pos = body_start
        while pos < body_end:
            dollar = buffer.find(DOLLAR, pos, body_end)
            if dollar == -1:
                pieces.append(buffer.substring(pos, body_end))
                break
            pieces.append(buffer.substring(pos, dollar))
            token = self._reference_token(buffer, dollar + 1, body_end)
            if buffer.byte_at(token.start) == _OPEN_PAREN:
                pieces.append(self._expand_group(buffer, token, captures))
                pos = token.end
                continue
            name, params, end = self._named_reference(buffer, token, body_end)
            if name in self._extensions:
                pieces.append(_Call(name, params))
                pos = end
                continue
            if name not in captures:
                raise ExpansionError(f'Unknown name "${name}": not a capture or extension')
            pieces.append(_Capture(name))
            referenced.append(name)
            pos = token.end

        if not referenced:
            raise ExpansionError(
                f"Repetition group references no captures: {buffer.substring(group.start, group.end)!r}"
            )

        iterations = min(len(captures[name]) for name in referenced)
        sb = StringBuilder()
        for index in range(iterations):
            for piece in pieces:
                if isinstance(piece, _Capture):
                    sb.append(captures[piece.name][index])
                elif isinstance(piece, _Call):
                    sb.append(self._call(piece.name, captures, piece.params))
                else:
                    sb.append(piece)
        return sb.build()
