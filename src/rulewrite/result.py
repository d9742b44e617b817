"""Parse result: rewritten text or the errors that prevented it.

Exactly one side is meaningful. A result with errors never carries
partial output.
"""

from __future__ import annotations

from dataclasses import dataclass

from rulewrite.diagnostics import CompilationError
from rulewrite.errors import ParseFailedError


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Outcome of Engine.parse().

    Attributes:
        text: Rewritten output (empty when errors is non-empty)
        errors: Ordered diagnostics; empty on success

    Example:
            >>> ParseResult.success("vec4").unwrap()
            'vec4'

    """

    text: str = ""
    errors: tuple[CompilationError, ...] = ()

    @classmethod
    def success(cls, text: str) -> ParseResult:
        return cls(text=text)

    @classmethod
    def failure(cls, errors: list[CompilationError] | tuple[CompilationError, ...]) -> ParseResult:
        if not errors:
            msg = "failure() needs at least one error"
            raise ValueError(msg)
        return cls(errors=tuple(errors))

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> str:
        """Return the text, or raise ParseFailedError carrying the errors."""
        if self.errors:
            raise ParseFailedError(self.errors)
        return self.text

    def __bool__(self) -> bool:
        return self.ok
