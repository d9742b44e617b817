"""Diagnostics reported by a parse.

A failed parse does not raise. It returns every CompilationError it
collected, in the order they were found, so a report layer can print
them all at once.

Thread Safety:
    CompilationError is frozen and safe to share.

"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from rulewrite.location import SourcePosition


class Severity(Enum):
    """How serious a CompilationError is."""

    MESSAGE = "message"
    WARNING = "warning"
    ERROR = "error"
    SYSTEM_ERROR = "system error"


@dataclass(frozen=True, slots=True)
class CompilationError:
    """One positioned diagnostic.

    Attributes:
        position: Where in the input the problem was detected
        message: Human readable description
        severity: Severity level (ERROR unless stated otherwise)
        fix: Suggested fix, empty when the rule offers none

    Example:
            >>> err = CompilationError(SourcePosition(0, 3, 7), 'Word ")" not found')
            >>> str(err)
            '3:7: error: Word ")" not found'

    """

    position: SourcePosition
    message: str
    severity: Severity = Severity.ERROR
    fix: str = ""

    def __str__(self) -> str:
        text = f"{self.position}: {self.severity.value}: {self.message}"
        if self.fix:
            text += f" (fix: {self.fix})"
        return text

    @property
    def line(self) -> int:
        return self.position.line

    @property
    def column(self) -> int:
        return self.position.column

    def moved_to(self, position: SourcePosition) -> CompilationError:
        """Copy of this error reported at another position.

        Used to map errors raised while re-parsing an expansion back onto
        the match that produced it.
        """
        return replace(self, position=position)
