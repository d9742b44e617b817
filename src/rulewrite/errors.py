"""Exception classes for rulewrite.

Match failures are not exceptions: they are collected as
CompilationError records (see rulewrite.diagnostics). The exceptions here
cover rule definition, template expansion, and unwrapping a failed
ParseResult.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rulewrite.diagnostics import CompilationError


class RulewriteError(Exception):
    """Base exception for all rulewrite errors."""

    pass


class RuleDefinitionError(RulewriteError):
    """A rule failed validation.

    Only raised when an Engine is created with strict_rules=True;
    otherwise invalid rules are disabled and logged.
    """

    def __init__(self, problem: str, rule_repr: str | None = None) -> None:
        """Initialize rule definition error.

        Args:
            problem: Why the rule is invalid
            rule_repr: Optional printable form of the offending rule
        """
        self.problem = problem
        self.rule_repr = rule_repr
        suffix = f": {rule_repr}" if rule_repr else ""
        super().__init__(f"Invalid rule ({problem}){suffix}")


class ExpansionError(RulewriteError):
    """Template expansion failed.

    Aborts the expansion of the current rule only. The engine turns it
    into a CompilationError positioned at the match that triggered it.
    """

    pass


class ExtensionError(ExpansionError):
    """An extension could not produce replacement text."""

    def __init__(self, extension_name: str, message: str) -> None:
        """Initialize extension error.

        Args:
            extension_name: Name the extension was invoked under
            message: Description of the failure
        """
        self.extension_name = extension_name
        super().__init__(f"Extension '{extension_name}': {message}")


class ParseFailedError(RulewriteError):
    """Raised by ParseResult.unwrap() when parsing produced errors."""

    def __init__(self, errors: tuple[CompilationError, ...]) -> None:
        self.errors = errors
        first = str(errors[0]) if errors else "unknown error"
        more = f" (+{len(errors) - 1} more)" if len(errors) > 1 else ""
        super().__init__(f"{first}{more}")
