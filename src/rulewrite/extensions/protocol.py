"""Extension protocol for dynamic template substitutions.

An extension is invoked when a template contains ``$NAME`` (or
``$NAME(params)``) and NAME is registered with the engine. It returns
the text to substitute. Failures are reported by raising ExtensionError,
which aborts the current rule's expansion and becomes a CompilationError.

Any callable with the right signature works. Classes may carry a
``name`` attribute, which the registry uses when no explicit name is
given.

Example:
    >>> class UpperExtension:
    ...     name = "UPPER"
    ...
    ...     def __call__(self, engine, captures, params):
    ...         return (params or "").upper()

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rulewrite.engine import Engine
    from rulewrite.rules import CaptureMap


@runtime_checkable
class Extension(Protocol):
    """Protocol for extension implementations.

    Thread Safety:
        Extensions may keep state (the built-in counter does). An
        extension instance belongs to one engine's registry; share it
        between engines only if it is stateless.

    """

    def __call__(
        self,
        engine: Engine,
        captures: CaptureMap,
        params: str | None,
    ) -> str:
        """Produce replacement text.

        Args:
            engine: The engine running the expansion
            captures: Captures of the rule being expanded (read only)
            params: Raw text between the parentheses that immediately
                follow the name, or None when there are none

        Returns:
            Replacement text

        Raises:
            ExtensionError: The substitution cannot be produced
        """
        ...


@runtime_checkable
class NamedExtension(Extension, Protocol):
    """An extension that knows the name it is registered under."""

    name: str
