"""Extension registry: name -> extension lookup for one engine.

Unlike rule sets shared between engines, a registry belongs to a single
Engine and can be changed at any time between parses. Stateful built-ins
(the counter) therefore never leak between engines.

Example:
    >>> registry = ExtensionRegistry()
    >>> _ = registry.register(lambda engine, captures, params: "vec4", name="VEC")
    >>> "VEC" in registry, "EXPAND_COUNT" in registry
    (True, True)

"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from rulewrite.charsets import is_identifier
from rulewrite.extensions.builtins import default_extensions
from rulewrite.utils.logger import get_logger

if TYPE_CHECKING:
    from rulewrite.extensions.protocol import Extension

logger = get_logger(__name__)


class ExtensionRegistry:
    """Mutable registry of extensions for one engine.

    Thread Safety:
        Not synchronized. Do not change a registry while its engine is
        parsing in another thread.

    """

    __slots__ = ("_by_name",)

    def __init__(self, *, defaults: bool = True) -> None:
        """Initialize registry.

        Args:
            defaults: Register the built-in extensions (EXPAND_COUNT)
        """
        self._by_name: dict[str, Extension] = {}
        if defaults:
            self.reset_to_defaults()

    def register(
        self,
        extension: Extension,
        name: str | None = None,
        *,
        replace: bool = False,
    ) -> ExtensionRegistry:
        """Register an extension.

        Args:
            extension: Callable implementing the Extension protocol
            name: Name used in templates; defaults to ``extension.name``
            replace: Allow replacing an existing registration

        Returns:
            Self for chaining

        Raises:
            TypeError: If the extension is not callable or has no name
            ValueError: If the name is not an identifier or already taken
        """
        if not callable(extension):
            msg = f"Extension {type(extension).__name__} is not callable"
            raise TypeError(msg)

        name = name or getattr(extension, "name", None)
        if not name:
            msg = f"Extension {type(extension).__name__} has no 'name'; pass one explicitly"
            raise TypeError(msg)
        if not is_identifier(name):
            msg = f"Extension name {name!r} is not an identifier"
            raise ValueError(msg)

        if name in self._by_name:
            if not replace:
                existing = self._by_name[name]
                msg = f"Extension '{name}' already registered by {type(existing).__name__}"
                raise ValueError(msg)
            logger.warning("Replacing extension %r", name)

        self._by_name[name] = extension
        return self

    def unregister(self, name: str) -> Extension:
        """Remove and return an extension.

        Raises:
            KeyError: If nothing is registered under name
        """
        try:
            return self._by_name.pop(name)
        except KeyError:
            available = ", ".join(sorted(self._by_name)) or "none"
            msg = f"Unknown extension: {name!r}. Registered: {available}"
            raise KeyError(msg) from None

    def get(self, name: str) -> Extension | None:
        return self._by_name.get(name)

    def has(self, name: str) -> bool:
        return name in self._by_name

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._by_name)

    def clear(self) -> None:
        """Remove every registration, built-ins included."""
        self._by_name.clear()

    def reset_to_defaults(self) -> None:
        """Clear all registrations, then register fresh built-ins."""
        self._by_name.clear()
        for name, extension in default_extensions():
            self._by_name[name] = extension

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_name)

    def __len__(self) -> int:
        return len(self._by_name)
