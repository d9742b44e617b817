"""Pluggable template extensions.

Extensions supply dynamic substitution text for ``$NAME`` references in
templates. Every Engine owns an ExtensionRegistry preloaded with the
built-in counter, ``EXPAND_COUNT``.

Example:
    >>> from rulewrite import Engine
    >>> engine = Engine()
    >>> _ = engine.extensions.register(lambda e, c, p: "float", name="SCALAR")

"""

from rulewrite.extensions.builtins import CounterExtension, default_extensions
from rulewrite.extensions.protocol import Extension, NamedExtension
from rulewrite.extensions.registry import ExtensionRegistry

__all__ = [
    "CounterExtension",
    "Extension",
    "ExtensionRegistry",
    "NamedExtension",
    "default_extensions",
]
