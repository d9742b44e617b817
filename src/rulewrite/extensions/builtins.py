"""Built-in extensions registered on every engine by default."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rulewrite.engine import Engine
    from rulewrite.rules import CaptureMap


class CounterExtension:
    """Sequence counter: ``$EXPAND_COUNT`` yields 0, 1, 2, ...

    Without parameters the default counter is used. Each distinct
    parameter string gets a counter of its own, so ``$EXPAND_COUNT(slot)``
    and ``$EXPAND_COUNT(binding)`` number independently. The parameter
    ``RESET`` sets the default counter back to zero and returns "0".

    Example:
            >>> counter = CounterExtension()
            >>> [counter(None, {}, None) for _ in range(2)]
            ['0', '1']
            >>> counter(None, {}, "RESET"), counter(None, {}, None)
            ('0', '0')

    """

    name = "EXPAND_COUNT"
    RESET = "RESET"

    __slots__ = ("_default", "_named")

    def __init__(self) -> None:
        self._default = 0
        self._named: dict[str, int] = {}

    def __call__(self, engine: Engine | None, captures: CaptureMap, params: str | None) -> str:
        key = params.strip() if params else ""
        if key == self.RESET:
            self._default = 0
            return "0"
        if not key:
            value = self._default
            self._default += 1
            return str(value)
        value = self._named.get(key, 0)
        self._named[key] = value + 1
        return str(value)

    def value(self, key: str | None = None) -> int:
        """Next value the counter will return, without advancing it."""
        if not key:
            return self._default
        return self._named.get(key, 0)


def default_extensions() -> list[tuple[str, object]]:
    """Fresh instances of the built-in extensions, keyed by name."""
    counter = CounterExtension()
    return [(counter.name, counter)]
