"""ContextVar-based parse configuration for rulewrite.

Config is held by each Engine and installed for the duration of a
parse() call. The driver, including its recursive re-parses of expanded
templates, reads it from the ContextVar instead of passing it around.

Thread Safety:
    ContextVars are thread-local by design, so two engines parsing in
    different threads never see each other's settings.

Usage:
    engine = Engine(rules, config=ParseConfig(fail_fast=True))
    result = engine.parse(source)  # Sets config internally via ContextVar

    # Or install a config yourself
    with parse_config_context(ParseConfig(max_depth=8)):
        ...

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ParseConfig:
    """Immutable parse configuration.

    Attributes:
        fail_fast: Stop at the first error instead of skipping a token
            and carrying on
        max_depth: Maximum nesting of expansion re-parses. Exceeding it
            is reported as a SYSTEM_ERROR, which bounds self-referential
            templates
        passthrough_unmatched: Copy tokens that no rule even starts to
            match to the output. When False they are reported as
            "Unknown word" errors

    """

    fail_fast: bool = False
    max_depth: int = 64
    passthrough_unmatched: bool = True

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            msg = f"max_depth must be >= 0, got {self.max_depth}"
            raise ValueError(msg)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "ParseConfig":
        """Create ParseConfig from a dictionary.

        Unknown keys are ignored so configs can come from a larger
        settings file.

        Example:
            >>> ParseConfig.from_dict({"fail_fast": True, "other": 1}).fail_fast
            True

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


_DEFAULT_CONFIG: ParseConfig = ParseConfig()

_parse_config: ContextVar[ParseConfig] = ContextVar(
    "rulewrite_parse_config",
    default=_DEFAULT_CONFIG,
)


def get_parse_config() -> ParseConfig:
    """Get the active parse configuration for this context."""
    return _parse_config.get()


def set_parse_config(config: ParseConfig) -> None:
    """Set the parse configuration for the current context."""
    _parse_config.set(config)


def reset_parse_config() -> None:
    """Reset the current context to the default configuration."""
    _parse_config.set(_DEFAULT_CONFIG)


@contextmanager
def parse_config_context(config: ParseConfig) -> Iterator[None]:
    """Install a configuration for the duration of a block.

    The previous configuration is restored even if the block raises.

    Example:
        >>> with parse_config_context(ParseConfig(fail_fast=True)):
        ...     get_parse_config().fail_fast
        True

    """
    token = _parse_config.set(config)
    try:
        yield
    finally:
        _parse_config.reset(token)


__all__ = [
    "ParseConfig",
    "get_parse_config",
    "set_parse_config",
    "reset_parse_config",
    "parse_config_context",
]
