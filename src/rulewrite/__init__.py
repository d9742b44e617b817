"""
rulewrite: rule-driven text rewriting

Declare rules as ordered sequences of words. Input that matches a rule is
replaced by the rule's template, with captured fragments substituted in,
and the result is parsed again against the same rules. Typical use is
source-to-source generation: a terse DSL in, boilerplate out.

Quick Start:
    >>> from rulewrite import Engine, Rule
    >>> engine = Engine([
    ...     Rule.from_notation("   f", "   (", " *$v", " * ,", "   )", "  +$($v,)"),
    ... ])
    >>> engine.parse("f(1,2,3)").unwrap()
    '1,2,3,'

Building words explicitly:
    >>> from rulewrite import Repetition, Word
    >>> rule = Rule([
    ...     Word.direct("uniform"),
    ...     Word.generic("type"),
    ...     Word.generic("name"),
    ...     Word.direct(";"),
    ...     Word.expand("layout(binding = $EXPAND_COUNT) uniform $type $name;"),
    ... ])

Errors:
    A parse never raises for bad input. It returns a ParseResult holding
    either the rewritten text or every CompilationError found.
"""

from collections.abc import Iterable

from rulewrite.buffer import TextBuffer
from rulewrite.config import (
    ParseConfig,
    get_parse_config,
    parse_config_context,
    reset_parse_config,
    set_parse_config,
)
from rulewrite.diagnostics import CompilationError, Severity
from rulewrite.engine import Engine, parse
from rulewrite.errors import (
    ExpansionError,
    ExtensionError,
    ParseFailedError,
    RuleDefinitionError,
    RulewriteError,
)
from rulewrite.expansion import ExpansionEngine
from rulewrite.extensions import CounterExtension, Extension, ExtensionRegistry
from rulewrite.lexer import Span, scan_token, tokenize
from rulewrite.location import SourcePosition
from rulewrite.matcher import Matcher, MatchResult, WordMatch
from rulewrite.result import ParseResult
from rulewrite.rules import CaptureMap, Rule
from rulewrite.words import Optionality, Repetition, Word, WordKind

__version__ = "0.1.0"


def rules_from_notation(*rules: Iterable[str]) -> list[Rule]:
    """Build several rules from compact notation in one call.

    Example:
        >>> [r.enabled for r in rules_from_notation(["   a", "  +b"], ["   a"])]
        [True, False]

    """
    return [Rule.from_notation(*notations) for notations in rules]


__all__ = [
    "CaptureMap",
    "CompilationError",
    "CounterExtension",
    "Engine",
    "ExpansionEngine",
    "ExpansionError",
    "Extension",
    "ExtensionError",
    "ExtensionRegistry",
    "MatchResult",
    "Matcher",
    "Optionality",
    "ParseConfig",
    "ParseFailedError",
    "ParseResult",
    "Repetition",
    "Rule",
    "RuleDefinitionError",
    "RulewriteError",
    "Severity",
    "SourcePosition",
    "Span",
    "TextBuffer",
    "Word",
    "WordKind",
    "WordMatch",
    "__version__",
    "get_parse_config",
    "parse",
    "parse_config_context",
    "reset_parse_config",
    "rules_from_notation",
    "scan_token",
    "set_parse_config",
    "tokenize",
]
