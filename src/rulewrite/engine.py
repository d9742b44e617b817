"""The rewriting driver.

Engine.parse() walks the input left to right. At each position it tries
every rule, expands the best full match, re-parses the expansion against
the same rules, and appends the result. Text no rule applies to is
copied through unchanged; quoted strings are always copied (without
their quotes) and never matched.

Errors do not stop the walk: the driver skips one token and carries on,
so one pass reports as many independent problems as possible. The result
holds either the complete output or every error, never both.

Architecture:
    Engine owns its rules, an ExtensionRegistry and an ExpansionEngine.
    Matching lives in rulewrite.matcher, expansion in
    rulewrite.expansion; this module only sequences them.

Thread Safety:
    Rules and the registry are unsynchronized mutable state. Serialize
    parses on one Engine; separate Engines are independent.

"""

from __future__ import annotations

from collections.abc import Iterable

from rulewrite.buffer import TextBuffer
from rulewrite.charsets import QUOTE
from rulewrite.config import ParseConfig, get_parse_config, parse_config_context
from rulewrite.diagnostics import CompilationError, Severity
from rulewrite.errors import ExpansionError, RuleDefinitionError
from rulewrite.expansion import ExpansionEngine
from rulewrite.extensions.registry import ExtensionRegistry
from rulewrite.lexer import scan_token, unescape_quoted
from rulewrite.matcher import BOOSTED_SCORE, MatchResult
from rulewrite.result import ParseResult
from rulewrite.rules import Rule
from rulewrite.stringbuilder import StringBuilder
from rulewrite.utils.logger import get_logger
from rulewrite.words import Word

logger = get_logger(__name__)


class Engine:
    """Rule set plus extensions, ready to rewrite text.

    Usage:
            >>> engine = Engine([
            ...     Rule.from_notation("   f", "   (", " *$v", " * ,", "   )", "  +$($v,)"),
            ... ])
            >>> engine.parse("f(1,2,3)").unwrap()
            '1,2,3,'

    """

    __slots__ = ("_rules", "_extensions", "_expander", "_config", "_strict_rules")

    def __init__(
        self,
        rules: Iterable[Rule | Iterable[Word]] = (),
        *,
        config: ParseConfig | None = None,
        extensions: ExtensionRegistry | None = None,
        strict_rules: bool = False,
    ) -> None:
        """Initialize engine.

        Args:
            rules: Rules (or word sequences) in priority order
            config: Parse configuration, defaults to ParseConfig()
            extensions: Registry to use; a fresh one with the built-ins
                is created when omitted
            strict_rules: Raise RuleDefinitionError for invalid rules
                instead of disabling them
        """
        self._config = config or ParseConfig()
        self._extensions = extensions if extensions is not None else ExtensionRegistry()
        self._expander = ExpansionEngine(self._extensions, self)
        self._strict_rules = strict_rules
        self._rules: list[Rule] = []
        for rule in rules:
            self.add_rule(rule)

    # =========================================================================
    # Configuration surface
    # =========================================================================

    def add_rule(self, rule: Rule | Iterable[Word]) -> Rule:
        """Append a rule. Earlier rules win ties.

        Raises:
            RuleDefinitionError: Invalid rule on a strict engine
        """
        if not isinstance(rule, Rule):
            rule = Rule(rule)
        if not rule.enabled and self._strict_rules:
            raise RuleDefinitionError(rule.problem, repr(rule))
        self._rules.append(rule)
        return rule

    def clear_rules(self) -> None:
        self._rules.clear()

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules)

    @property
    def extensions(self) -> ExtensionRegistry:
        return self._extensions

    @property
    def config(self) -> ParseConfig:
        return self._config

    @config.setter
    def config(self, config: ParseConfig) -> None:
        self._config = config

    # =========================================================================
    # Parsing
    # =========================================================================

    def parse(self, source: str | TextBuffer) -> ParseResult:
        """Rewrite source.

        Args:
            source: Input text, or a buffer positioned where parsing starts

        Returns:
            ParseResult with the output text, or with every error found
        """
        buffer = source.fork() if isinstance(source, TextBuffer) else TextBuffer(source)
        with parse_config_context(self._config):
            text, errors = self._parse(buffer, depth=0)
        if errors:
            logger.debug("Parse failed with %d error(s)", len(errors))
            return ParseResult.failure(errors)
        return ParseResult.success(text)

    def _parse(self, buffer: TextBuffer, depth: int) -> tuple[str, list[CompilationError]]:
        config = get_parse_config()
        rules = [rule for rule in self._rules if rule.enabled]
        out = StringBuilder()
        errors: list[CompilationError] = []

        while not buffer.at_end:
            out.append(buffer.skip_whitespace())
            if buffer.at_end:
                break

            if buffer.peek() == QUOTE:
                token = scan_token(buffer, buffer.offset)
                out.append(unescape_quoted(buffer.substring(token.start, token.end)))
                buffer.advance_to(token.end)
                continue

            best, partial = self._select(rules, buffer)
            if best is not None:
                self._apply(best, buffer, depth, out, errors)
                buffer.advance_to(best.consumed_end)
            else:
                token = scan_token(buffer, buffer.offset)
                word = buffer.substring(token.start, token.end)
                if partial is not None and partial.error is not None:
                    errors.append(partial.error)
                elif config.passthrough_unmatched:
                    out.append(word)
                else:
                    errors.append(CompilationError(buffer.position, f"Unknown word: {word}"))
                buffer.advance_to(token.end)

            if errors and config.fail_fast:
                break

        return out.build(), errors

    def _select(
        self,
        rules: list[Rule],
        buffer: TextBuffer,
    ) -> tuple[MatchResult | None, MatchResult | None]:
        """Best full match, or else the failed attempt that got furthest."""
        best: MatchResult | None = None
        best_score = 0.0
        partial: MatchResult | None = None
        partial_score = 0.0

        for rule in rules:
            result = rule.match(buffer)
            score = result.score
            if result.ok:
                if score > best_score:
                    best, best_score = result, score
                if best_score >= BOOSTED_SCORE:
                    break
            elif score > partial_score:
                partial, partial_score = result, score

        if best is not None and best_score >= 1.0:
            return best, None
        return None, partial

    def _apply(
        self,
        result: MatchResult,
        buffer: TextBuffer,
        depth: int,
        out: StringBuilder,
        errors: list[CompilationError],
    ) -> None:
        rule = result.rule
        position = buffer.position
        config = get_parse_config()

        if depth >= config.max_depth:
            errors.append(
                CompilationError(
                    position,
                    f"Maximum expansion depth ({config.max_depth}) exceeded in rule {rule.name!r}",
                    Severity.SYSTEM_ERROR,
                )
            )
            return

        captures = rule.captures(result, buffer)
        try:
            expanded = self._expander.expand(rule.template, captures)
        except ExpansionError as exc:
            errors.append(CompilationError(position, str(exc)))
            return

        logger.debug("Rule %r matched at %s, re-parsing at depth %d", rule.name, position, depth + 1)
        text, nested_errors = self._parse(TextBuffer(expanded), depth + 1)
        if nested_errors:
            errors.extend(error.moved_to(position) for error in nested_errors)
        else:
            out.append(text)


def parse(
    source: str,
    rules: Iterable[Rule | Iterable[Word]] = (),
    *,
    fail_fast: bool = False,
    max_depth: int = 64,
    passthrough_unmatched: bool = True,
) -> ParseResult:
    """Rewrite source with a one-off Engine.

    Example:
        >>> parse('"kept as is" x').text
        'kept as is x'

    """
    config = ParseConfig(
        fail_fast=fail_fast,
        max_depth=max_depth,
        passthrough_unmatched=passthrough_unmatched,
    )
    return Engine(rules, config=config).parse(source)
