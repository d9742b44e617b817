"""Error-path tests.

Exception formatting and hierarchy, diagnostic formatting, and
malformed input handled without raising.
"""

import pytest

from rulewrite import Engine, Rule, parse
from rulewrite.diagnostics import CompilationError, Severity
from rulewrite.errors import (
    ExpansionError,
    ExtensionError,
    ParseFailedError,
    RuleDefinitionError,
    RulewriteError,
)
from rulewrite.location import SourcePosition
from rulewrite.result import ParseResult

# =========================================================================
# Exceptions
# =========================================================================


class TestExceptionFormatting:
    """Verify exception messages and hierarchy."""

    def test_rule_definition(self) -> None:
        err = RuleDefinitionError("rule is empty", "Rule('<empty>')")
        assert str(err) == "Invalid rule (rule is empty): Rule('<empty>')"
        assert err.problem == "rule is empty"

    def test_rule_definition_without_repr(self) -> None:
        assert str(RuleDefinitionError("bad")) == "Invalid rule (bad)"

    def test_extension_error(self) -> None:
        err = ExtensionError("EXPAND_COUNT", "exploded")
        assert str(err) == "Extension 'EXPAND_COUNT': exploded"
        assert err.extension_name == "EXPAND_COUNT"
        assert isinstance(err, ExpansionError)

    def test_parse_failed_summarizes(self) -> None:
        errors = (
            CompilationError(SourcePosition(0, 1, 1), "first"),
            CompilationError(SourcePosition(4, 2, 1), "second"),
        )
        err = ParseFailedError(errors)
        assert str(err) == "1:1: error: first (+1 more)"
        assert err.errors == errors

    @pytest.mark.parametrize(
        "exc_type",
        [RuleDefinitionError, ExpansionError, ExtensionError, ParseFailedError],
    )
    def test_hierarchy(self, exc_type: type[Exception]) -> None:
        assert issubclass(exc_type, RulewriteError)


# =========================================================================
# Diagnostics
# =========================================================================


class TestDiagnostics:
    """CompilationError formatting."""

    def test_str(self) -> None:
        err = CompilationError(SourcePosition(10, 3, 7), 'Word ")" not found')
        assert str(err) == '3:7: error: Word ")" not found'

    def test_str_with_fix_and_severity(self) -> None:
        err = CompilationError(SourcePosition(), "too deep", Severity.SYSTEM_ERROR, "simplify")
        assert str(err) == "1:1: system error: too deep (fix: simplify)"

    def test_moved_to_keeps_message(self) -> None:
        err = CompilationError(SourcePosition(2, 1, 3), "oops", fix="f")
        moved = err.moved_to(SourcePosition(20, 4, 1))
        assert (moved.line, moved.column, moved.message, moved.fix) == (4, 1, "oops", "f")

    def test_position_start(self) -> None:
        assert SourcePosition.start() == SourcePosition(0, 1, 1)
        assert str(SourcePosition(5, 2, 4)) == "2:4"


class TestParseResult:
    """Exactly one of text or errors is meaningful."""

    def test_failure_requires_errors(self) -> None:
        with pytest.raises(ValueError):
            ParseResult.failure([])

    def test_success_is_truthy(self) -> None:
        result = ParseResult.success("out")
        assert result
        assert result.ok
        assert result.unwrap() == "out"


# =========================================================================
# Malformed input
# =========================================================================


class TestMalformedInput:
    """Bad input produces results, never exceptions."""

    @pytest.mark.parametrize(
        "source",
        ["", "   ", '"unterminated', "(((", ")))", "\\", "$($", "\x00\x01"],
    )
    def test_no_rules(self, source: str) -> None:
        assert parse(source).ok

    def test_unterminated_quote_copied(self) -> None:
        assert parse('a "b c').unwrap() == "a b c"

    def test_template_error_does_not_raise(self) -> None:
        engine = Engine([Rule.from_notation("   go", "  +$(")])
        result = engine.parse("go")
        assert "Unterminated group" in result.errors[0].message
