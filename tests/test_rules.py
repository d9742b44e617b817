"""Tests for rule validation and capture maps."""

import logging

import pytest

from rulewrite.buffer import TextBuffer
from rulewrite.diagnostics import Severity
from rulewrite.rules import Rule
from rulewrite.words import Optionality, Repetition, Word

MANY = Repetition.REPEAT_MANY


def call_rule() -> Rule:
    return Rule.from_notation("   f", "   (", " *$v", " * ,", "   )", "  +$($v,)")


class TestValidRules:
    """Well-formed rules are enabled."""

    def test_call_rule(self) -> None:
        rule = call_rule()
        assert rule.enabled
        assert rule.problem == ""
        assert rule.template == "$($v,)"
        assert rule.capture_names == ("v",)
        assert len(rule) == 6

    def test_repeat_followed_by_optional_repeat(self) -> None:
        rule = Rule.from_notation("   f", "   (", "?*$v", "?* ,", "   )", "  +x")
        assert rule.enabled

    def test_repeat_right_before_template(self) -> None:
        rule = Rule([Word.direct("a", repetition=MANY), Word.expand("x")])
        assert rule.enabled

    def test_annotations_are_transparent_for_adjacency(self) -> None:
        rule = Rule([Word.direct("a", repetition=MANY), Word.error_message("m"), Word.expand("x")])
        assert rule.enabled

    def test_name_defaults_to_literals(self) -> None:
        assert call_rule().name == "f ( v"
        assert Rule([Word.direct("a"), Word.expand("")], name="custom").name == "custom"


class TestInvalidRules:
    """Invalid rules are disabled at construction, never raised."""

    @pytest.mark.parametrize(
        ("words", "fragment"),
        [
            ([], "empty"),
            ([Word.direct("a")], "last word"),
            ([Word.direct("a"), Word.generic("x")], "last word"),
            ([Word.expand("x")], "reads input"),
            ([Word.direct("a"), Word.expand("x"), Word.expand("y")], "only the last"),
            ([Word.generic("x"), Word.direct(","), Word.generic("x"), Word.expand("")], "duplicate"),
            ([Word.direct(""), Word.expand("")], "malformed"),
            (
                [Word.generic("v", repetition=MANY), Word.direct(",", optionality=Optionality.OPTIONAL), Word.expand("")],
                "followed by an optional",
            ),
            (
                [
                    Word.direct("a", repetition=Repetition.REPEAT_SINGLE),
                    Word.error_fix("f"),
                    Word.direct("b", optionality=Optionality.OPTIONAL),
                    Word.expand(""),
                ],
                "followed by an optional",
            ),
        ],
    )
    def test_disabled(self, words: list[Word], fragment: str) -> None:
        rule = Rule(words)
        assert not rule.enabled
        assert fragment in rule.problem

    def test_malformed_notation_disables_rule(self) -> None:
        assert not Rule.from_notation("   a", "x  b", "  +c").enabled

    def test_disabled_rule_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="rulewrite.rules"):
            Rule([Word.direct("a")])
        assert "Disabled rule" in caplog.text

    def test_disabled_rule_never_matches(self) -> None:
        rule = Rule([Word.direct("a")])
        result = rule.match(TextBuffer("a"))
        assert not result.ok
        assert result.error.severity is Severity.SYSTEM_ERROR

    def test_repr_mentions_problem(self) -> None:
        assert "disabled" in repr(Rule([]))


class TestCaptures:
    """Capture maps list every capture in match order."""

    def test_repeated_capture(self) -> None:
        rule = call_rule()
        buf = TextBuffer("f(1,2,3)")
        assert rule.captures(rule.match(buf), buf) == {"v": ["1", "2", "3"]}

    def test_absent_optional_capture_is_empty(self) -> None:
        rule = Rule.from_notation("   f", "   (", "?*$v", "?* ,", "   )", "  +x")
        buf = TextBuffer("f()")
        result = rule.match(buf)
        assert result.ok
        assert rule.captures(result, buf) == {"v": []}

    def test_repeated_matches_agree(self) -> None:
        rule = call_rule()
        first = rule.match(TextBuffer("f(1,2)"))
        second = rule.match(TextBuffer("f(1,2)"))
        assert first == second
