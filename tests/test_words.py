"""Tests for Word construction and compact notation."""

import pytest

from rulewrite.words import Optionality, Repetition, Word, WordKind


class TestConstruction:
    """Words are plain records of three enumerations plus text."""

    def test_defaults(self) -> None:
        word = Word.direct("(")
        assert word.kind is WordKind.DIRECT
        assert word.optionality is Optionality.MANDATORY
        assert word.repetition is Repetition.ONCE
        assert word.enabled
        assert word.consuming

    def test_immutable(self) -> None:
        word = Word.generic("v")
        with pytest.raises(AttributeError):
            word.text = "w"  # type: ignore[misc]

    def test_equality_ignores_problem_text(self) -> None:
        assert Word.generic("v") == Word(WordKind.GENERIC, "v")

    def test_annotations_do_not_consume(self) -> None:
        assert Word.error_message("oops").annotation
        assert not Word.error_fix("try this").consuming
        assert not Word.expand("x").consuming


class TestDisabledWords:
    """Invalid combinations collapse to a disabled word instead of raising."""

    @pytest.mark.parametrize(
        "word",
        [
            Word(WordKind.EXPAND, "x", Optionality.OPTIONAL),
            Word(WordKind.EXPAND, "x", repetition=Repetition.REPEAT_MANY),
            Word(WordKind.ERROR_MESSAGE_OVERRIDE, "m", repetition=Repetition.REPEAT_SINGLE),
            Word.direct(""),
            Word.generic("1abc"),
            Word.generic("two words"),
            Word.generic(""),
        ],
    )
    def test_disabled(self, word: Word) -> None:
        assert not word.enabled
        assert word.problem

    def test_empty_template_is_allowed(self) -> None:
        assert Word.expand("").enabled


class TestNotation:
    """The three-character prefix notation."""

    @pytest.mark.parametrize(
        ("notation", "kind", "optionality", "repetition", "text"),
        [
            ("   (", WordKind.DIRECT, Optionality.MANDATORY, Repetition.ONCE, "("),
            (" *$v", WordKind.GENERIC, Optionality.MANDATORY, Repetition.REPEAT_MANY, "v"),
            ("?# ,", WordKind.DIRECT, Optionality.OPTIONAL, Repetition.REPEAT_SINGLE, ","),
            ("^  int", WordKind.DIRECT, Optionality.OPTIONAL_LIST_ONE_OF, Repetition.ONCE, "int"),
            ("  +$($v,)", WordKind.EXPAND, Optionality.MANDATORY, Repetition.ONCE, "$($v,)"),
            ("  !bad call", WordKind.ERROR_MESSAGE_OVERRIDE, Optionality.MANDATORY, Repetition.ONCE, "bad call"),
            ("  ?add (", WordKind.ERROR_FIX_OVERRIDE, Optionality.MANDATORY, Repetition.ONCE, "add ("),
        ],
    )
    def test_parse(
        self,
        notation: str,
        kind: WordKind,
        optionality: Optionality,
        repetition: Repetition,
        text: str,
    ) -> None:
        word = Word.from_notation(notation)
        assert (word.kind, word.optionality, word.repetition, word.text) == (
            kind,
            optionality,
            repetition,
            text,
        )
        assert word.notation == notation

    def test_unknown_prefix_is_disabled(self) -> None:
        word = Word.from_notation("x  a")
        assert not word.enabled
        assert "prefix" in word.problem

    def test_too_short_is_disabled(self) -> None:
        assert not Word.from_notation("  ").enabled

    def test_str_is_notation(self) -> None:
        assert str(Word.generic("v", repetition=Repetition.REPEAT_MANY)) == " *$v"
