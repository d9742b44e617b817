"""Rules: ordered Words ending in a template.

A Rule is validated once, when it is built. An invalid rule is not an
exception: it is kept but disabled (``enabled`` is False, ``problem``
explains why) and the engine never tries to match it. Engines created
with ``strict_rules=True`` raise RuleDefinitionError instead.

Validity:
    - at least one word, and no disabled words
    - the last word is the template (EXPAND, mandatory, once) and no
      other word is a template
    - at least one consuming (DIRECT or GENERIC) word
    - capture names are unique
    - a repeating word is never immediately followed by a plain optional
      (optional, non-repeating) word. Error override annotations are
      transparent for this check, and the last word has no successor so
      it always passes.

"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from rulewrite.utils.logger import get_logger
from rulewrite.words import Optionality, Repetition, Word, WordKind

if TYPE_CHECKING:
    from rulewrite.buffer import TextBuffer
    from rulewrite.matcher import MatchResult

logger = get_logger(__name__)

CaptureMap = dict[str, list[str]]
"""Capture name -> captured text, one entry per repetition in match order."""


def next_word_index(words: tuple[Word, ...], index: int) -> int | None:
    """Index of the first word after ``index`` that is not an override annotation."""
    for j in range(index + 1, len(words)):
        if not words[j].annotation:
            return j
    return None


def _validate(words: tuple[Word, ...]) -> str:
    if not words:
        return "rule is empty"

    for word in words:
        if not word.enabled:
            return f"contains malformed word {word.notation!r}: {word.problem}"

    last = words[-1]
    if last.kind is not WordKind.EXPAND:
        return "last word must be a template (EXPAND)"
    if last.repetition is not Repetition.ONCE:
        return "last word cannot be repeating"
    if any(word.kind is WordKind.EXPAND for word in words[:-1]):
        return "only the last word may be a template"
    if not any(word.consuming for word in words):
        return "rule has no word that reads input"

    seen: set[str] = set()
    for index, word in enumerate(words):
        if word.repeating:
            following = next_word_index(words, index)
            if following is not None:
                nxt = words[following]
                if nxt.optionality is Optionality.OPTIONAL and not nxt.repeating:
                    return (
                        "a repeating word (or list of repeating words) cannot be "
                        "followed by an optional word"
                    )
        if word.kind is WordKind.GENERIC:
            if word.text in seen:
                return f"duplicate capture name {word.text!r}"
            seen.add(word.text)
    return ""


class Rule:
    """An ordered sequence of Words with its template.

    Usage:
            >>> rule = Rule.from_notation("   f", "   (", " *$v", " * ,", "   )", "  +$($v,)")
            >>> rule.enabled
            True
            >>> rule.template
            '$($v,)'

    Thread Safety:
        The words never change after construction. The Matcher is built on
        first use and cached; building it twice is harmless. Matching keeps
        all per-attempt state local.

    """

    __slots__ = ("_words", "_name", "_problem", "_matcher")

    def __init__(self, words: Iterable[Word], name: str | None = None) -> None:
        """Build and validate a rule.

        Args:
            words: Words in match order, template last
            name: Optional label used in logs and reprs
        """
        self._words: tuple[Word, ...] = tuple(words)
        self._name = name or self._default_name()
        self._problem = _validate(self._words)
        self._matcher = None
        if self._problem:
            logger.warning("Disabled rule %s: %s", self._name, self._problem)

    @classmethod
    def from_notation(cls, *notations: str, name: str | None = None) -> Rule:
        """Build a rule from compact word notation strings."""
        return cls((Word.from_notation(n) for n in notations), name=name)

    def _default_name(self) -> str:
        shown = [w.text for w in self._words if w.consuming][:3]
        return " ".join(shown) if shown else "<empty>"

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def words(self) -> tuple[Word, ...]:
        return self._words

    @property
    def name(self) -> str:
        return self._name

    @property
    def enabled(self) -> bool:
        return not self._problem

    @property
    def problem(self) -> str:
        """Why the rule is disabled, empty when it is valid."""
        return self._problem

    @property
    def template(self) -> str:
        """The template text. Only meaningful for enabled rules."""
        if self._words and self._words[-1].kind is WordKind.EXPAND:
            return self._words[-1].text
        return ""

    @property
    def capture_names(self) -> tuple[str, ...]:
        return tuple(w.text for w in self._words if w.kind is WordKind.GENERIC)

    def __len__(self) -> int:
        return len(self._words)

    def __repr__(self) -> str:
        state = "" if self.enabled else f", disabled={self._problem!r}"
        return f"Rule({self._name!r}, words={len(self._words)}{state})"

    # =========================================================================
    # Matching
    # =========================================================================

    def match(self, buffer: TextBuffer) -> MatchResult:
        """Match this rule at the buffer's cursor. The cursor is not moved."""
        if self._matcher is None:
            from rulewrite.matcher import Matcher

            self._matcher = Matcher(self)
        return self._matcher.match(buffer)

    def captures(self, result: MatchResult, buffer: TextBuffer) -> CaptureMap:
        """Build the capture map for a successful match.

        Every capture name of the rule is present, with an empty list when
        the capture never matched (e.g. an optional word that was absent).
        """
        captures: CaptureMap = {name: [] for name in self.capture_names}
        for word_match in result.matches:
            word = self._words[word_match.index]
            if word.kind is WordKind.GENERIC:
                start, end = word_match.span
                captures[word.text].append(buffer.substring(start, end))
        return captures
