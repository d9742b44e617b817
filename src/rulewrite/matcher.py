"""Backtracking matcher for a single Rule.

The matcher walks the rule's words with one forward cursor over the
input. Backtracking is limited to three forms:

1. A GENERIC capture that is not the rule's last consuming word grows
   token by token until the word after it (its continuation) matches
   right behind it.
2. Inside an active repetition, a word that fails first tries the word
   after the repeating run (skip forward), then the first word of the
   run it belongs to (back up). This is how ``*v *","`` consumes
   "zero or more items, bounded by the closer that follows".
3. Optional words and one-of lists are skipped when they fail.

Everything else that fails ends the attempt with a positioned
CompilationError. The worst case is exponential in the nesting of
captures and repeats; rules are expected to be short.

Thread Safety:
    A Matcher only reads its rule. All per-attempt state is local.

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rulewrite.charsets import WHITESPACE
from rulewrite.diagnostics import CompilationError, Severity
from rulewrite.lexer import Span, scan_token, skip_whitespace
from rulewrite.rules import next_word_index
from rulewrite.words import Repetition, WordKind

if TYPE_CHECKING:
    from rulewrite.buffer import TextBuffer
    from rulewrite.rules import Rule

# Score given to a full match whose template is preceded by an explicit
# closing literal. It beats any plain full match.
BOOSTED_SCORE = 2.0


@dataclass(frozen=True, slots=True)
class WordMatch:
    """One matched word: its index in the rule and the bytes it covered."""

    index: int
    span: Span


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Outcome of matching one rule at one position.

    Attributes:
        rule: The rule that was tried
        matches: Word matches in order, also filled for failed attempts
            up to the point of failure
        error: Why the attempt failed, None on success

    """

    rule: Rule
    matches: tuple[WordMatch, ...]
    error: CompilationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def score(self) -> float:
        """How far the rule got: (last matched index + 1) / word count."""
        if not self.matches:
            return 0.0
        words = self.rule.words
        score = (self.matches[-1].index + 1) / len(words)
        if self.ok and score == 1.0 and len(words) > 1 and words[-2].kind is WordKind.DIRECT:
            return BOOSTED_SCORE
        return score

    @property
    def consumed_end(self) -> int:
        """Offset just past the last input-reading word match."""
        words = self.rule.words
        for word_match in reversed(self.matches):
            if words[word_match.index].consuming:
                return word_match.span.end
        return 0

    @property
    def start(self) -> int:
        """Offset where the first word matched."""
        return self.matches[0].span.start if self.matches else 0


class Matcher:
    """Matches one Rule against a TextBuffer.

    Usage:
            >>> from rulewrite.buffer import TextBuffer
            >>> rule = Rule.from_notation("   f", "   (", " *$v", " * ,", "   )", "  +$($v,)")
            >>> buf = TextBuffer("f(1,2,3)")
            >>> result = Matcher(rule).match(buf)
            >>> rule.captures(result, buf)
            {'v': ['1', '2', '3']}

    """

    __slots__ = ("_rule", "_words", "_literals", "_last_consuming", "_continuations", "_overrides")

    def __init__(self, rule: Rule) -> None:
        self._rule = rule
        words = rule.words
        self._words = words
        self._literals = tuple(
            w.text.encode("utf-8") if w.kind is WordKind.DIRECT else b"" for w in words
        )
        consuming = [i for i, w in enumerate(words) if w.consuming]
        self._last_consuming = consuming[-1] if consuming else -1
        self._continuations = tuple(self._find_continuations(i) for i in range(len(words)))
        self._overrides = tuple(self._find_overrides(i) for i in range(len(words)))

    # =========================================================================
    # Precomputation
    # =========================================================================

    def _find_continuations(self, index: int) -> tuple[int, ...]:
        """Word indices that may legitimately follow word ``index``.

        The next word always qualifies. Optional successors may be absent,
        so the word after them qualifies too, and a REPEAT_MANY word may
        also be followed by whatever comes after the repeating run.
        """
        words = self._words
        found: list[int] = []

        def chain(candidate: int | None) -> None:
            while candidate is not None:
                if candidate not in found:
                    found.append(candidate)
                word = words[candidate]
                following = next_word_index(words, candidate)
                if word.optional:
                    candidate = following
                elif word.one_of and following is not None and words[following].one_of:
                    candidate = following
                else:
                    candidate = None

        first = next_word_index(words, index)
        chain(first)
        if words[index].repeats_many:
            after_run = first
            while after_run is not None and words[after_run].repeats_many:
                after_run = next_word_index(words, after_run)
            chain(after_run)
        return tuple(found)

    def _find_overrides(self, index: int) -> tuple[str, str]:
        message = fix = ""
        j = index - 1
        while j >= 0 and self._words[j].annotation:
            word = self._words[j]
            if word.kind is WordKind.ERROR_MESSAGE_OVERRIDE and not message:
                message = word.text
            elif word.kind is WordKind.ERROR_FIX_OVERRIDE and not fix:
                fix = word.text
            j -= 1
        return message, fix

    # =========================================================================
    # Rule level
    # =========================================================================

    def match(self, buffer: TextBuffer) -> MatchResult:
        """Match the rule at the buffer's cursor without moving it."""
        rule = self._rule
        start = buffer.offset
        if not rule.enabled:
            return MatchResult(
                rule,
                (),
                CompilationError(buffer.position, rule.problem, Severity.SYSTEM_ERROR),
            )
        if skip_whitespace(buffer, start) >= len(buffer):
            return self._fail(buffer, start, -1, [], "Input is empty")

        words = self._words
        count = len(words)
        matches: list[WordMatch] = []
        index = 0
        pos = start
        repeating = False

        while index < count:
            word = words[index]
            if word.annotation:
                index += 1
                continue

            span = self._match_word(buffer, pos, index)
            if span is None:
                if word.repetition is Repetition.REPEAT_SINGLE:
                    if not repeating and not word.optional:
                        return self._fail(buffer, pos, index, matches, "Single repeating word not found")
                    repeating = False
                    index += 1
                    continue

                if repeating:
                    if word.repeats_many:
                        after_run = self._skip_repeat_run(index)
                        if after_run is not None and self._match_word(buffer, pos, after_run) is not None:
                            index = after_run
                            continue
                    run_start = self._repeat_run_start(index)
                    if run_start != index and self._match_word(buffer, pos, run_start) is not None:
                        index = run_start
                        continue
                    return self._fail(
                        buffer,
                        pos,
                        index,
                        matches,
                        "Repeating word not found or no closer was found after repeating words",
                    )

                if word.optional:
                    index += 1
                    continue

                if word.one_of:
                    following = next_word_index(words, index)
                    if following is not None and words[following].one_of:
                        index = following
                        continue
                    return self._fail(
                        buffer, pos, index, matches, "Word should match at least one option in optional list"
                    )

                return self._fail(buffer, pos, index, matches, self._not_found_message(index))

            matches.append(WordMatch(index, span))
            if word.consuming:
                pos = span.end

            if word.one_of:
                index = self._one_of_run_end(index)

            repetition = words[index].repetition
            if repetition is Repetition.ONCE:
                index += 1
                repeating = False
            elif repetition is Repetition.REPEAT_MANY:
                index += 1
                repeating = True
            else:
                repeating = True

        result = MatchResult(rule, tuple(matches))
        if result.consumed_end <= start:
            return self._fail(buffer, start, count - 1, [], "Rule matched no input")
        return result

    def _fail(
        self,
        buffer: TextBuffer,
        pos: int,
        index: int,
        matches: list[WordMatch],
        message: str,
    ) -> MatchResult:
        fix = ""
        if index >= 0:
            override_message, fix = self._overrides[index]
            message = override_message or message
        position = buffer.position_at(skip_whitespace(buffer, pos))
        return MatchResult(
            self._rule,
            tuple(matches),
            CompilationError(position, message, Severity.ERROR, fix),
        )

    def _not_found_message(self, index: int) -> str:
        word = self._words[index]
        if word.kind is WordKind.GENERIC:
            return f'Expected a value for "{word.text}"'
        return f'Word "{word.text}" not found'

    def _skip_repeat_run(self, index: int) -> int | None:
        words = self._words
        current: int | None = index
        while current is not None and words[current].repeats_many:
            current = next_word_index(words, current)
        return current

    def _repeat_run_start(self, index: int) -> int:
        words = self._words
        start = index
        j = index - 1
        while j >= 0:
            if words[j].annotation:
                j -= 1
                continue
            if not words[j].repeats_many:
                break
            start = j
            j -= 1
        return start

    def _one_of_run_end(self, index: int) -> int:
        words = self._words
        end = index
        following = next_word_index(words, end)
        while following is not None and words[following].one_of:
            end = following
            following = next_word_index(words, end)
        return end

    # =========================================================================
    # Word level
    # =========================================================================

    def _match_word(self, buffer: TextBuffer, pos: int, index: int) -> Span | None:
        kind = self._words[index].kind
        if kind is WordKind.DIRECT:
            return self._match_direct(buffer, pos, index)
        if kind is WordKind.GENERIC:
            return self._match_generic(buffer, pos, index)
        if kind is WordKind.EXPAND:
            at = skip_whitespace(buffer, pos)
            return Span(at, at)
        return None

    def _match_direct(self, buffer: TextBuffer, pos: int, index: int) -> Span | None:
        literal = self._literals[index]
        token = scan_token(buffer, pos)
        if token is None or not buffer.matches(literal, token.start):
            return None
        start = token.start
        end = start + len(literal)
        # The literal has to end on a token boundary: "in" must not match "int".
        while token.end < end:
            token = scan_token(buffer, token.end)
            if token is None:
                return None
        if token.end != end:
            return None
        return Span(start, end)

    def _match_generic(self, buffer: TextBuffer, pos: int, index: int) -> Span | None:
        token = scan_token(buffer, pos, balanced=True)
        if token is None:
            return None
        if index == self._last_consuming:
            return token

        continuations = self._continuations[index]
        boundary = token.end
        while True:
            for candidate in continuations:
                following = self._match_word(buffer, boundary, candidate)
                if following is not None:
                    end = following.start
                    while end > token.start and buffer.byte_at(end - 1) in WHITESPACE:
                        end -= 1
                    return Span(token.start, end)
            extension = scan_token(buffer, boundary, balanced=True)
            if extension is None:
                return None
            boundary = extension.end
