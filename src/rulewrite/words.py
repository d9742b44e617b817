"""Grammar atoms.

A Word is one element of a Rule: what kind of thing it matches, whether
it may be absent, and whether it may repeat. The three axes are
independent enumerations; the payload text means a literal (DIRECT), a
capture name (GENERIC), a template (EXPAND) or replacement diagnostic
text (the two override kinds).

Words are immutable. A combination that makes no sense does not raise;
it produces a disabled Word (``enabled`` is False and ``problem`` says
why), and any Rule containing it is disabled in turn.

Compact notation:
    Rules can also be written as strings whose first three characters
    encode the modifiers, followed by the payload::

        position 0  optionality   " " mandatory  "?" optional  "^" one-of list
        position 1  repetition    " " once       "*" many      "#" single
        position 2  kind          " " direct     "$" generic   "+" expand
                                  "!" error message override
                                  "?" error fix override

    So ``"   ("`` is a mandatory literal "(", ``" *$v"`` a repeating
    capture named v, and ``"  +$($v,)"`` a template.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from rulewrite.charsets import is_identifier


class WordKind(Enum):
    """What a word matches."""

    DIRECT = " "
    GENERIC = "$"
    EXPAND = "+"
    ERROR_MESSAGE_OVERRIDE = "!"
    ERROR_FIX_OVERRIDE = "?"


class Optionality(Enum):
    """Whether a word may be absent."""

    MANDATORY = " "
    OPTIONAL = "?"
    # A run of these is a list of alternatives: at least one must match.
    OPTIONAL_LIST_ONE_OF = "^"


class Repetition(Enum):
    """How often a word may match in a row."""

    ONCE = " "
    # Zero or more, bounded by whatever follows the repeating run.
    REPEAT_MANY = "*"
    # One or more of the same word.
    REPEAT_SINGLE = "#"


CONSUMING_KINDS = frozenset({WordKind.DIRECT, WordKind.GENERIC})
ANNOTATION_KINDS = frozenset({WordKind.ERROR_MESSAGE_OVERRIDE, WordKind.ERROR_FIX_OVERRIDE})

_OPTIONALITY_CODES = {o.value: o for o in Optionality}
_REPETITION_CODES = {r.value: r for r in Repetition}
_KIND_CODES = {k.value: k for k in WordKind}


def _word_problem(kind: WordKind, text: str, optionality: Optionality, repetition: Repetition) -> str:
    if kind is WordKind.EXPAND:
        if optionality is not Optionality.MANDATORY or repetition is not Repetition.ONCE:
            return "template word must be mandatory and not repeating"
    elif kind in ANNOTATION_KINDS:
        if optionality is not Optionality.MANDATORY or repetition is not Repetition.ONCE:
            return "error override word must be mandatory and not repeating"
    elif kind is WordKind.DIRECT:
        if not text:
            return "literal word has no text"
    elif kind is WordKind.GENERIC:
        if not is_identifier(text):
            return f"capture name {text!r} is not an identifier"
    return ""


@dataclass(frozen=True, slots=True)
class Word:
    """One grammar atom.

    Attributes:
        kind: What the word matches
        text: Literal, capture name, template or override text
        optionality: Whether the word may be absent
        repetition: Whether the word may repeat
        problem: Why the word is disabled, empty when it is valid

    Example:
            >>> Word.generic("v", repetition=Repetition.REPEAT_MANY).notation
            ' *$v'
            >>> Word.from_notation("x  nope").enabled
            False

    """

    kind: WordKind
    text: str = ""
    optionality: Optionality = Optionality.MANDATORY
    repetition: Repetition = Repetition.ONCE
    problem: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if not self.problem:
            problem = _word_problem(self.kind, self.text, self.optionality, self.repetition)
            object.__setattr__(self, "problem", problem)

    # =========================================================================
    # Constructors
    # =========================================================================

    @classmethod
    def direct(
        cls,
        literal: str,
        *,
        optionality: Optionality = Optionality.MANDATORY,
        repetition: Repetition = Repetition.ONCE,
    ) -> Word:
        return cls(WordKind.DIRECT, literal, optionality, repetition)

    @classmethod
    def generic(
        cls,
        name: str,
        *,
        optionality: Optionality = Optionality.MANDATORY,
        repetition: Repetition = Repetition.ONCE,
    ) -> Word:
        return cls(WordKind.GENERIC, name, optionality, repetition)

    @classmethod
    def expand(cls, template: str) -> Word:
        return cls(WordKind.EXPAND, template)

    @classmethod
    def error_message(cls, message: str) -> Word:
        """Replace the message reported when the next consuming word fails."""
        return cls(WordKind.ERROR_MESSAGE_OVERRIDE, message)

    @classmethod
    def error_fix(cls, fix: str) -> Word:
        """Attach a suggested fix to a failure of the next consuming word."""
        return cls(WordKind.ERROR_FIX_OVERRIDE, fix)

    @classmethod
    def from_notation(cls, notation: str) -> Word:
        """Parse the compact three-character-prefix notation.

        Unknown modifier characters give a disabled Word rather than an
        exception.
        """
        if len(notation) < 3:
            return cls(WordKind.DIRECT, notation, problem=f"notation {notation!r} is too short")
        optionality = _OPTIONALITY_CODES.get(notation[0])
        repetition = _REPETITION_CODES.get(notation[1])
        kind = _KIND_CODES.get(notation[2])
        text = notation[3:]
        if optionality is None or repetition is None or kind is None:
            return cls(
                kind or WordKind.DIRECT,
                text,
                optionality or Optionality.MANDATORY,
                repetition or Repetition.ONCE,
                problem=f"invalid modifier prefix {notation[:3]!r}",
            )
        return cls(kind, text, optionality, repetition)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def enabled(self) -> bool:
        return not self.problem

    @property
    def consuming(self) -> bool:
        """DIRECT and GENERIC words read input; the others never do."""
        return self.kind in CONSUMING_KINDS

    @property
    def annotation(self) -> bool:
        return self.kind in ANNOTATION_KINDS

    @property
    def optional(self) -> bool:
        return self.optionality is Optionality.OPTIONAL

    @property
    def one_of(self) -> bool:
        return self.optionality is Optionality.OPTIONAL_LIST_ONE_OF

    @property
    def repeating(self) -> bool:
        return self.repetition is not Repetition.ONCE

    @property
    def repeats_many(self) -> bool:
        return self.repetition is Repetition.REPEAT_MANY

    @property
    def notation(self) -> str:
        """The word in compact notation."""
        return f"{self.optionality.value}{self.repetition.value}{self.kind.value}{self.text}"

    def __str__(self) -> str:
        return self.notation
