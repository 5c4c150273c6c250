"""
Ignore pattern parsing with .gitignore/.repomixignore support.

Turns ignore-file text and user free text into an ordered list of rules.
Rule order is precedence: the last rule that matches a path decides, so
sources are concatenated in a fixed order and never re-sorted:

1. Built-in default patterns (if enabled)
2. .gitignore patterns (if enabled)
3. .repomixignore patterns (if enabled)
4. Preset patterns (if selected)
5. User patterns
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from ..constants import DEFAULT_IGNORE_PATTERNS, PRESET_FILTERS


_LINE_SPLIT = re.compile(r"\r?\n")
_GLOB_CHARS = ("*", "?", "[")


class PatternKind(Enum):
    """Descriptive classification of a rule; matching does not depend on it."""
    EXACT_SEGMENT = "exact_segment"
    WILDCARD_EXTENSION = "wildcard_extension"
    ANCHORED = "anchored"
    SUBSTRING = "substring"


@dataclass(frozen=True)
class PatternRule:
    """A single ignore rule as authored, plus its parsed form."""
    raw: str
    pattern: str
    negated: bool
    kind: PatternKind

    @classmethod
    def parse(cls, raw: str) -> "PatternRule":
        """Build a rule from one pattern string (``!`` prefix negates)."""
        negated = raw.startswith("!")
        pattern = raw[1:].strip() if negated else raw.strip()
        return cls(raw=raw, pattern=pattern, negated=negated, kind=classify_pattern(pattern))

    @property
    def is_inert(self) -> bool:
        """Rules with an empty pattern never match anything."""
        return not self.pattern

    def __str__(self) -> str:
        return self.raw


def classify_pattern(pattern: str) -> PatternKind:
    """Classify a clean (non-negated) pattern."""
    if pattern == "*" or pattern.startswith("*."):
        return PatternKind.WILDCARD_EXTENSION
    if "/" in pattern:
        return PatternKind.ANCHORED
    if any(ch in pattern for ch in _GLOB_CHARS):
        return PatternKind.SUBSTRING
    return PatternKind.EXACT_SEGMENT


def _clean_lines(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        # Directory-style patterns are treated like exact names downstream
        if line.endswith("/"):
            line = line[:-1]
        yield line


def parse_ignore_text(text: Optional[str]) -> List[PatternRule]:
    """
    Parse .gitignore-style text into rules.

    Splits on LF or CRLF, trims each line, drops blank lines and ``#``
    comments, and strips one trailing ``/``. Duplicates are kept.
    """
    if not text:
        return []
    return [PatternRule.parse(line) for line in _clean_lines(_LINE_SPLIT.split(text))]


def parse_user_text(text: Optional[str]) -> List[PatternRule]:
    """Same as :func:`parse_ignore_text` but for comma-separated input."""
    if not text:
        return []
    return [PatternRule.parse(item) for item in _clean_lines(text.split(","))]


class PatternSet(Sequence[PatternRule]):
    """
    Immutable, ordered sequence of rules for a single packing run.

    Built by :class:`PatternSetBuilder`; behaves like a read-only tuple.
    """

    def __init__(self, rules: Iterable[PatternRule] = ()):
        self._rules: Tuple[PatternRule, ...] = tuple(rules)

    def __getitem__(self, index):
        return self._rules[index]

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[PatternRule]:
        return iter(self._rules)

    def __eq__(self, other) -> bool:
        if isinstance(other, PatternSet):
            return self._rules == other._rules
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._rules)

    def __repr__(self) -> str:
        return f"PatternSet({[rule.raw for rule in self._rules]!r})"

    @property
    def has_negations(self) -> bool:
        return any(rule.negated and not rule.is_inert for rule in self._rules)

    @property
    def patterns(self) -> List[str]:
        """The rules as authored, in precedence order."""
        return [rule.raw for rule in self._rules]

    @classmethod
    def from_patterns(cls, patterns: Iterable[Union[str, PatternRule]]) -> "PatternSet":
        """Wrap already-split pattern strings (or rules) without reparsing text."""
        return cls(
            item if isinstance(item, PatternRule) else PatternRule.parse(item)
            for item in patterns
        )


class PatternSetBuilder:
    """
    Accumulates rule slices from each enabled source in the fixed order.

    Each ``add_*`` call only records its slice; :meth:`build` concatenates
    them default -> gitignore -> repomixignore -> preset -> user regardless
    of call order.
    """

    _ORDER = ("default", "gitignore", "repomixignore", "preset", "user")

    def __init__(self):
        self._slices = {name: [] for name in self._ORDER}

    def add_defaults(self, patterns: Optional[Iterable[str]] = None) -> "PatternSetBuilder":
        source = DEFAULT_IGNORE_PATTERNS if patterns is None else patterns
        self._slices["default"].extend(_rules_from_lines(source))
        return self

    def add_gitignore(self, text: Optional[str]) -> "PatternSetBuilder":
        self._slices["gitignore"].extend(parse_ignore_text(text))
        return self

    def add_repomixignore(self, text: Optional[str]) -> "PatternSetBuilder":
        self._slices["repomixignore"].extend(parse_ignore_text(text))
        return self

    def add_preset(self, name: str) -> "PatternSetBuilder":
        try:
            patterns = PRESET_FILTERS[name]
        except KeyError:
            raise ValueError(
                f"Unknown preset '{name}'. Available: {', '.join(sorted(PRESET_FILTERS))}"
            ) from None
        self._slices["preset"].extend(_rules_from_lines(patterns))
        return self

    def add_user_text(self, text: Optional[str]) -> "PatternSetBuilder":
        self._slices["user"].extend(parse_user_text(text))
        return self

    def add_user_patterns(self, patterns: Optional[Iterable[str]]) -> "PatternSetBuilder":
        for item in patterns or ():
            self.add_user_text(item)
        return self

    def build(self) -> PatternSet:
        rules: List[PatternRule] = []
        for name in self._ORDER:
            rules.extend(self._slices[name])
        return PatternSet(rules)


def _rules_from_lines(patterns: Iterable[str]) -> List[PatternRule]:
    return [PatternRule.parse(line) for line in _clean_lines(patterns)]
