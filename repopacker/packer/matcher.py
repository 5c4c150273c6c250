"""
Path matching against ordered ignore rules.

Each rule is tested with a fixed chain of checks and the first check that
applies is authoritative for that rule. Every rule is evaluated and a match
overwrites the running result, so the last matching rule wins.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Union

from .patterns import PatternRule, PatternSet


logger = logging.getLogger(__name__)

RuleLike = Union[PatternRule, str]


def _as_rule(rule: RuleLike) -> PatternRule:
    return rule if isinstance(rule, PatternRule) else PatternRule.parse(rule)


def rule_matches(path: str, rule: RuleLike) -> bool:
    """Check whether a single rule matches ``path``, ignoring its negation."""
    pattern = _as_rule(rule).pattern
    if not pattern:
        return False

    if pattern == "*":
        return True
    elif path == pattern:
        return True
    elif pattern in path.split("/"):
        return True
    elif f"/{pattern}/" in path:
        return True
    elif path.startswith(f"{pattern}/"):
        return True
    elif pattern.startswith("*."):
        return path.endswith(pattern[1:])
    elif path.endswith(f"/{pattern}"):
        return True
    return False


def is_ignored(path: str, rules: Iterable[RuleLike]) -> bool:
    """
    Decide whether ``path`` is excluded by ``rules``.

    Args:
        path: Forward-slash separated path relative to the repository root
        rules: Rules in precedence order (PatternRule objects or raw strings)

    Returns:
        True if the last matching rule is a non-negated one
    """
    ignored = False
    for rule in rules:
        rule = _as_rule(rule)
        if rule.is_inert:
            continue
        if rule_matches(path, rule):
            ignored = not rule.negated
    return ignored


class PathMatcher:
    """Binds a :class:`PatternSet` so callers can test many paths against it."""

    def __init__(self, rules: Union[PatternSet, Iterable[RuleLike]]):
        self.rules = rules if isinstance(rules, PatternSet) else PatternSet.from_patterns(rules)

    def is_ignored(self, path: str) -> bool:
        return is_ignored(path, self.rules)

    def filter_paths(self, paths: Iterable[str]) -> List[str]:
        """Return the paths that survive the rules, preserving order."""
        kept = [path for path in paths if not self.is_ignored(path)]
        logger.debug(f"Pattern filter kept {len(kept)} paths")
        return kept

    def deciding_rule(self, path: str) -> Union[PatternRule, None]:
        """The rule that determined the outcome for ``path``, if any matched."""
        decided = None
        for rule in self.rules:
            if not rule.is_inert and rule_matches(path, rule):
                decided = rule
        return decided
