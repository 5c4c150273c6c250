"""Token estimation for pack statistics.

The packer reports an *estimated* token count per file and per pack. The
estimate is produced by a swappable :class:`Tokenizer`; the default is the
character heuristic, so the assembler never depends on a real tokenizer.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .base import Tokenizer
from .implementations import CharHeuristicTokenizer


logger = logging.getLogger(__name__)


def estimate_tokens(text: str) -> int:
    """Estimate tokens as ``ceil(len(text) / 4)``."""
    return _HEURISTIC.count_tokens(text)


class TokenEstimator:
    """Per-text token estimation backed by a pluggable tokenizer."""

    def __init__(self, tokenizer: Optional[Tokenizer] = None):
        self.tokenizer = tokenizer or CharHeuristicTokenizer()

    @property
    def method(self) -> str:
        return self.tokenizer.tokenizer_type.value

    def estimate(self, text: str) -> int:
        return self.tokenizer.count_tokens(text)

    def estimate_total(self, texts: Iterable[str]) -> int:
        """Sum of per-text estimates (not the estimate of the concatenation)."""
        total = 0
        for text in texts:
            total += self.estimate(text)
        logger.debug(f"Estimated {total} tokens using {self.method}")
        return total


_HEURISTIC = CharHeuristicTokenizer()
_default_estimator = TokenEstimator(_HEURISTIC)


def get_default_estimator() -> TokenEstimator:
    """Get the default token estimator instance."""
    return _default_estimator
