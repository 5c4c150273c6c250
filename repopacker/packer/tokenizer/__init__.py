"""Pluggable token estimation for pack statistics."""

from __future__ import annotations

from .base import Tokenizer, TokenizerType
from .implementations import CharHeuristicTokenizer, TikTokenTokenizer, get_tokenizer
from .estimator import TokenEstimator, estimate_tokens, get_default_estimator

__all__ = [
    "Tokenizer",
    "TokenizerType",
    "CharHeuristicTokenizer",
    "TikTokenTokenizer",
    "get_tokenizer",
    "TokenEstimator",
    "estimate_tokens",
    "get_default_estimator",
]
