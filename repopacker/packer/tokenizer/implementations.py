"""Concrete tokenizer implementations."""

from __future__ import annotations

import math
from typing import Any, Dict

from .base import Tokenizer, TokenizerType


CHARS_PER_TOKEN = 4


class CharHeuristicTokenizer(Tokenizer):
    """
    Character-count approximation: ``ceil(len(text) / 4)``.

    This is an estimate of language-model tokenization cost, not a real
    tokenizer. Empty text counts as zero tokens.
    """

    def __init__(self):
        super().__init__(TokenizerType.CHAR_HEURISTIC)

    def count_tokens(self, text: str) -> int:
        return math.ceil(len(text) / CHARS_PER_TOKEN)

    def get_info(self) -> Dict[str, Any]:
        info = super().get_info()
        info.update({
            "library": "heuristic",
            "chars_per_token": CHARS_PER_TOKEN,
        })
        return info


class TikTokenTokenizer(Tokenizer):
    """Exact counts using the tiktoken library for OpenAI encodings."""

    def __init__(self, tokenizer_type: TokenizerType = TokenizerType.CL100K_BASE):
        if tokenizer_type is TokenizerType.CHAR_HEURISTIC:
            raise ValueError("TikTokenTokenizer needs a tiktoken encoding type")
        super().__init__(tokenizer_type)
        self._encoder = None

    def _load_encoder(self):
        import tiktoken
        self._encoder = tiktoken.get_encoding(self.tokenizer_type.value)

    def count_tokens(self, text: str) -> int:
        if self._encoder is None:
            self._load_encoder()
        return len(self._encoder.encode(text, disallowed_special=()))

    def get_info(self) -> Dict[str, Any]:
        info = super().get_info()
        info.update({
            "library": "tiktoken",
            "vocab_size": getattr(self._encoder, "n_vocab", None) if self._encoder else None,
        })
        return info


def get_tokenizer(name: str = "heuristic") -> Tokenizer:
    """
    Create a tokenizer by name.

    Args:
        name: ``heuristic``, ``cl100k_base`` or ``o200k_base``

    Returns:
        Tokenizer instance

    Raises:
        ValueError: If the name is not supported
    """
    key = name.lower()
    if key in ("heuristic", "approximate", TokenizerType.CHAR_HEURISTIC.value):
        return CharHeuristicTokenizer()
    for tokenizer_type in (TokenizerType.CL100K_BASE, TokenizerType.O200K_BASE):
        if key == tokenizer_type.value:
            return TikTokenTokenizer(tokenizer_type)
    raise ValueError(f"Unknown tokenizer: {name}")
