"""Base tokenizer interface and types."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict


class TokenizerType(Enum):
    """Supported tokenizer types."""

    CHAR_HEURISTIC = "char_heuristic"  # ceil(chars / 4)
    CL100K_BASE = "cl100k_base"        # GPT-4 tokenizer
    O200K_BASE = "o200k_base"          # GPT-4o tokenizer


class Tokenizer(ABC):
    """
    Abstract base class for token counters.

    The packer only needs counts, so unlike a full tokenizer there is no
    encode/decode round trip in the interface.
    """

    def __init__(self, tokenizer_type: TokenizerType):
        self.tokenizer_type = tokenizer_type

    @abstractmethod
    def count_tokens(self, text: str) -> int:
        """
        Count the number of tokens in text.

        Args:
            text: Input text to count tokens for

        Returns:
            Number of tokens
        """

    def get_info(self) -> Dict[str, Any]:
        """Get tokenizer information for debugging/logging."""
        return {
            "type": self.tokenizer_type.value,
            "name": self.__class__.__name__,
        }
