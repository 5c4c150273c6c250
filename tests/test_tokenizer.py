"""
Tests for pluggable token estimation.
"""

import sys
from unittest.mock import MagicMock, patch

import pytest

from repopacker.packer.tokenizer import (
    CharHeuristicTokenizer,
    TikTokenTokenizer,
    TokenEstimator,
    TokenizerType,
    get_default_estimator,
    get_tokenizer,
)


class TestGetTokenizer:
    """Test tokenizer factory."""

    def test_heuristic_default(self):
        tokenizer = get_tokenizer()
        assert isinstance(tokenizer, CharHeuristicTokenizer)
        assert tokenizer.get_info()["chars_per_token"] == 4

    @pytest.mark.parametrize("name,tokenizer_type", [
        ("cl100k_base", TokenizerType.CL100K_BASE),
        ("O200K_BASE", TokenizerType.O200K_BASE),
    ])
    def test_tiktoken_encodings(self, name, tokenizer_type):
        tokenizer = get_tokenizer(name)
        assert isinstance(tokenizer, TikTokenTokenizer)
        assert tokenizer.tokenizer_type is tokenizer_type

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown tokenizer"):
            get_tokenizer("sentencepiece")

    def test_tiktoken_rejects_heuristic_type(self):
        with pytest.raises(ValueError):
            TikTokenTokenizer(TokenizerType.CHAR_HEURISTIC)


class TestTikTokenTokenizer:
    """Test tiktoken-backed counting without downloading encodings."""

    def test_encoder_loaded_lazily_once(self):
        fake_tiktoken = MagicMock()
        encoder = fake_tiktoken.get_encoding.return_value
        encoder.encode.return_value = [1, 2, 3]

        with patch.dict(sys.modules, {"tiktoken": fake_tiktoken}):
            tokenizer = TikTokenTokenizer(TokenizerType.O200K_BASE)
            fake_tiktoken.get_encoding.assert_not_called()

            assert tokenizer.count_tokens("hello world") == 3
            assert tokenizer.count_tokens("again") == 3

        fake_tiktoken.get_encoding.assert_called_once_with("o200k_base")
        encoder.encode.assert_called_with("again", disallowed_special=())


class TestTokenEstimator:
    """Test estimator wrapper."""

    def test_total_is_sum_of_parts(self):
        estimator = TokenEstimator()
        assert estimator.estimate_total(["a", "abcd", "abcde"]) == 4
        assert estimator.estimate("abcde" * 2) == 3

    def test_method_name(self):
        assert get_default_estimator().method == "char_heuristic"
