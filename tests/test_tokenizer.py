# tests/test_tokenizer.py
"""Tests for cost functions (no encodings are downloaded)."""

import pytest
import tiktoken

from next_edit_context import config, tokenizer
from next_edit_context.tokenizer import estimate_tokens, tiktoken_cost_function


class FakeEncoding:
    def __init__(self, name: str):
        self.name = name

    def encode(self, text: str, disallowed_special=()):
        return text.split()


@pytest.fixture
def fake_tiktoken(monkeypatch):
    """Stub tiktoken lookups and record the requested names."""
    requested = []

    def encoding_for_model(model):
        requested.append(("model", model))
        if model.startswith("unknown"):
            raise KeyError(model)
        return FakeEncoding(model)

    def get_encoding(name):
        requested.append(("encoding", name))
        return FakeEncoding(name)

    monkeypatch.setattr(tiktoken, "encoding_for_model", encoding_for_model)
    monkeypatch.setattr(tiktoken, "get_encoding", get_encoding)
    tokenizer._encoding_for.cache_clear()
    yield requested
    tokenizer._encoding_for.cache_clear()


class TestEstimateTokens:
    @pytest.mark.parametrize("text,expected", [("", 0), ("a", 1), ("abcd", 1), ("abcde", 2), ("x" * 40, 10)])
    def test_four_chars_per_token(self, text, expected):
        assert estimate_tokens(text) == expected


class TestTiktokenCostFunction:
    def test_counts_with_model_encoding(self, fake_tiktoken):
        cost = tiktoken_cost_function("gpt-4o")
        assert cost("a b c") == 3
        assert fake_tiktoken == [("model", "gpt-4o")]

    def test_unknown_model_falls_back(self, fake_tiktoken):
        cost = tiktoken_cost_function("unknown-model")
        assert cost("one two") == 2
        assert fake_tiktoken == [("model", "unknown-model"), ("encoding", "cl100k_base")]

    def test_default_model_from_config(self, fake_tiktoken, monkeypatch):
        monkeypatch.setattr(config, "DEFAULT_TOKEN_MODEL", "gpt-test")
        tiktoken_cost_function()
        assert fake_tiktoken == [("model", "gpt-test")]

    def test_encoding_is_cached(self, fake_tiktoken):
        tiktoken_cost_function("gpt-4o")
        tiktoken_cost_function("gpt-4o")
        assert fake_tiktoken == [("model", "gpt-4o")]
