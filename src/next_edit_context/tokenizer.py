# next_edit_context/tokenizer.py
"""
Cost functions.

All budget math treats the cost function as opaque: ``(text) -> int``.
``estimate_tokens`` is the cheap character-based estimate; the tiktoken-backed
counter gives real token counts for a given model.
"""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Callable

from . import config

logger = logging.getLogger(__name__)

CostFunction = Callable[[str], int]


def estimate_tokens(text: str) -> int:
    """Approximate token count: one token per four characters, rounded up."""
    return math.ceil(len(text) / 4)


@lru_cache(maxsize=8)
def _encoding_for(model: str):
    import tiktoken

    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        logger.debug("No tiktoken encoding registered for %s, using cl100k_base", model)
        return tiktoken.get_encoding("cl100k_base")


def tiktoken_cost_function(model: str | None = None) -> CostFunction:
    """Cost function counting tokens with the tiktoken encoding of ``model``."""
    encoding = _encoding_for(model or config.DEFAULT_TOKEN_MODEL)

    def count(text: str) -> int:
        return len(encoding.encode(text, disallowed_special=()))

    return count
