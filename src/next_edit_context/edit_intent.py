# next_edit_context/edit_intent.py
"""
Edit intent parsing and suggestion gating.

Models that report their confidence start the response with
``<|edit_intent|>low<|/edit_intent|>`` (or a bare ``N``/``L``/``M``/``H`` in
the short protocol). Only the first line is inspected; everything after the
tag is handed back as a lazy iterator so the edit lines can keep streaming.

Parse failures never abort a request: they resolve to ``EditIntent.HIGH`` and
carry an ``EditIntentParseError`` so the caller can decide what to do.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field

from .models import AggressivenessLevel, EditIntent, EditIntentParseError
from .tags import PromptTags

logger = logging.getLogger(__name__)

_START, _END = PromptTags.EDIT_INTENT


class EditIntentParseResult(BaseModel):
    """Intent read from the head of a line stream, and the lines after it."""

    model_config = {"arbitrary_types_allowed": True}

    edit_intent: EditIntent
    parse_error: EditIntentParseError | None = None
    remaining_lines: Any = Field(..., description="Iterator over the response lines after the tag")


class EditIntentResponse(BaseModel):
    """Intent read from a complete response string."""

    edit_intent: EditIntent
    parse_error: EditIntentParseError | None = None
    remaining: str


def _fallback(error: EditIntentParseError, lines) -> EditIntentParseResult:
    logger.debug("Edit intent not parsed (%s), defaulting to high", error.value)
    return EditIntentParseResult(edit_intent=EditIntent.HIGH, parse_error=error, remaining_lines=lines)


def parse_edit_intent_from_lines(lines: Iterable[str]) -> EditIntentParseResult:
    """
    Read the ``<|edit_intent|>`` tag from the first line.

    Text after the closing tag on the same line becomes the first remaining
    line unless it is only whitespace. When the tag is missing or malformed
    every line, including the first, is passed through.
    """
    it = iter(lines)
    first = next(it, None)
    if first is None:
        return _fallback(EditIntentParseError.EMPTY_RESPONSE, iter(()))

    passthrough = itertools.chain([first], it)
    start_idx = first.find(_START)
    if start_idx == -1:
        if _END in first:
            return _fallback(EditIntentParseError.END_WITHOUT_START, passthrough)
        return _fallback(EditIntentParseError.NO_TAG_FOUND, passthrough)

    value_start = start_idx + len(_START)
    end_idx = first.find(_END, value_start)
    if end_idx == -1:
        return _fallback(EditIntentParseError.START_WITHOUT_END, passthrough)

    edit_intent = EditIntent.from_string(first[value_start:end_idx])
    rest = first[end_idx + len(_END) :]
    remaining = itertools.chain([rest], it) if rest.strip() else it
    logger.debug("Parsed edit intent %s", edit_intent.value)
    return EditIntentParseResult(edit_intent=edit_intent, remaining_lines=remaining)


def parse_short_edit_intent_from_lines(lines: Iterable[str]) -> EditIntentParseResult:
    """Read a single ``N``/``L``/``M``/``H`` first line; other first lines pass through."""
    it = iter(lines)
    first = next(it, None)
    if first is None:
        return _fallback(EditIntentParseError.EMPTY_RESPONSE, iter(()))

    edit_intent = EditIntent.from_short_name(first.strip())
    if edit_intent is None:
        return _fallback(EditIntentParseError.NO_TAG_FOUND, itertools.chain([first], it))
    return EditIntentParseResult(edit_intent=edit_intent, remaining_lines=it)


def parse_edit_intent_from_response(response: str) -> EditIntentResponse:
    """
    Find the intent tag anywhere in a complete response.

    The value is trimmed and lowercased. One newline directly after the
    closing tag is dropped from ``remaining``; on any parse error
    ``remaining`` is the whole response.
    """
    if not response:
        return EditIntentResponse(
            edit_intent=EditIntent.HIGH, parse_error=EditIntentParseError.EMPTY_RESPONSE, remaining=response
        )

    start_idx = response.find(_START)
    if start_idx == -1:
        error = EditIntentParseError.END_WITHOUT_START if _END in response else EditIntentParseError.NO_TAG_FOUND
        return EditIntentResponse(edit_intent=EditIntent.HIGH, parse_error=error, remaining=response)

    value_start = start_idx + len(_START)
    end_idx = response.find(_END, value_start)
    if end_idx == -1:
        return EditIntentResponse(
            edit_intent=EditIntent.HIGH,
            parse_error=EditIntentParseError.START_WITHOUT_END,
            remaining=response,
        )

    remaining = response[end_idx + len(_END) :]
    if remaining.startswith("\n"):
        remaining = remaining[1:]
    return EditIntentResponse(
        edit_intent=EditIntent.from_string(response[value_start:end_idx]),
        remaining=remaining,
    )


def should_show_edit(edit_intent: EditIntent, aggressiveness: AggressivenessLevel) -> bool:
    """
    Gate a suggestion on the model's intent and the user's aggressiveness.

    ``no_edit`` is never shown and ``low`` always is. ``medium`` is shown at
    low and medium aggressiveness, ``high`` only at low aggressiveness.
    """
    if edit_intent == EditIntent.NO_EDIT:
        return False
    if edit_intent == EditIntent.LOW:
        return True
    if edit_intent == EditIntent.MEDIUM:
        return aggressiveness in (AggressivenessLevel.LOW, AggressivenessLevel.MEDIUM)
    if edit_intent == EditIntent.HIGH:
        return aggressiveness == AggressivenessLevel.LOW
    raise ValueError(f"Unknown edit intent: {edit_intent}")
