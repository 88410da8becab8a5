# tests/test_edit_intent.py
"""
Tests for edit intent parsing and gating.

Covers:
- Tag parsing from the first streamed line (values, case, trailing content)
- Parse errors (empty, no tag, malformed) pass every line through
- Short N/L/M/H protocol
- Whole-response parsing
- should_show_edit for every intent/aggressiveness pair
"""

import pytest

from next_edit_context.edit_intent import (
    parse_edit_intent_from_lines,
    parse_edit_intent_from_response,
    parse_short_edit_intent_from_lines,
    should_show_edit,
)
from next_edit_context.models import AggressivenessLevel, EditIntent, EditIntentParseError


class TestEditIntentEnum:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("no_edit", EditIntent.NO_EDIT),
            ("LOW", EditIntent.LOW),
            (" medium ", EditIntent.MEDIUM),
            ("high", EditIntent.HIGH),
            ("maybe", EditIntent.HIGH),
        ],
    )
    def test_from_string(self, value, expected):
        assert EditIntent.from_string(value) == expected

    def test_short_names_are_case_sensitive(self):
        assert EditIntent.from_short_name("N") == EditIntent.NO_EDIT
        assert EditIntent.from_short_name("n") is None


class TestParseFromLines:
    def test_tag_on_its_own_line(self):
        result = parse_edit_intent_from_lines(["<|edit_intent|>low<|/edit_intent|>", "a = 1", "b = 2"])
        assert result.edit_intent == EditIntent.LOW
        assert result.parse_error is None
        assert list(result.remaining_lines) == ["a = 1", "b = 2"]

    def test_content_after_tag_is_kept(self):
        result = parse_edit_intent_from_lines(["<|edit_intent|>medium<|/edit_intent|>const x = 1;", "y"])
        assert result.edit_intent == EditIntent.MEDIUM
        assert list(result.remaining_lines) == ["const x = 1;", "y"]

    def test_whitespace_after_tag_is_dropped(self):
        result = parse_edit_intent_from_lines(["<|edit_intent|>high<|/edit_intent|>   ", "y"])
        assert list(result.remaining_lines) == ["y"]

    def test_value_is_case_insensitive(self):
        result = parse_edit_intent_from_lines(["<|edit_intent|> NO_EDIT <|/edit_intent|>"])
        assert result.edit_intent == EditIntent.NO_EDIT
        assert list(result.remaining_lines) == []

    def test_unknown_value_is_high_without_error(self):
        result = parse_edit_intent_from_lines(["<|edit_intent|>sometimes<|/edit_intent|>", "x"])
        assert result.edit_intent == EditIntent.HIGH
        assert result.parse_error is None

    def test_empty_stream(self):
        result = parse_edit_intent_from_lines([])
        assert result.edit_intent == EditIntent.HIGH
        assert result.parse_error == EditIntentParseError.EMPTY_RESPONSE
        assert list(result.remaining_lines) == []

    def test_no_tag_passes_all_lines(self):
        result = parse_edit_intent_from_lines(["a = 1", "b = 2"])
        assert result.edit_intent == EditIntent.HIGH
        assert result.parse_error == EditIntentParseError.NO_TAG_FOUND
        assert list(result.remaining_lines) == ["a = 1", "b = 2"]

    def test_tag_on_second_line_is_not_read(self):
        result = parse_edit_intent_from_lines(["a = 1", "<|edit_intent|>low<|/edit_intent|>"])
        assert result.parse_error == EditIntentParseError.NO_TAG_FOUND

    def test_start_without_end(self):
        lines = ["<|edit_intent|>low", "a = 1"]
        result = parse_edit_intent_from_lines(lines)
        assert result.edit_intent == EditIntent.HIGH
        assert result.parse_error == EditIntentParseError.START_WITHOUT_END
        assert list(result.remaining_lines) == lines

    def test_end_without_start(self):
        lines = ["low<|/edit_intent|>", "a = 1"]
        result = parse_edit_intent_from_lines(lines)
        assert result.parse_error == EditIntentParseError.END_WITHOUT_START
        assert list(result.remaining_lines) == lines

    def test_remaining_lines_are_lazy(self):
        consumed = []

        def stream():
            for line in ["<|edit_intent|>low<|/edit_intent|>", "a", "b"]:
                consumed.append(line)
                yield line

        result = parse_edit_intent_from_lines(stream())
        assert consumed == ["<|edit_intent|>low<|/edit_intent|>"]
        assert next(result.remaining_lines) == "a"
        assert consumed == ["<|edit_intent|>low<|/edit_intent|>", "a"]


class TestParseShort:
    def test_short_name(self):
        result = parse_short_edit_intent_from_lines(["M", "a = 1"])
        assert result.edit_intent == EditIntent.MEDIUM
        assert list(result.remaining_lines) == ["a = 1"]

    def test_short_name_with_whitespace(self):
        assert parse_short_edit_intent_from_lines([" L "]).edit_intent == EditIntent.LOW

    def test_unrecognized_first_line(self):
        result = parse_short_edit_intent_from_lines(["a = 1", "b"])
        assert result.edit_intent == EditIntent.HIGH
        assert result.parse_error == EditIntentParseError.NO_TAG_FOUND
        assert list(result.remaining_lines) == ["a = 1", "b"]

    def test_empty(self):
        assert parse_short_edit_intent_from_lines([]).parse_error == EditIntentParseError.EMPTY_RESPONSE


class TestParseFromResponse:
    def test_strips_one_newline_after_tag(self):
        result = parse_edit_intent_from_response("<|edit_intent|>low<|/edit_intent|>\n\nx = 1")
        assert result.edit_intent == EditIntent.LOW
        assert result.remaining == "\nx = 1"

    def test_no_tag(self):
        result = parse_edit_intent_from_response("x = 1")
        assert result.parse_error == EditIntentParseError.NO_TAG_FOUND
        assert result.remaining == "x = 1"

    def test_malformed(self):
        assert (
            parse_edit_intent_from_response("<|edit_intent|>low").parse_error
            == EditIntentParseError.START_WITHOUT_END
        )
        assert (
            parse_edit_intent_from_response("low<|/edit_intent|>").parse_error
            == EditIntentParseError.END_WITHOUT_START
        )

    def test_empty(self):
        assert parse_edit_intent_from_response("").parse_error == EditIntentParseError.EMPTY_RESPONSE


class TestShouldShowEdit:
    @pytest.mark.parametrize(
        "intent,aggressiveness,expected",
        [
            (EditIntent.NO_EDIT, AggressivenessLevel.LOW, False),
            (EditIntent.NO_EDIT, AggressivenessLevel.MEDIUM, False),
            (EditIntent.NO_EDIT, AggressivenessLevel.HIGH, False),
            (EditIntent.LOW, AggressivenessLevel.LOW, True),
            (EditIntent.LOW, AggressivenessLevel.MEDIUM, True),
            (EditIntent.LOW, AggressivenessLevel.HIGH, True),
            (EditIntent.MEDIUM, AggressivenessLevel.LOW, True),
            (EditIntent.MEDIUM, AggressivenessLevel.MEDIUM, True),
            (EditIntent.MEDIUM, AggressivenessLevel.HIGH, False),
            (EditIntent.HIGH, AggressivenessLevel.LOW, True),
            (EditIntent.HIGH, AggressivenessLevel.MEDIUM, False),
            (EditIntent.HIGH, AggressivenessLevel.HIGH, False),
        ],
    )
    def test_gating_table(self, intent, aggressiveness, expected):
        assert should_show_edit(intent, aggressiveness) is expected
