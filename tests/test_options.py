# tests/test_options.py
"""
Tests for prompt, scoring and debounce configuration.

Covers:
- PromptOptions defaults and camelCase settings keys
- Environment-backed defaults (page size, base debounce, aggressiveness)
- Malformed integer environment values fall back to defaults with a warning
- UserHappinessScoreConfiguration.from_json_string fallbacks
- Tool-call argument decoding
"""

import logging

import pytest
from pydantic import ValidationError

from next_edit_context import config
from next_edit_context.models import (
    DEFAULT_OPTIONS,
    DEFAULT_USER_HAPPINESS_SCORE_CONFIGURATION,
    AggressivenessLevel,
    DebounceConfig,
    IncludeLineNumbersOption,
    PagedClippingOptions,
    PromptingStrategy,
    PromptOptions,
    UserHappinessScoreConfiguration,
    parse_tool_arguments,
)


class TestPromptOptions:
    def test_defaults(self):
        assert DEFAULT_OPTIONS.prompting_strategy is None
        assert DEFAULT_OPTIONS.current_file.max_tokens == 2000
        assert DEFAULT_OPTIONS.recently_viewed_documents.n_documents == 5
        assert DEFAULT_OPTIONS.diff_history.n_entries == 25
        assert DEFAULT_OPTIONS.include_post_script is True

    def test_camel_case_keys(self):
        options = PromptOptions.model_validate(
            {
                "promptingStrategy": "xtab275",
                "currentFile": {"maxTokens": 500, "includeCursorTag": True},
                "recentlyViewedDocuments": {"includeLineNumbers": "withSpace"},
                "diffHistory": {"onlyForDocsInPrompt": True},
            }
        )
        assert options.prompting_strategy == PromptingStrategy.XTAB275
        assert options.current_file.max_tokens == 500
        assert options.current_file.include_cursor_tag is True
        assert options.recently_viewed_documents.include_line_numbers == IncludeLineNumbersOption.WITH_SPACE
        assert options.diff_history.only_for_docs_in_prompt is True

    def test_snake_case_names_also_accepted(self):
        options = PromptOptions(include_post_script=False)
        assert options.include_post_script is False

    def test_unknown_strategy_rejected(self):
        with pytest.raises(ValidationError):
            PromptOptions.model_validate({"promptingStrategy": "doesNotExist"})

    def test_options_are_frozen(self):
        with pytest.raises(ValidationError):
            DEFAULT_OPTIONS.include_post_script = False


class TestEnvironmentDefaults:
    def test_page_size(self, monkeypatch):
        monkeypatch.setattr(config, "DEFAULT_PAGE_SIZE", 7)
        assert PagedClippingOptions().page_size == 7

    def test_base_debounce(self, monkeypatch):
        monkeypatch.setattr(config, "DEFAULT_BASE_DEBOUNCE_MS", 90)
        assert DebounceConfig().base_debounce_ms == 90

    def test_no_override_by_default(self):
        assert DebounceConfig().aggressiveness_override is None

    def test_aggressiveness_override(self, monkeypatch):
        monkeypatch.setattr(config, "AGGRESSIVENESS_OVERRIDE", " High ")
        assert DebounceConfig().aggressiveness_override == AggressivenessLevel.HIGH

    def test_unknown_aggressiveness_ignored(self, monkeypatch):
        monkeypatch.setattr(config, "AGGRESSIVENESS_OVERRIDE", "extreme")
        assert DebounceConfig().aggressiveness_override is None

    def test_explicit_value_beats_environment(self, monkeypatch):
        monkeypatch.setattr(config, "AGGRESSIVENESS_OVERRIDE", "high")
        assert DebounceConfig(aggressiveness_override=AggressivenessLevel.LOW).aggressiveness_override == (
            AggressivenessLevel.LOW
        )


class TestIntFromEnv:
    def test_valid_value(self, monkeypatch):
        monkeypatch.setenv("NEXT_EDIT_PAGE_SIZE", "42")
        assert config.int_from_env("NEXT_EDIT_PAGE_SIZE", 10) == 42

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_unset_or_blank_uses_default(self, monkeypatch, raw):
        if raw is None:
            monkeypatch.delenv("NEXT_EDIT_PAGE_SIZE", raising=False)
        else:
            monkeypatch.setenv("NEXT_EDIT_PAGE_SIZE", raw)
        assert config.int_from_env("NEXT_EDIT_PAGE_SIZE", 10) == 10

    @pytest.mark.parametrize("raw", ["abc", "12ms", "1.5"])
    def test_malformed_value_warns_and_uses_default(self, monkeypatch, caplog, raw):
        monkeypatch.setenv("NEXT_EDIT_BASE_DEBOUNCE_MS", raw)
        with caplog.at_level(logging.WARNING, logger="next_edit_context.config"):
            assert config.int_from_env("NEXT_EDIT_BASE_DEBOUNCE_MS", 200) == 200
        assert "NEXT_EDIT_BASE_DEBOUNCE_MS" in caplog.text


class TestHappinessConfiguration:
    def test_from_json_string(self):
        parsed = UserHappinessScoreConfiguration.from_json_string(
            '{"acceptedScore": 2, "includeIgnored": true, "ignoredLimit": 3, "limitTotalIgnored": true}'
        )
        assert parsed.accepted_score == 2
        assert parsed.include_ignored is True
        assert parsed.ignored_limit == 3
        assert parsed.limit_total_ignored is True
        assert parsed.rejected_score == 0.0

    def test_missing_string_uses_defaults(self):
        assert UserHappinessScoreConfiguration.from_json_string(None) == DEFAULT_USER_HAPPINESS_SCORE_CONFIGURATION

    @pytest.mark.parametrize("raw", ["{not json", '{"ignoredLimit": -1}', '{"highThreshold": "very"}', "[1, 2]"])
    def test_invalid_string_uses_defaults(self, raw):
        assert UserHappinessScoreConfiguration.from_json_string(raw) == DEFAULT_USER_HAPPINESS_SCORE_CONFIGURATION


class TestParseToolArguments:
    def test_object(self):
        assert parse_tool_arguments('{"path": "a.py", "line": 3}') == {"path": "a.py", "line": 3}

    @pytest.mark.parametrize("raw", [None, "", "{broken", "[1, 2]", '"text"'])
    def test_malformed_yields_empty(self, raw):
        assert parse_tool_arguments(raw) == {}
