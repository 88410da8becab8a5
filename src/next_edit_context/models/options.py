# next_edit_context/models/options.py
"""
Prompt, scoring and debounce configuration.

Every knob is a plain value. ``DEFAULT_OPTIONS`` mirrors the production
prompt defaults; the page size and debounce defaults can be overridden from
the environment (see ``next_edit_context.config``).
"""

from __future__ import annotations

import json
import logging

from pydantic import BaseModel, Field, ValidationError
from pydantic.alias_generators import to_camel

from .. import config
from .enums import AggressivenessLevel, IncludeLineNumbersOption, PromptingStrategy, TraitPosition

logger = logging.getLogger(__name__)

# Options accept camelCase keys when read from JSON settings
_CAMEL = {"populate_by_name": True, "alias_generator": to_camel, "frozen": True}


# =============================================================================
# Prompt sections
# =============================================================================


class CurrentFileOptions(BaseModel):
    """Clipping of the active document around the edit window."""

    model_config = _CAMEL

    max_tokens: int = Field(default=2000, description="Budget for the current file section")
    include_tags: bool = Field(default=True, description="Repeat the tagged edit area inside the current file")
    prioritize_above_cursor: bool = Field(default=False, description="Spend the budget above the cursor first")
    include_cursor_tag: bool = Field(default=False, description="Mark the cursor in the current file section")


class PagedClippingOptions(BaseModel):
    model_config = _CAMEL

    page_size: int = Field(default_factory=lambda: config.DEFAULT_PAGE_SIZE, description="Lines per page")


class RecentlyViewedDocumentsOptions(BaseModel):
    model_config = _CAMEL

    n_documents: int = Field(default=5, description="Maximum number of other documents")
    max_tokens: int = Field(default=2000, description="Budget shared by all recent documents")
    include_viewed_files: bool = Field(default=False, description="Include documents that were only viewed")
    include_line_numbers: IncludeLineNumbersOption = Field(default=IncludeLineNumbersOption.NONE)


class LanguageContextOptions(BaseModel):
    model_config = _CAMEL

    enabled: bool = Field(default=False)
    max_tokens: int = Field(default=2000, description="Budget for language-service snippets")
    trait_position: TraitPosition = Field(default=TraitPosition.AFTER)


class DiffHistoryOptions(BaseModel):
    model_config = _CAMEL

    n_entries: int = Field(default=25, description="Maximum number of diffs")
    max_tokens: int = Field(default=1000, description="Budget for the edit history section")
    only_for_docs_in_prompt: bool = Field(default=False, description="Only diffs of documents shown in the prompt")
    use_relative_paths: bool = Field(default=False, description="Strip the workspace root from paths")


class PromptOptions(BaseModel):
    """All prompt assembly options."""

    model_config = _CAMEL

    prompting_strategy: PromptingStrategy | None = Field(default=None, description="None selects the default layout")
    current_file: CurrentFileOptions = Field(default_factory=CurrentFileOptions)
    paged_clipping: PagedClippingOptions = Field(default_factory=PagedClippingOptions)
    recently_viewed_documents: RecentlyViewedDocumentsOptions = Field(default_factory=RecentlyViewedDocumentsOptions)
    language_context: LanguageContextOptions = Field(default_factory=LanguageContextOptions)
    diff_history: DiffHistoryOptions = Field(default_factory=DiffHistoryOptions)
    include_post_script: bool = Field(default=True)


DEFAULT_OPTIONS = PromptOptions()


# =============================================================================
# User interaction scoring
# =============================================================================


class UserHappinessScoreConfiguration(BaseModel):
    """
    Weights and thresholds for turning accept/reject/ignore history into an
    aggressiveness level.

    Ignored actions can be capped (consecutive and/or total) so a run of
    ignored suggestions does not drown out explicit feedback.
    """

    model_config = _CAMEL

    accepted_score: float = Field(default=1.0)
    rejected_score: float = Field(default=0.0)
    ignored_score: float = Field(default=0.5)
    high_threshold: float = Field(default=0.7)
    medium_threshold: float = Field(default=0.4)
    include_ignored: bool = Field(default=False, description="Score ignored actions instead of skipping them")
    ignored_limit: int = Field(default=0, ge=0)
    limit_consecutive_ignored: bool = Field(default=False)
    limit_total_ignored: bool = Field(default=False)

    @classmethod
    def from_json_string(cls, config_string: str | None) -> UserHappinessScoreConfiguration:
        """Parse a JSON settings string, falling back to defaults when it is missing or invalid."""
        if config_string is None:
            return DEFAULT_USER_HAPPINESS_SCORE_CONFIGURATION
        try:
            return cls.model_validate(json.loads(config_string))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Invalid user happiness score configuration, using defaults: %s", e)
            return DEFAULT_USER_HAPPINESS_SCORE_CONFIGURATION


DEFAULT_USER_HAPPINESS_SCORE_CONFIGURATION = UserHappinessScoreConfiguration()


def _aggressiveness_from_env() -> AggressivenessLevel | None:
    if config.AGGRESSIVENESS_OVERRIDE is None:
        return None
    try:
        return AggressivenessLevel(config.AGGRESSIVENESS_OVERRIDE.strip().lower())
    except ValueError:
        logger.warning("Ignoring unknown aggressiveness level %r", config.AGGRESSIVENESS_OVERRIDE)
        return None


class DebounceConfig(BaseModel):
    """Debounce and aggressiveness settings owned by the host."""

    model_config = _CAMEL

    base_debounce_ms: int = Field(default_factory=lambda: config.DEFAULT_BASE_DEBOUNCE_MS)
    backoff_debounce_enabled: bool = Field(default=True, description="Adapt the debounce to recent user actions")
    aggressiveness_override: AggressivenessLevel | None = Field(
        default_factory=_aggressiveness_from_env,
        description="Fixed level; None derives it from user interactions",
    )
    happiness: UserHappinessScoreConfiguration = Field(default_factory=UserHappinessScoreConfiguration)


# =============================================================================
# Tool-call arguments
# =============================================================================


def parse_tool_arguments(arguments: str | None) -> dict:
    """Decode tool-call arguments; malformed or non-object JSON yields ``{}``."""
    if not arguments:
        return {}
    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError as e:
        logger.debug("Ignoring malformed tool arguments: %s", e)
        return {}
    if not isinstance(parsed, dict):
        logger.debug("Ignoring non-object tool arguments of type %s", type(parsed).__name__)
        return {}
    return parsed
