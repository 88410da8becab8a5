# next_edit_context/models/enums.py
"""Enums and constants for next-edit prompt assembly."""

from __future__ import annotations

from enum import Enum

# =============================================================================
# Suggestion gating
# =============================================================================


class AggressivenessLevel(str, Enum):
    """How readily low-confidence suggestions are shown to the user."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EditIntent(str, Enum):
    """
    The model's self-reported confidence for a proposed edit.

    Sent by the model as ``<|edit_intent|>value<|/edit_intent|>`` or, in the
    short protocol, as a single ``N``/``L``/``M``/``H`` character.
    """

    NO_EDIT = "no_edit"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_string(cls, value: str) -> EditIntent:
        """Parse a tag value. Unknown values resolve to HIGH (most permissive)."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.HIGH

    @classmethod
    def from_short_name(cls, value: str) -> EditIntent | None:
        """Parse a short name. Only uppercase ``N``, ``L``, ``M``, ``H`` are accepted."""
        return _SHORT_NAMES.get(value)


_SHORT_NAMES = {
    "N": EditIntent.NO_EDIT,
    "L": EditIntent.LOW,
    "M": EditIntent.MEDIUM,
    "H": EditIntent.HIGH,
}


class EditIntentParseError(str, Enum):
    """Reasons the intent tag could not be read from a response."""

    EMPTY_RESPONSE = "emptyResponse"
    NO_TAG_FOUND = "noTagFound"
    START_WITHOUT_END = "malformedTag:startWithoutEnd"
    END_WITHOUT_START = "malformedTag:endWithoutStart"


class UserActionKind(str, Enum):
    """What the user did with a shown suggestion."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    IGNORED = "ignored"


# =============================================================================
# Prompt formatting
# =============================================================================


class PromptingStrategy(str, Enum):
    """Model families with their own prompt layout."""

    COPILOT_NES_XTAB = "copilotNesXtab"
    UNIFIED_MODEL = "xtabUnifiedModel"
    CODEXV21_NES_UNIFIED = "codexv21nesUnified"
    NES41_MINIV3 = "nes41miniv3"
    SIMPLIFIED_SYSTEM_PROMPT = "simplifiedSystemPrompt"
    XTAB275 = "xtab275"
    XTAB_AGGRESSIVENESS = "xtabAggressiveness"
    PATCH_BASED = "patchBased"
    XTAB275_EDIT_INTENT = "xtab275EditIntent"
    XTAB275_EDIT_INTENT_SHORT = "xtab275EditIntentShort"
    FIXED_WINDOW = "sweepFixedWindow"


class ResponseFormat(str, Enum):
    """Shape of the model output a strategy expects."""

    CODE_BLOCK = "codeBlock"
    UNIFIED_WITH_XML = "unifiedWithXml"
    EDIT_WINDOW_ONLY = "editWindowOnly"
    CUSTOM_DIFF_PATCH = "customDiffPatch"
    EDIT_WINDOW_WITH_EDIT_INTENT = "editWindowWithEditIntent"
    EDIT_WINDOW_WITH_EDIT_INTENT_SHORT = "editWindowWithEditIntentShort"
    FIXED_WINDOW = "fixedWindow"


class IncludeLineNumbersOption(str, Enum):
    """Line-number prefix style for code shown to the model."""

    NONE = "none"
    WITH_SPACE = "withSpace"  # "12| code"
    WITHOUT_SPACE = "withoutSpace"  # "12|code"


class TraitPosition(str, Enum):
    """Where language-context traits go relative to the main prompt."""

    BEFORE = "before"
    AFTER = "after"


class ContextKind(str, Enum):
    """Kinds of language-service context items."""

    SNIPPET = "snippet"
    TRAIT = "trait"


# =============================================================================
# Budgets
# =============================================================================


class BudgetError(str, Enum):
    """Typed budget failures."""

    OUT_OF_BUDGET = "outOfBudget"


# Window around the cursor for the fixed-window protocol: 10 + 1 + 10 lines
FIXED_WINDOW_LINES_ABOVE = 10
FIXED_WINDOW_LINES_BELOW = 10
