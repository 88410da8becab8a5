# next_edit_context/__init__.py
"""
Next-edit suggestion context core.

Assembles token-budgeted prompts for next-edit models and reconciles their
responses:
- Budgets: per-section token allowances that never go negative
- Paged clipping: whole-page document clipping around a must-keep range
- History: recent code snippets and unified-diff edit history
- Fixed window: 21-line original/current/updated protocol
- Edit intent: confidence tags read from the head of a response
- Interaction monitor: aggressiveness and debounce from user feedback
"""

from .clipping import (
    PageRange,
    clip_preserving_range,
    create_tagged_current_file_content,
    expand_range_to_page_range,
)
from .diff_history import build_diff_history, generate_doc_diff
from .edit_intent import (
    EditIntentParseResult,
    EditIntentResponse,
    parse_edit_intent_from_lines,
    parse_edit_intent_from_response,
    parse_short_edit_intent_from_lines,
    should_show_edit,
)
from .exceptions import (
    AssemblyCancelledError,
    InvalidOptionsError,
    NextEditError,
    UnknownPromptingStrategyError,
)
from .fixed_window import (
    NoMoreSuggestions,
    Window,
    construct_fixed_window_prompt,
    extract_original_window,
    extract_window,
    map_cursor_to_original,
    reconcile_fixed_window_response,
)
from .interaction_monitor import DelaySession, UserAction, UserInteractionMonitor
from .models import (
    DEFAULT_OPTIONS,
    AggressivenessLevel,
    ClipResult,
    CurrentDocument,
    DebounceConfig,
    DocumentId,
    DocumentSnapshot,
    EditHistoryEntry,
    EditIntent,
    EditIntentParseError,
    LineRange,
    LineReplacement,
    PromptingStrategy,
    PromptOptions,
    ResponseFormat,
    TokenBudget,
    UserHappinessScoreConfiguration,
    ViewHistoryEntry,
)
from .prompt_crafting import (
    PromptPieces,
    TaggedFile,
    construct_tagged_file,
    find_merge_conflict_markers_range,
    get_user_prompt,
)
from .prompt_strategies import RenderedPrompt, StrategySpec, get_strategy_spec, render_prompt
from .recent_files import get_recent_code_snippets
from .text_diff import LineChange, compute_line_diff
from .tokenizer import CostFunction, estimate_tokens, tiktoken_cost_function

__all__ = [
    # Budgets & clipping
    "TokenBudget",
    "ClipResult",
    "PageRange",
    "expand_range_to_page_range",
    "clip_preserving_range",
    "create_tagged_current_file_content",
    # Documents & history
    "DocumentId",
    "DocumentSnapshot",
    "CurrentDocument",
    "LineRange",
    "LineReplacement",
    "EditHistoryEntry",
    "ViewHistoryEntry",
    "get_recent_code_snippets",
    "build_diff_history",
    "generate_doc_diff",
    "LineChange",
    "compute_line_diff",
    # Prompt assembly
    "DEFAULT_OPTIONS",
    "PromptOptions",
    "PromptingStrategy",
    "ResponseFormat",
    "PromptPieces",
    "TaggedFile",
    "construct_tagged_file",
    "get_user_prompt",
    "find_merge_conflict_markers_range",
    "StrategySpec",
    "RenderedPrompt",
    "get_strategy_spec",
    "render_prompt",
    # Fixed window
    "Window",
    "NoMoreSuggestions",
    "extract_window",
    "extract_original_window",
    "map_cursor_to_original",
    "construct_fixed_window_prompt",
    "reconcile_fixed_window_response",
    # Edit intent
    "EditIntent",
    "EditIntentParseError",
    "EditIntentParseResult",
    "EditIntentResponse",
    "parse_edit_intent_from_lines",
    "parse_short_edit_intent_from_lines",
    "parse_edit_intent_from_response",
    "should_show_edit",
    # Interaction monitor
    "AggressivenessLevel",
    "DebounceConfig",
    "UserHappinessScoreConfiguration",
    "UserAction",
    "UserInteractionMonitor",
    "DelaySession",
    # Tokens
    "CostFunction",
    "estimate_tokens",
    "tiktoken_cost_function",
    # Errors
    "NextEditError",
    "InvalidOptionsError",
    "UnknownPromptingStrategyError",
    "AssemblyCancelledError",
]
