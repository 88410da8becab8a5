# next_edit_context/prompt_strategies.py
"""
Prompting strategies.

Each ``PromptingStrategy`` maps to a ``StrategySpec``: the system prompt, the
post-script appended to the user prompt, whether the main prompt is wrapped
in backticks, and the response format the reply is parsed with. ``None``
selects the default (copilotNesXtab) layout.

The fixed-window strategy bypasses the tagged layout entirely and renders
the ``<|file_sep|>`` prompt from ``fixed_window``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from pydantic import BaseModel

from .exceptions import CancelCheck, UnknownPromptingStrategyError
from .fixed_window import construct_fixed_window_prompt
from .models import AggressivenessLevel, PromptingStrategy, ResponseFormat
from .prompt_crafting import PromptPieces, get_user_prompt
from .tags import PromptTags

logger = logging.getLogger(__name__)

PostScript = Callable[[str, AggressivenessLevel], str | None]


# =============================================================================
# System prompts
# =============================================================================

_SECTIONS_HELP = """\
- recently_viewed_code_snippets: code the developer looked at recently, oldest first. It may be unrelated to the change.
- current_file_content: the file being edited, for broader context.
- edit_diff_history: the developer's recent changes, oldest first. Old entries may be unrelated to the change.
- area_around_code_to_edit: the code surrounding the section to edit.
- the cursor position, marked as {cursor}."""

DEFAULT_SYSTEM_PROMPT = f"""\
You help developers by editing the section of code between the {PromptTags.EDIT_WINDOW.start} and \
{PromptTags.EDIT_WINDOW.end} tags.

You are given:

{_SECTIONS_HELP.format(cursor=PromptTags.CURSOR)}

Predict and complete the changes the developer would make next in the {PromptTags.EDIT_WINDOW.start} section. \
They may have stopped in the middle of typing. Keep them on the path they are following.

# Output Format

- Provide only the revised code from within the tags. If nothing needs to change, return the original code \
from within the tags.
- Do not repeat code from outside the tags and do not include the tags themselves.
- Do not include line numbers of the form #| in your response.
- Avoid undoing or reverting the developer's last change unless there are obvious typos or errors."""

UNIFIED_MODEL_SYSTEM_PROMPT = f"""\
You predict the next code edit a developer will make.

You are given:

{_SECTIONS_HELP.format(cursor=PromptTags.CURSOR)}

Answer with <EDIT>, <INSERT> or <NO_CHANGE> as instructed at the end of the user message."""

XTAB275_SYSTEM_PROMPT = f"""\
You predict the next code edit a developer will make. Rewrite the code between the \
{PromptTags.EDIT_WINDOW.start} and {PromptTags.EDIT_WINDOW.end} tags the way the developer would, without the tags \
and without line numbers."""

NES41_MINIV3_SYSTEM_PROMPT = f"""\
You predict the next code edit a developer will make in the {PromptTags.EDIT_WINDOW.start} section. \
Answer with <EDIT> or <NO_CHANGE> as instructed at the end of the user message."""

SIMPLIFIED_SYSTEM_PROMPT = "Predict next code edit based on the context given by the user."


# =============================================================================
# Post-scripts
# =============================================================================

_CONTINUE_WORK = (
    "The developer was working on a section of code within the tags `code_to_edit` in the file located at "
    "`{path}`. Using the given `recently_viewed_code_snippets`, `current_file_content`, `edit_diff_history`, "
    "`area_around_code_to_edit`, and the cursor position marked as `{cursor}`, please continue the developer's "
    "work. Update the `code_to_edit` section by predicting and completing the changes they would have made next."
)

_NO_REVERT = "Avoid undoing or reverting the developer's last change unless there are obvious typos or errors."


def _no_post_script(path: str, aggressiveness: AggressivenessLevel) -> str | None:
    return None


def _default_post_script(path: str, aggressiveness: AggressivenessLevel) -> str:
    return (
        _CONTINUE_WORK.format(path=path, cursor=PromptTags.CURSOR)
        + f" Provide the revised code that was between the `{PromptTags.EDIT_WINDOW.start}` and "
        f"`{PromptTags.EDIT_WINDOW.end}` tags with the following format, but do not include the tags themselves.\n"
        "```\n// Your revised code goes here\n```"
    )


def _unified_model_post_script(path: str, aggressiveness: AggressivenessLevel) -> str:
    return (
        _CONTINUE_WORK.format(path=path, cursor=PromptTags.CURSOR)
        + " Start your response with <EDIT>, <INSERT>, or <NO_CHANGE>. If you are making an edit, start with <EDIT> "
        "and then provide the rewritten code window followed by </EDIT>. If you are inserting new code, start with "
        "<INSERT> and then provide only the new code that will be inserted at the cursor position followed by "
        "</INSERT>. If no changes are necessary, reply only with <NO_CHANGE>. " + _NO_REVERT
    )


def _nes41_miniv3_post_script(path: str, aggressiveness: AggressivenessLevel) -> str:
    return (
        _CONTINUE_WORK.format(path=path, cursor=PromptTags.CURSOR).replace("`code_to_edit`", PromptTags.EDIT_WINDOW.start)
        + " Start your response with <EDIT> or <NO_CHANGE>. If you are making an edit, start with <EDIT> and then "
        "provide the rewritten code window followed by </EDIT>. If no changes are necessary, reply only with "
        "<NO_CHANGE>. " + _NO_REVERT
    )


def _xtab275_post_script(path: str, aggressiveness: AggressivenessLevel) -> str:
    return (
        _CONTINUE_WORK.format(path=path, cursor=PromptTags.CURSOR)
        + f" Provide the revised code that was between the `{PromptTags.EDIT_WINDOW.start}` and "
        f"`{PromptTags.EDIT_WINDOW.end}` tags, but do not include the tags themselves. " + _NO_REVERT
        + " Don't include the line numbers or the form #| in your response. Do not skip any lines. Do not be lazy."
    )


def _aggressiveness_post_script(path: str, aggressiveness: AggressivenessLevel) -> str:
    start, end = PromptTags.AGGRESSIVE
    return f"{start}{aggressiveness.value}{end}"


def _patch_based_post_script(path: str, aggressiveness: AggressivenessLevel) -> str:
    return (
        "Output a modified diff style format with the changes you want. Each change patch must start with "
        '`<filename>:<line number>` and then include some non empty "anchor lines" preceded by `-` and the new lines '
        "meant to replace them preceded by `+`. Put your changes in the order that makes the most sense, for example "
        f"edits inside the code_to_edit region and near the user's {PromptTags.CURSOR} should always be prioritized. "
        'Output "<NO_EDIT>" if you don\'t have a good edit candidate.'
    )


# =============================================================================
# Strategy table
# =============================================================================


class StrategySpec(BaseModel):
    """How one prompting strategy renders its prompt and reads the reply."""

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    system_prompt: str
    include_backticks: bool = True
    post_script: PostScript = _default_post_script
    response_format: ResponseFormat = ResponseFormat.CODE_BLOCK


_DEFAULT_SPEC = StrategySpec(system_prompt=DEFAULT_SYSTEM_PROMPT)

STRATEGIES: dict[PromptingStrategy, StrategySpec] = {
    PromptingStrategy.COPILOT_NES_XTAB: _DEFAULT_SPEC,
    PromptingStrategy.SIMPLIFIED_SYSTEM_PROMPT: StrategySpec(system_prompt=SIMPLIFIED_SYSTEM_PROMPT),
    PromptingStrategy.UNIFIED_MODEL: StrategySpec(
        system_prompt=UNIFIED_MODEL_SYSTEM_PROMPT,
        post_script=_unified_model_post_script,
        response_format=ResponseFormat.UNIFIED_WITH_XML,
    ),
    PromptingStrategy.CODEXV21_NES_UNIFIED: StrategySpec(
        system_prompt=SIMPLIFIED_SYSTEM_PROMPT,
        include_backticks=False,
        post_script=_no_post_script,
        response_format=ResponseFormat.UNIFIED_WITH_XML,
    ),
    PromptingStrategy.NES41_MINIV3: StrategySpec(
        system_prompt=NES41_MINIV3_SYSTEM_PROMPT,
        include_backticks=False,
        post_script=_nes41_miniv3_post_script,
        response_format=ResponseFormat.UNIFIED_WITH_XML,
    ),
    PromptingStrategy.XTAB275: StrategySpec(
        system_prompt=XTAB275_SYSTEM_PROMPT,
        post_script=_xtab275_post_script,
        response_format=ResponseFormat.EDIT_WINDOW_ONLY,
    ),
    PromptingStrategy.XTAB275_EDIT_INTENT: StrategySpec(
        system_prompt=XTAB275_SYSTEM_PROMPT,
        post_script=_xtab275_post_script,
        response_format=ResponseFormat.EDIT_WINDOW_WITH_EDIT_INTENT,
    ),
    PromptingStrategy.XTAB275_EDIT_INTENT_SHORT: StrategySpec(
        system_prompt=XTAB275_SYSTEM_PROMPT,
        post_script=_xtab275_post_script,
        response_format=ResponseFormat.EDIT_WINDOW_WITH_EDIT_INTENT_SHORT,
    ),
    PromptingStrategy.XTAB_AGGRESSIVENESS: StrategySpec(
        system_prompt=XTAB275_SYSTEM_PROMPT,
        post_script=_aggressiveness_post_script,
        response_format=ResponseFormat.EDIT_WINDOW_ONLY,
    ),
    PromptingStrategy.PATCH_BASED: StrategySpec(
        system_prompt=XTAB275_SYSTEM_PROMPT,
        post_script=_patch_based_post_script,
        response_format=ResponseFormat.CUSTOM_DIFF_PATCH,
    ),
    PromptingStrategy.FIXED_WINDOW: StrategySpec(
        system_prompt=SIMPLIFIED_SYSTEM_PROMPT,
        include_backticks=False,
        post_script=_no_post_script,
        response_format=ResponseFormat.FIXED_WINDOW,
    ),
}


def get_strategy_spec(strategy: PromptingStrategy | str | None) -> StrategySpec:
    """Spec for ``strategy``; ``None`` is the default layout."""
    if strategy is None:
        return _DEFAULT_SPEC
    try:
        return STRATEGIES[PromptingStrategy(strategy)]
    except (ValueError, KeyError):
        raise UnknownPromptingStrategyError(strategy) from None


def pick_system_prompt(strategy: PromptingStrategy | str | None) -> str:
    return get_strategy_spec(strategy).system_prompt


def response_format_for(strategy: PromptingStrategy | str | None) -> ResponseFormat:
    return get_strategy_spec(strategy).response_format


# =============================================================================
# Rendering
# =============================================================================


class RenderedPrompt(BaseModel):
    """System and user messages for one request, and how to read the reply."""

    strategy: PromptingStrategy | None = None
    system_prompt: str
    user_prompt: str
    response_format: ResponseFormat


def render_prompt(pieces: PromptPieces, should_cancel: CancelCheck | None = None) -> RenderedPrompt | None:
    """
    Render ``pieces`` with their configured strategy.

    Returns None only for the fixed-window strategy when the document has no
    baseline text to show as ``original``.
    """
    strategy = pieces.options.prompting_strategy
    spec = get_strategy_spec(strategy)

    if strategy == PromptingStrategy.FIXED_WINDOW:
        user_prompt = construct_fixed_window_prompt(
            pieces.active_doc,
            pieces.history,
            pieces.current_document,
            pieces.cost,
            pieces.options,
        )
        if user_prompt is None:
            return None
    else:
        user_prompt = get_user_prompt(pieces, should_cancel)

    logger.debug(
        "Rendered %s prompt: %d chars, response format %s",
        strategy.value if strategy else "default",
        len(user_prompt),
        spec.response_format.value,
    )
    return RenderedPrompt(
        strategy=strategy,
        system_prompt=spec.system_prompt,
        user_prompt=user_prompt,
        response_format=spec.response_format,
    )
