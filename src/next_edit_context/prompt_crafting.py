# next_edit_context/prompt_crafting.py
"""
User prompt assembly for the tagged (code_to_edit) protocols.

The user prompt is laid out as::

    <|recently_viewed_code_snippets|>
    ...oldest to newest snippets...
    <|/recently_viewed_code_snippets|>

    <|current_file_content|>
    current_file_path: src/app.py
    ...clipped current file with the tagged edit area spliced in...
    <|/current_file_content|>
    [lint errors]
    <|edit_diff_history|>
    ...diff blocks...
    <|/edit_diff_history|>

    <|area_around_code_to_edit|>
    ...
    <|code_to_edit|>
    ...lines the model may rewrite, with <|cursor|>...
    <|/code_to_edit|>
    ...
    <|/area_around_code_to_edit|>

optionally wrapped in backticks, with language-service traits placed before
or after it and a strategy-specific post-script at the end.

Design principles:
- Every section spends its own ``TokenBudget``; sections never borrow
- A current file that cannot fit is reported as ``out_of_budget``, not raised
- No I/O: documents, history and language context are passed in
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import BaseModel, Field

from .clipping import create_tagged_current_file_content
from .diff_history import build_diff_history
from .exceptions import CancelCheck, raise_if_cancelled
from .models import (
    AggressivenessLevel,
    ClipResult,
    CurrentDocument,
    DocumentSnapshot,
    EditHistoryEntry,
    IncludeLineNumbersOption,
    LanguageContextResponse,
    LineRange,
    PromptOptions,
    StringEdit,
    StringReplacement,
    TraitPosition,
    ViewHistoryEntry,
    split_lines,
)
from .recent_files import format_lines_with_line_numbers, get_recent_code_snippets
from .tags import PromptTags
from .tokenizer import CostFunction

logger = logging.getLogger(__name__)

MERGE_CONFLICT_START = "<<<<<<<"
MERGE_CONFLICT_END = ">>>>>>>"


class PromptPieces(BaseModel):
    """Everything a strategy needs to render a prompt for one request."""

    model_config = {"arbitrary_types_allowed": True}

    current_document: CurrentDocument
    edit_window_lines_range: LineRange
    area_around_edit_window_lines_range: LineRange
    active_doc: DocumentSnapshot
    history: list[EditHistoryEntry | ViewHistoryEntry] = Field(default_factory=list)
    tagged_current_doc_lines: list[str] = Field(default_factory=list)
    area_around_code_to_edit: str = ""
    language_context: LanguageContextResponse | None = None
    aggressiveness_level: AggressivenessLevel = AggressivenessLevel.MEDIUM
    lint_errors: str | None = Field(default=None, description="Pre-formatted lint block, tags included")
    cost: CostFunction
    options: PromptOptions = Field(default_factory=PromptOptions)


class TaggedFile(BaseModel):
    """Clipped current file plus the tagged area around the edit window."""

    clipped: ClipResult
    area_around_code_to_edit: str = ""

    @property
    def ok(self) -> bool:
        return self.clipped.ok


# =============================================================================
# Current file
# =============================================================================


def construct_tagged_file(
    current_document: CurrentDocument,
    edit_window_lines_range: LineRange,
    area_around_edit_window_lines_range: LineRange,
    options: PromptOptions,
    cost: CostFunction,
    area_line_numbers: IncludeLineNumbersOption = IncludeLineNumbersOption.NONE,
    current_file_line_numbers: IncludeLineNumbersOption = IncludeLineNumbersOption.NONE,
) -> TaggedFile:
    """
    Build the tagged area around the edit window and the clipped current file.

    The cursor tag is always inserted in the area around the edit window. The
    current file repeats the tagged area when ``include_tags`` is set and both
    sections use the same line numbering; otherwise it shows the plain lines
    (with the cursor tag only when ``include_cursor_tag`` is set).
    """
    with_cursor = StringEdit.single(StringReplacement.insert(current_document.cursor_offset, PromptTags.CURSOR))
    lines_with_cursor = split_lines(with_cursor.apply(current_document.content))
    numbered_with_cursor = format_lines_with_line_numbers(lines_with_cursor, area_line_numbers)

    edit, area = edit_window_lines_range, area_around_edit_window_lines_range
    area_lines = [
        PromptTags.AREA_AROUND.start,
        *numbered_with_cursor[area.start : edit.start],
        PromptTags.EDIT_WINDOW.start,
        *numbered_with_cursor[edit.start : edit.end_exclusive],
        PromptTags.EDIT_WINDOW.end,
        *numbered_with_cursor[edit.end_exclusive : area.end_exclusive],
        PromptTags.AREA_AROUND.end,
    ]

    current_file = options.current_file
    if current_file.include_tags and current_file_line_numbers == area_line_numbers:
        area_for_current_file = area_lines
    else:
        source = lines_with_cursor if current_file.include_cursor_tag else current_document.lines
        area_for_current_file = format_lines_with_line_numbers(source, current_file_line_numbers)[
            area.start : area.end_exclusive
        ]

    clipped = create_tagged_current_file_content(
        format_lines_with_line_numbers(current_document.lines, current_file_line_numbers),
        area_for_current_file,
        area,
        cost,
        options.paged_clipping.page_size,
        current_file,
    )
    if not clipped.ok:
        logger.debug("Current file does not fit %d tokens", current_file.max_tokens)
    return TaggedFile(clipped=clipped, area_around_code_to_edit="\n".join(area_lines))


# =============================================================================
# User prompt
# =============================================================================


def wrap_in_backticks(content: str) -> str:
    return f"```\n{content}\n```"


def append_with_newline_if_needed(base: str, to_append: str, min_newlines: int) -> str:
    """Join with at least ``min_newlines`` newlines between the parts, then strip."""
    existing = (len(base) - len(base.rstrip("\n"))) + (len(to_append) - len(to_append.lstrip("\n")))
    return (base + "\n" * max(0, min_newlines - existing) + to_append).strip()


def add_related_information(related_information: str, prompt: str, position: TraitPosition) -> str:
    if position == TraitPosition.BEFORE:
        return append_with_newline_if_needed(related_information, prompt, 2)
    return append_with_newline_if_needed(prompt, related_information, 2)


def get_related_information(language_context: LanguageContextResponse | None) -> str:
    """Language-service traits as ``name: value`` lines, or ``""`` when there are none."""
    if language_context is None:
        return ""
    traits = language_context.traits
    if not traits:
        return ""
    lines = [f"{trait.name}: {trait.value}" for trait in traits]
    return "Consider this related information:\n" + "\n".join(lines)


def get_user_prompt(pieces: PromptPieces, should_cancel: CancelCheck | None = None) -> str:
    """Render the user message for the pieces' prompting strategy."""
    # Deferred: the strategy table imports this module
    from .prompt_strategies import get_strategy_spec

    options = pieces.options
    spec = get_strategy_spec(options.prompting_strategy)
    active_doc = pieces.active_doc

    recent = get_recent_code_snippets(
        active_doc, pieces.history, pieces.language_context, pieces.cost, options, should_cancel
    )
    docs_in_prompt = set(recent.documents)
    docs_in_prompt.add(active_doc.id)

    raise_if_cancelled(should_cancel)
    edit_diff_history = build_diff_history(
        pieces.history,
        docs_in_prompt,
        pieces.cost,
        options.diff_history,
        workspace_root=active_doc.workspace_root,
        should_cancel=should_cancel,
    )

    current_file_path = active_doc.id.to_unique_path(active_doc.workspace_root)
    current_file_content = "\n".join(pieces.tagged_current_doc_lines)
    lints = f"\n{pieces.lint_errors}\n" if pieces.lint_errors else ""

    main_prompt = "\n".join(
        [
            PromptTags.RECENT_FILES.start,
            recent.code_snippets,
            PromptTags.RECENT_FILES.end,
            "",
            PromptTags.CURRENT_FILE.start,
            f"current_file_path: {current_file_path}",
            current_file_content,
            PromptTags.CURRENT_FILE.end,
            lints,
            PromptTags.EDIT_HISTORY.start,
            edit_diff_history,
            PromptTags.EDIT_HISTORY.end,
        ]
    )
    main_prompt += f"\n\n{pieces.area_around_code_to_edit}"

    packaged = wrap_in_backticks(main_prompt) if spec.include_backticks else main_prompt
    prompt = add_related_information(
        get_related_information(pieces.language_context), packaged, options.language_context.trait_position
    )

    if options.include_post_script:
        post_script = spec.post_script(current_file_path, pieces.aggressiveness_level)
        if post_script is not None:
            prompt += f"\n\n{post_script}"

    return prompt.strip()


# =============================================================================
# Merge conflicts
# =============================================================================


def find_merge_conflict_markers_range(
    lines: Sequence[str],
    edit_window: LineRange,
    max_merge_conflict_lines: int,
) -> LineRange | None:
    """
    Lines of the first merge conflict that starts inside the edit window.

    Markers only count at the start of a line. The closing marker must lie
    within ``max_merge_conflict_lines`` lines of the opening one (both
    included); otherwise there is no conflict range.
    """
    for start in range(edit_window.start, min(edit_window.end_exclusive, len(lines))):
        if not lines[start].startswith(MERGE_CONFLICT_START):
            continue
        for end in range(start + 1, min(start + max_merge_conflict_lines, len(lines))):
            if lines[end].startswith(MERGE_CONFLICT_END):
                return LineRange(start=start, end_exclusive=end + 1)
        return None
    return None
