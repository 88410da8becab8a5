# next_edit_context/fixed_window.py
"""
Fixed-window next-edit protocol.

The model sees the same 21-line window (10 above the cursor, the cursor line,
10 below) twice: as it was before the editing session ("original") and as
it is now ("current"). It answers with a full rewrite of the window
("updated"). The prompt looks like::

    <|file_sep|>{context_file_path}
    {context_file_content}
    <|file_sep|>{file}.diff
    original:
    {changed_lines_before}
    updated:
    {changed_lines_after}
    <|file_sep|>original/{file}
    {window_before_session_edits}
    <|file_sep|>current/{file}
    {window_now}
    <|file_sep|>updated/{file}

Because lines may have been inserted or removed during the session, the
cursor is mapped from current to original coordinates before cutting the
original window. The response is diffed against the window that was sent
and each change is emitted as an absolute line replacement.

Design principles:
- Pure per-request computation: windows are always re-derived, never stored
- No baseline, no prompt: a blank original document yields None
- Same result from a list or a lazy line iterator
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator, Sequence

from pydantic import BaseModel, Field

from .models import (
    FIXED_WINDOW_LINES_ABOVE,
    FIXED_WINDOW_LINES_BELOW,
    CurrentDocument,
    DocumentSnapshot,
    EditHistoryEntry,
    LineRange,
    LineReplacement,
    PromptOptions,
    TokenBudget,
    ViewHistoryEntry,
    split_lines,
)
from .tags import FILE_SEP
from .text_diff import LineDiff, compute_line_diff
from .tokenizer import CostFunction

logger = logging.getLogger(__name__)

MAX_DIFF_BLOCKS = 15
TOTAL_PROMPT_BUDGET = 7000
DIFF_BUDGET = 3500
CONTEXT_FILES_BUDGET = 3500
TAG_OVERHEAD_TOKENS = 100


class Window(BaseModel):
    """Lines ``[start_line, start_line + len(lines))`` of a document."""

    model_config = {"frozen": True}

    start_line: int = 0
    lines: list[str] = Field(default_factory=list)

    @property
    def end_line_exclusive(self) -> int:
        return self.start_line + len(self.lines)

    @property
    def line_range(self) -> LineRange:
        return LineRange(start=self.start_line, end_exclusive=self.end_line_exclusive)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


class NoMoreSuggestions(BaseModel):
    """Terminal marker: the response has no further edits."""

    model_config = {"frozen": True}

    window: LineRange | None = None


class ContextFile(BaseModel):
    path: str
    content: str


# =============================================================================
# Windows and cursor mapping
# =============================================================================


def extract_window(
    lines: Sequence[str],
    cursor_line: int,
    above: int = FIXED_WINDOW_LINES_ABOVE,
    below: int = FIXED_WINDOW_LINES_BELOW,
) -> Window:
    """The window around ``cursor_line``, clipped at the document edges (never padded)."""
    start = max(0, cursor_line - above)
    end = min(len(lines), cursor_line + below + 1)
    return Window(start_line=start, lines=list(lines[start:end]))


def map_cursor_to_original(original_lines: Sequence[str], current_lines: Sequence[str], cursor_line: int) -> int:
    """
    Map a cursor line in the current text to the matching line of the original.

    The changed region is found by scanning for the first differing line and
    then walking back from both ends while lines match. A cursor before the
    region is unchanged, one inside it is mapped proportionally and one after
    it is shifted by the line-count delta. This is an approximation: interior
    lines are not aligned, only a window center is needed.
    """
    if list(original_lines) == list(current_lines):
        return cursor_line

    min_len = min(len(original_lines), len(current_lines))
    first_diff = next((i for i in range(min_len) if original_lines[i] != current_lines[i]), min_len)

    orig_end = len(original_lines) - 1
    curr_end = len(current_lines) - 1
    while orig_end > first_diff and curr_end > first_diff and original_lines[orig_end] == current_lines[curr_end]:
        orig_end -= 1
        curr_end -= 1

    if cursor_line < first_diff:
        mapped = cursor_line
    elif cursor_line <= curr_end:
        orig_diff_len = orig_end - first_diff + 1
        curr_diff_len = curr_end - first_diff + 1
        if orig_diff_len > 0 and curr_diff_len > 0:
            # Half-up rounding
            offset = math.floor((cursor_line - first_diff) * orig_diff_len / curr_diff_len + 0.5)
            mapped = first_diff + min(offset, orig_diff_len - 1)
        else:
            # Pure insertion or deletion: map to where it happened
            mapped = first_diff
    else:
        mapped = cursor_line - (curr_end - orig_end)

    return max(0, min(mapped, len(original_lines) - 1))


def extract_original_window(original_text: str, current_text: str, cursor_line: int) -> Window:
    """Window of the original text centered on the cursor mapped from the current text."""
    if original_text == current_text:
        return extract_window(split_lines(original_text), cursor_line)
    if not original_text:
        return Window()

    original_lines = split_lines(original_text)
    mapped = map_cursor_to_original(original_lines, split_lines(current_text), cursor_line)
    return extract_window(original_lines, mapped)


# =============================================================================
# Prompt
# =============================================================================


def _edits_of(active_doc: DocumentSnapshot, history: Sequence[EditHistoryEntry | ViewHistoryEntry]):
    return [e for e in history if isinstance(e, EditHistoryEntry) and e.doc_id == active_doc.id]


def _diff_blocks(edit_entries: Sequence[EditHistoryEntry], file_name: str, cost: CostFunction) -> tuple[list[str], int]:
    """Changed-lines blocks oldest first, plus the tokens they used."""
    budget = TokenBudget.of(DIFF_BUDGET)
    parts: list[str] = []
    n_blocks = 0

    for entry in edit_entries:
        base_lines = entry.edit.base_lines
        for replacement in entry.edit.to_line_replacements():
            if n_blocks >= MAX_DIFF_BLOCKS:
                return parts, budget.used

            old = "\n".join(base_lines[replacement.line_range.start : replacement.line_range.end_exclusive]).strip()
            new = "\n".join(replacement.new_lines).strip()
            if not old and not new:
                continue

            block = f"{FILE_SEP}{file_name}.diff\noriginal:\n{old}\nupdated:\n{new}"
            if not budget.consume(cost(block)).success:
                return parts, budget.used
            n_blocks += 1

            parts.append(f"{FILE_SEP}{file_name}.diff")
            parts.append("original:")
            if old:
                parts.append(old)
            parts.append("updated:")
            if new:
                parts.append(new)

    return parts, budget.used


def get_recent_files_for_fixed_window(
    active_doc: DocumentSnapshot,
    history: Sequence[EditHistoryEntry | ViewHistoryEntry],
    cost: CostFunction,
    options: PromptOptions,
) -> list[ContextFile]:
    """Full content of other recent documents, newest first, within the recent-files budget."""
    recent = options.recently_viewed_documents
    budget = TokenBudget.of(recent.max_tokens)
    seen = set()
    result: list[ContextFile] = []

    for entry in reversed(history):
        if len(result) >= recent.n_documents:
            break
        if entry.doc_id == active_doc.id or entry.doc_id in seen:
            continue
        if not recent.include_viewed_files and isinstance(entry, ViewHistoryEntry):
            continue
        seen.add(entry.doc_id)

        if not budget.consume(cost(entry.content)).success:
            break
        result.append(ContextFile(path=entry.doc_id.to_unique_path(active_doc.workspace_root), content=entry.content))

    return result


def construct_fixed_window_prompt(
    active_doc: DocumentSnapshot,
    history: Sequence[EditHistoryEntry | ViewHistoryEntry],
    current_document: CurrentDocument,
    cost: CostFunction,
    options: PromptOptions,
) -> str | None:
    """
    Build the fixed-window prompt, or None when the original document is
    blank (e.g. a file created during the session) and the caller has to
    use another protocol.
    """
    file_path = active_doc.id.to_unique_path(active_doc.workspace_root)
    file_name = file_path.rsplit("/", 1)[-1]

    edit_entries = _edits_of(active_doc, history)
    original = edit_entries[0].edit.base if edit_entries else active_doc.document_before_edits
    current = active_doc.document_after_edits

    if not original.strip():
        logger.debug("No original baseline for %s, skipping fixed-window prompt", file_path)
        return None

    diff_parts, diff_tokens = _diff_blocks(edit_entries, file_name, cost)

    cursor_line = current_document.cursor_line_offset
    current_section = extract_window(split_lines(current), cursor_line).text
    original_section = extract_original_window(original, current, cursor_line).text

    used = diff_tokens + cost(original_section) + cost(current_section)
    remaining = max(0, TOTAL_PROMPT_BUDGET - used - TAG_OVERHEAD_TOKENS)
    context_budget = TokenBudget.of(min(remaining, CONTEXT_FILES_BUDGET))

    context_parts: list[str] = []
    for context_file in get_recent_files_for_fixed_window(active_doc, history, cost, options):
        if not context_budget.consume(cost(f"{FILE_SEP}{context_file.path}\n{context_file.content}")).success:
            break
        context_parts.append(f"{FILE_SEP}{context_file.path}")
        context_parts.append(context_file.content)

    parts = [
        *context_parts,
        *diff_parts,
        f"{FILE_SEP}original/{file_name}",
        original_section,
        f"{FILE_SEP}current/{file_name}",
        current_section,
        f"{FILE_SEP}updated/{file_name}",
    ]
    return "\n".join(parts)


# =============================================================================
# Response
# =============================================================================


def reconcile_fixed_window_response(
    response_lines: Iterable[str],
    current_lines: Sequence[str],
    cursor_line: int,
    diff: LineDiff = compute_line_diff,
) -> Iterator[LineReplacement | NoMoreSuggestions]:
    """
    Turn the model's rewritten window into absolute line replacements.

    Blank lines around the response are dropped, the window that was sent is
    recomputed from ``current_lines`` and diffed against the response. Each
    change is yielded with 0-based document line numbers, followed by a
    ``NoMoreSuggestions`` marker (also when there are no changes).
    """
    lines = list(response_lines)
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()

    window = extract_window(current_lines, cursor_line)
    if not lines:
        logger.debug("Empty fixed-window response")
        yield NoMoreSuggestions(window=window.line_range)
        return

    changes = diff(window.text, "\n".join(lines))
    logger.debug(
        "Fixed window %r (cursor %d): %d response lines, %d changes",
        window.line_range,
        cursor_line,
        len(lines),
        len(changes),
    )

    for change in changes:
        yield LineReplacement(
            line_range=LineRange(
                start=window.start_line + change.original.start,
                end_exclusive=window.start_line + change.original.end_exclusive,
            ),
            new_lines=lines[change.modified.start : change.modified.end_exclusive],
        )

    yield NoMoreSuggestions(window=window.line_range)
