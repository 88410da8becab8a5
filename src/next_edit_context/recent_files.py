# next_edit_context/recent_files.py
"""
Recently viewed code snippets.

Other documents the user recently edited or looked at are shown to the model
as tagged snippets. The documents are taken newest first and share one token
budget, so older or larger documents may be dropped entirely:

- documents without visible ranges keep whole pages from the top of the file
- documents with visible ranges keep the pages around the union of those
  ranges, expanded symmetrically

Snippets are returned oldest first, together with the ids of the documents
that made it into the prompt.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import BaseModel, Field

from .clipping import batch_lines, check_page_size, count_tokens_for_lines, expand_range_to_page_range
from .exceptions import CancelCheck, raise_if_cancelled
from .models import (
    ContextKind,
    DocumentId,
    DocumentSnapshot,
    EditHistoryEntry,
    IncludeLineNumbersOption,
    LanguageContextResponse,
    LineRange,
    OffsetRange,
    PromptOptions,
    TokenBudget,
    ViewHistoryEntry,
    split_lines,
)
from .tags import PromptTags
from .tokenizer import CostFunction

logger = logging.getLogger(__name__)


class CodeSnippet(BaseModel):
    """A document to show, with the ranges the user was looking at (views only)."""

    id: DocumentId
    content: str
    visible_ranges: list[OffsetRange] | None = None


class CodeSnippetsResult(BaseModel):
    snippets: list[str] = Field(default_factory=list, description="Formatted snippets, oldest first")
    docs_in_prompt: set[DocumentId] = Field(default_factory=set)


class RecentCodeSnippets(BaseModel):
    code_snippets: str = Field(default="", description="Snippets joined by blank lines")
    documents: set[DocumentId] = Field(default_factory=set)


# =============================================================================
# Formatting
# =============================================================================


def format_lines_with_line_numbers(
    lines: Sequence[str],
    include_line_numbers: IncludeLineNumbersOption,
    start_line_offset: int = 0,
) -> list[str]:
    """Prefix lines with their 0-based line number, counting from ``start_line_offset``."""
    if include_line_numbers == IncludeLineNumbersOption.WITH_SPACE:
        return [f"{start_line_offset + i}| {line}" for i, line in enumerate(lines)]
    if include_line_numbers == IncludeLineNumbersOption.WITHOUT_SPACE:
        return [f"{start_line_offset + i}|{line}" for i, line in enumerate(lines)]
    if include_line_numbers == IncludeLineNumbersOption.NONE:
        return list(lines)
    raise ValueError(f"Unknown line number option: {include_line_numbers}")


def format_code_snippet(
    doc_id: DocumentId,
    lines: Sequence[str],
    *,
    truncated: bool,
    include_line_numbers: IncludeLineNumbersOption,
    start_line_offset: int = 0,
) -> str:
    header = f"code_snippet_file_path: {doc_id.to_unique_path()}"
    if truncated:
        header += " (truncated)"
    body = "\n".join(format_lines_with_line_numbers(lines, include_line_numbers, start_line_offset))
    return "\n".join([PromptTags.RECENT_FILE.start, header, body, PromptTags.RECENT_FILE.end])


# =============================================================================
# Selection
# =============================================================================


def collect_recent_documents(
    history: Sequence[EditHistoryEntry | ViewHistoryEntry],
    active_doc_id: DocumentId,
    include_viewed_files: bool,
    n_documents: int,
    should_cancel: CancelCheck | None = None,
) -> list[EditHistoryEntry | ViewHistoryEntry]:
    """Latest entry of each of the last ``n_documents`` other documents, newest first."""
    result: list[EditHistoryEntry | ViewHistoryEntry] = []
    seen: set[DocumentId] = set()

    for entry in reversed(history):
        raise_if_cancelled(should_cancel)
        if len(result) >= n_documents:
            break
        if not include_viewed_files and isinstance(entry, ViewHistoryEntry):
            continue
        if entry.doc_id == active_doc_id or entry.doc_id in seen:
            continue
        result.append(entry)
        seen.add(entry.doc_id)

    return result


def history_entry_to_code_snippet(entry: EditHistoryEntry | ViewHistoryEntry) -> CodeSnippet:
    if isinstance(entry, EditHistoryEntry):
        return CodeSnippet(id=entry.doc_id, content=entry.content)
    if isinstance(entry, ViewHistoryEntry):
        return CodeSnippet(id=entry.doc_id, content=entry.document_content, visible_ranges=entry.visible_ranges)
    raise TypeError(f"Unknown history entry: {type(entry).__name__}")


def _offset_to_line(text: str, offset: int) -> int:
    return text.count("\n", 0, offset)


def visible_line_range(content: str, visible_ranges: Sequence[OffsetRange]) -> LineRange:
    """Lines covered by the union of the visible character ranges."""
    start_offset = min(r.start for r in visible_ranges)
    last_offset = max(r.end_exclusive - 1 for r in visible_ranges)
    start_line = _offset_to_line(content, start_offset)
    end_line = _offset_to_line(content, max(start_offset, last_offset)) + 1
    return LineRange(start=start_line, end_exclusive=end_line)


# =============================================================================
# Clipping
# =============================================================================


def _clip_full_document(
    snippet: CodeSnippet,
    lines: list[str],
    page_size: int,
    budget: TokenBudget,
    cost: CostFunction,
    include_line_numbers: IncludeLineNumbersOption,
    result: CodeSnippetsResult,
) -> None:
    kept: list[str] = []
    for page in batch_lines(lines, page_size):
        if not budget.consume(count_tokens_for_lines(page, cost)).success:
            break
        kept.extend(page)

    if kept:
        result.docs_in_prompt.add(snippet.id)
        result.snippets.append(
            format_code_snippet(
                snippet.id,
                kept,
                truncated=len(kept) != len(lines),
                include_line_numbers=include_line_numbers,
            )
        )


def _clip_around_visible_ranges(
    snippet: CodeSnippet,
    lines: list[str],
    page_size: int,
    token_budget: int,
    cost: CostFunction,
    include_line_numbers: IncludeLineNumbersOption,
    result: CodeSnippetsResult,
) -> int | None:
    """Returns the budget left, or None if nothing fit."""
    pages = expand_range_to_page_range(
        lines,
        visible_line_range(snippet.content, snippet.visible_ranges),
        page_size,
        token_budget,
        cost,
        prioritize_above_cursor=False,
    )
    if pages.budget_left < 0 or pages.budget_left == token_budget:
        return None

    start = pages.first_page_idx * page_size
    kept = lines[start : (pages.last_page_idx_incl + 1) * page_size]
    result.docs_in_prompt.add(snippet.id)
    result.snippets.append(
        format_code_snippet(
            snippet.id,
            kept,
            truncated=len(kept) < len(lines),
            include_line_numbers=include_line_numbers,
            start_line_offset=start,
        )
    )
    return pages.budget_left


def build_code_snippets_using_paged_clipping(
    snippets: Sequence[CodeSnippet],
    cost: CostFunction,
    options: PromptOptions,
) -> CodeSnippetsResult:
    """
    Clip recent documents (newest first) into one shared budget.

    Stops at the first document with visible ranges for which nothing fits.
    Snippet headers are not charged against the budget.
    """
    page_size = check_page_size(options.paged_clipping.page_size)
    include_line_numbers = options.recently_viewed_documents.include_line_numbers
    budget = TokenBudget.of(options.recently_viewed_documents.max_tokens)
    result = CodeSnippetsResult()

    for snippet in snippets:
        lines = split_lines(snippet.content)
        if not snippet.visible_ranges:
            _clip_full_document(snippet, lines, page_size, budget, cost, include_line_numbers, result)
            continue

        budget_left = _clip_around_visible_ranges(
            snippet, lines, page_size, budget.remaining, cost, include_line_numbers, result
        )
        if budget_left is None:
            logger.debug("No budget left for visible ranges of %s, stopping", snippet.id)
            break
        budget = TokenBudget.of(budget_left)

    result.snippets.reverse()
    return result


def append_language_context_snippets(
    language_context: LanguageContextResponse,
    snippets: list[str],
    max_tokens: int,
    cost: CostFunction,
    include_line_numbers: IncludeLineNumbersOption,
) -> None:
    """Append language-service snippets until the first one that does not fit."""
    budget = TokenBudget.of(max_tokens)
    for item in language_context.items:
        # Context produced after a provider timeout is not trusted
        if item.on_timeout or item.kind != ContextKind.SNIPPET:
            continue
        if not budget.consume(cost(item.value)).success:
            break
        snippets.append(
            format_code_snippet(
                DocumentId(path=item.uri or ""),
                split_lines(item.value),
                truncated=False,
                include_line_numbers=include_line_numbers,
            )
        )


def get_recent_code_snippets(
    active_doc: DocumentSnapshot,
    history: Sequence[EditHistoryEntry | ViewHistoryEntry],
    language_context: LanguageContextResponse | None,
    cost: CostFunction,
    options: PromptOptions,
    should_cancel: CancelCheck | None = None,
) -> RecentCodeSnippets:
    """Recently viewed code section text and the documents it includes."""
    recent = options.recently_viewed_documents
    entries = collect_recent_documents(
        history, active_doc.id, recent.include_viewed_files, recent.n_documents, should_cancel
    )
    clipped = build_code_snippets_using_paged_clipping(
        [history_entry_to_code_snippet(e) for e in entries], cost, options
    )

    snippets = list(clipped.snippets)
    if language_context is not None:
        append_language_context_snippets(
            language_context,
            snippets,
            options.language_context.max_tokens,
            cost,
            recent.include_line_numbers,
        )

    logger.debug("Recent snippets: %d documents, %d snippets", len(clipped.docs_in_prompt), len(snippets))
    return RecentCodeSnippets(code_snippets="\n\n".join(snippets), documents=clipped.docs_in_prompt)
