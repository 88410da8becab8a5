# next_edit_context/clipping.py
"""
Paged clipping of documents to a token budget.

A document is cut into pages of ``page_size`` lines. Clipping starts from the
pages covering a must-keep range and adds whole neighbouring pages while
they fit. Every line costs ``cost(line) + 1`` (the newline).

Design principles:
- Whole pages only: a page that does not fully fit is never included
- Budgets never go negative: expansion stops at the first page that overflows
- Typed failures: a must-keep range that alone exceeds the budget is reported
  as ``ClipResult.out_of_budget()`` and the caller omits the section
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence

from pydantic import BaseModel, Field

from .exceptions import InvalidOptionsError
from .models import ClipResult, CurrentFileOptions, LineRange, TokenBudget
from .tokenizer import CostFunction

logger = logging.getLogger(__name__)


class PageRange(BaseModel):
    """Pages kept by an expansion, plus what is left of the budget."""

    first_page_idx: int
    last_page_idx_incl: int
    budget_left: int = Field(..., description="Negative when the must-keep pages alone did not fit")

    def to_line_range(self, page_size: int) -> LineRange:
        """Absolute line range of the kept pages. The end may run past the document."""
        start = self.first_page_idx * page_size
        return LineRange(start=start, end_exclusive=max(start, (self.last_page_idx_incl + 1) * page_size))


def check_page_size(page_size: int | None) -> int:
    if page_size is None or page_size <= 0:
        raise InvalidOptionsError(f"Page size must be a positive number of lines, got {page_size}")
    return page_size


def count_tokens_for_lines(lines: Iterable[str], cost: CostFunction) -> int:
    """Cost of lines joined by newlines: each line is charged one extra token."""
    return sum(cost(line) + 1 for line in lines)


def batch_lines(lines: Sequence[str], page_size: int) -> Iterator[list[str]]:
    """Consecutive pages of ``page_size`` lines. The last page may be shorter."""
    for i in range(0, len(lines), page_size):
        yield list(lines[i : i + page_size])


def _grow(page_indices: Iterable[int], budget: TokenBudget, page_cost: Callable[[int], int]) -> int | None:
    """Consume whole pages in order while they fit. Returns the last page taken."""
    reached = None
    for idx in page_indices:
        if budget.is_exhausted:
            break
        if not budget.consume(page_cost(idx)).success:
            break
        reached = idx
    return reached


def expand_range_to_page_range(
    lines: Sequence[str],
    must_keep: LineRange,
    page_size: int,
    max_tokens: int,
    cost: CostFunction,
    prioritize_above_cursor: bool = False,
) -> PageRange:
    """
    Snap ``must_keep`` to whole pages and grow outward within ``max_tokens``.

    In symmetric mode the remaining budget is split in half (floor) and each
    direction spends only its own half; ``budget_left`` is what the downward
    half has left. With ``prioritize_above_cursor`` the pages above take the
    whole remaining budget first and the pages below get the rest.

    If the must-keep pages alone cost more than ``max_tokens`` they are
    returned unexpanded with a negative ``budget_left``.
    """
    check_page_size(page_size)
    total_pages = -(-len(lines) // page_size)

    def page_cost(k: int) -> int:
        start = k * page_size
        return count_tokens_for_lines(lines[start : min(start + page_size, len(lines))], cost)

    first_page_idx = must_keep.start // page_size
    last_page_idx_incl = (must_keep.end_exclusive - 1) // page_size

    available = max_tokens - sum(page_cost(k) for k in range(first_page_idx, last_page_idx_incl + 1))
    if available < 0:
        return PageRange(
            first_page_idx=first_page_idx,
            last_page_idx_incl=last_page_idx_incl,
            budget_left=available,
        )

    above_pages = range(first_page_idx - 1, -1, -1)
    below_pages = range(last_page_idx_incl + 1, total_pages)

    if prioritize_above_cursor:
        budget = TokenBudget.of(available)
        above = _grow(above_pages, budget, page_cost)
        below = _grow(below_pages, budget, page_cost)
    else:
        half = available // 2
        above = _grow(above_pages, TokenBudget.of(half), page_cost)
        budget = TokenBudget.of(half)
        below = _grow(below_pages, budget, page_cost)

    return PageRange(
        first_page_idx=first_page_idx if above is None else above,
        last_page_idx_incl=last_page_idx_incl if below is None else below,
        budget_left=budget.remaining,
    )


def clip_preserving_range(
    doc_lines: Sequence[str],
    range_to_preserve: LineRange,
    cost: CostFunction,
    page_size: int,
    options: CurrentFileOptions,
) -> ClipResult:
    """
    Absolute line range to keep around ``range_to_preserve`` within
    ``options.max_tokens``.

    The preserved lines are priced first; if they alone exceed the budget the
    result is ``out_of_budget``. Otherwise the pages around them are expanded
    with what is left. When even the pages covering the preserved lines do not
    fit, only the preserved lines are kept.
    """
    check_page_size(page_size)

    preserved = doc_lines[range_to_preserve.start : range_to_preserve.end_exclusive]
    available = options.max_tokens - count_tokens_for_lines(preserved, cost)
    if available < 0:
        logger.debug(
            "Preserved lines %r need %d tokens more than the %d budget",
            range_to_preserve,
            -available,
            options.max_tokens,
        )
        return ClipResult.out_of_budget()

    pages = expand_range_to_page_range(
        doc_lines,
        range_to_preserve,
        page_size,
        available,
        cost,
        options.prioritize_above_cursor,
    )
    if pages.budget_left < 0:
        return ClipResult(kept_range=range_to_preserve)

    return ClipResult(kept_range=pages.to_line_range(page_size))


def create_tagged_current_file_content(
    current_doc_lines: Sequence[str],
    area_around_code_to_edit: Sequence[str],
    area_around_range: LineRange,
    cost: CostFunction,
    page_size: int,
    options: CurrentFileOptions,
) -> ClipResult:
    """
    Clip the current file around the edit area and splice in the tagged area.

    The lines in ``area_around_range`` are replaced by
    ``area_around_code_to_edit`` (which carries the cursor and edit-window
    tags). ``kept_range`` starts at the first kept line and spans the spliced
    lines.
    """
    clipped = clip_preserving_range(current_doc_lines, area_around_range, cost, page_size, options)
    if not clipped.ok:
        return clipped

    keep = clipped.kept_range
    lines = [
        *current_doc_lines[keep.start : area_around_range.start],
        *area_around_code_to_edit,
        *current_doc_lines[area_around_range.end_exclusive : keep.end_exclusive],
    ]
    return ClipResult(
        kept_range=LineRange(start=keep.start, end_exclusive=keep.start + len(lines)),
        lines=lines,
    )
