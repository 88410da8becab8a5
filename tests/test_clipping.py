# tests/test_clipping.py
"""
Tests for paged clipping.

Covers:
- count_tokens_for_lines / batch_lines
- expand_range_to_page_range (symmetric split, prioritize above, over budget)
- clip_preserving_range (expansion, out_of_budget, preserved-only fallback)
- create_tagged_current_file_content splicing
- Budget invariant over randomized documents, budgets and page sizes
- Page size validation
"""

import random

import pytest

from next_edit_context.clipping import (
    PageRange,
    batch_lines,
    check_page_size,
    clip_preserving_range,
    count_tokens_for_lines,
    create_tagged_current_file_content,
    expand_range_to_page_range,
)
from next_edit_context.exceptions import InvalidOptionsError
from next_edit_context.models import BudgetError, CurrentFileOptions, LineRange

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

PAGE_SIZE = 10


def _lines(n: int) -> list[str]:
    return [f"l{i}" for i in range(n)]


def _one(text: str) -> int:
    # With the newline token every line costs 2 and a full page costs 20
    return 1


class TestLineHelpers:
    def test_count_tokens_charges_newline_per_line(self):
        assert count_tokens_for_lines(["ab", "c"], len) == 5

    def test_count_tokens_empty(self):
        assert count_tokens_for_lines([], len) == 0

    def test_batch_lines(self):
        assert [len(p) for p in batch_lines(_lines(25), PAGE_SIZE)] == [10, 10, 5]

    @pytest.mark.parametrize("page_size", [0, -3, None])
    def test_invalid_page_size(self, page_size):
        with pytest.raises(InvalidOptionsError):
            check_page_size(page_size)


class TestExpandRangeToPageRange:
    def test_symmetric_split(self):
        """60 tokens left: each side gets 30, i.e. one 20-token page."""
        pages = expand_range_to_page_range(_lines(50), LineRange(start=22, end_exclusive=25), PAGE_SIZE, 80, _one)
        assert (pages.first_page_idx, pages.last_page_idx_incl) == (1, 3)
        assert pages.budget_left == 10
        assert pages.to_line_range(PAGE_SIZE) == LineRange(start=10, end_exclusive=40)

    def test_prioritize_above_spends_above_first(self):
        pages = expand_range_to_page_range(
            _lines(50),
            LineRange(start=22, end_exclusive=25),
            PAGE_SIZE,
            80,
            _one,
            prioritize_above_cursor=True,
        )
        assert (pages.first_page_idx, pages.last_page_idx_incl) == (0, 3)
        assert pages.budget_left == 0

    def test_must_keep_pages_over_budget(self):
        pages = expand_range_to_page_range(_lines(50), LineRange(start=22, end_exclusive=25), PAGE_SIZE, 10, _one)
        assert (pages.first_page_idx, pages.last_page_idx_incl) == (2, 2)
        assert pages.budget_left == -10

    def test_must_keep_spanning_pages(self):
        pages = expand_range_to_page_range(_lines(50), LineRange(start=18, end_exclusive=31), PAGE_SIZE, 60, _one)
        assert (pages.first_page_idx, pages.last_page_idx_incl) == (1, 3)
        assert pages.budget_left == 0

    def test_stops_at_document_edges(self):
        pages = expand_range_to_page_range(_lines(25), LineRange(start=12, end_exclusive=13), PAGE_SIZE, 1000, _one)
        assert (pages.first_page_idx, pages.last_page_idx_incl) == (0, 2)
        # Above: page 0 (20 of 490); below: short page 2 (10 of 490)
        assert pages.budget_left == 480

    def test_only_whole_pages(self):
        """19 tokens per side cannot buy a 20-token page."""
        pages = expand_range_to_page_range(_lines(50), LineRange(start=22, end_exclusive=25), PAGE_SIZE, 58, _one)
        assert (pages.first_page_idx, pages.last_page_idx_incl) == (2, 2)

    def test_line_range_end_past_document(self):
        page_range = PageRange(first_page_idx=2, last_page_idx_incl=2, budget_left=0)
        assert page_range.to_line_range(PAGE_SIZE) == LineRange(start=20, end_exclusive=30)


class TestClipPreservingRange:
    def test_expands_around_preserved_range(self):
        # Preserved lines cost 6, leaving 80 for the page expansion
        result = clip_preserving_range(
            _lines(50),
            LineRange(start=22, end_exclusive=25),
            _one,
            PAGE_SIZE,
            CurrentFileOptions(max_tokens=86),
        )
        assert result.ok
        assert result.kept_range == LineRange(start=10, end_exclusive=40)

    def test_preserved_lines_over_budget(self):
        result = clip_preserving_range(
            _lines(50),
            LineRange(start=22, end_exclusive=25),
            _one,
            PAGE_SIZE,
            CurrentFileOptions(max_tokens=5),
        )
        assert not result.ok
        assert result.error == BudgetError.OUT_OF_BUDGET

    def test_falls_back_to_preserved_range(self):
        """Preserved lines fit but their page does not."""
        result = clip_preserving_range(
            _lines(50),
            LineRange(start=22, end_exclusive=25),
            _one,
            PAGE_SIZE,
            CurrentFileOptions(max_tokens=10),
        )
        assert result.ok
        assert result.kept_range == LineRange(start=22, end_exclusive=25)

    def test_invalid_page_size(self):
        with pytest.raises(InvalidOptionsError):
            clip_preserving_range(_lines(5), LineRange(start=0, end_exclusive=1), _one, 0, CurrentFileOptions())


class TestClipBudgetInvariant:
    """Whatever the inputs, a successful clip fits the budget and keeps the preserved lines."""

    @pytest.mark.parametrize("seed", range(20))
    @pytest.mark.parametrize("prioritize_above_cursor", [False, True])
    def test_kept_lines_fit_and_cover_preserved_range(self, seed, prioritize_above_cursor):
        rng = random.Random(seed)
        for _ in range(50):
            doc_lines = ["x" * rng.randint(0, 12) for _ in range(rng.randint(1, 60))]
            start = rng.randrange(len(doc_lines))
            preserved = LineRange(start=start, end_exclusive=rng.randint(start + 1, len(doc_lines)))
            page_size = rng.choice([1, 3, 7, 10])
            options = CurrentFileOptions(
                max_tokens=rng.randint(0, 400),
                prioritize_above_cursor=prioritize_above_cursor,
            )

            result = clip_preserving_range(doc_lines, preserved, len, page_size, options)

            if not result.ok:
                assert count_tokens_for_lines(doc_lines[preserved.start : preserved.end_exclusive], len) > (
                    options.max_tokens
                )
                continue
            kept = result.kept_range
            assert count_tokens_for_lines(doc_lines[kept.start : kept.end_exclusive], len) <= options.max_tokens
            assert kept.start <= preserved.start
            assert kept.end_exclusive >= preserved.end_exclusive


class TestCreateTaggedCurrentFileContent:
    def test_splices_tagged_area(self):
        doc = _lines(50)
        area = ["<a>", "l22", "l23", "l24", "</a>"]
        result = create_tagged_current_file_content(
            doc,
            area,
            LineRange(start=22, end_exclusive=25),
            _one,
            PAGE_SIZE,
            CurrentFileOptions(max_tokens=86),
        )
        assert result.ok
        assert result.lines == doc[10:22] + area + doc[25:40]
        assert result.kept_range == LineRange(start=10, end_exclusive=42)

    def test_out_of_budget_propagates(self):
        result = create_tagged_current_file_content(
            _lines(50),
            ["<a>", "</a>"],
            LineRange(start=22, end_exclusive=25),
            _one,
            PAGE_SIZE,
            CurrentFileOptions(max_tokens=1),
        )
        assert not result.ok
        assert result.lines is None
