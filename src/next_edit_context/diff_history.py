# next_edit_context/diff_history.py
"""
Edit history as unified-diff blocks.

The history is walked from the newest entry back. Each edit becomes a block::

    --- src/app.py
    +++ src/app.py
    @@ -4,1 +4,2 @@
    -old line
    +new line
    +another line

Hunk start lines are 0-based. Collection stops at ``n_entries`` blocks or at
the first block that does not fit the remaining budget; older, cheaper
blocks are not tried. The collected blocks are returned oldest first.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from pydantic import BaseModel

from .exceptions import CancelCheck, raise_if_cancelled
from .models import (
    DiffHistoryOptions,
    DocumentId,
    EditHistoryEntry,
    TokenBudget,
    ViewHistoryEntry,
)
from .tokenizer import CostFunction

logger = logging.getLogger(__name__)

_HUNK_HEADER = re.compile(r"^@@ -(\d+),(\d+) \+(\d+),(\d+) @@$", re.MULTILINE)


class DiffHunk(BaseModel):
    """One replaced run of lines; ``start_line`` is 0-based in the base text."""

    start_line: int
    old_lines: list[str]
    new_lines: list[str]

    @property
    def is_blank(self) -> bool:
        """True when neither side has any non-whitespace content."""
        return not any(line.strip() for line in self.old_lines) and not any(
            line.strip() for line in self.new_lines
        )

    def format(self) -> list[str]:
        header = f"@@ -{self.start_line},{len(self.old_lines)} +{self.start_line},{len(self.new_lines)} @@"
        return [header, *(f"-{line}" for line in self.old_lines), *(f"+{line}" for line in self.new_lines)]


class DiffBlock(BaseModel):
    path: str
    hunks: list[DiffHunk]

    def format(self) -> str:
        lines = [f"--- {self.path}", f"+++ {self.path}"]
        for hunk in self.hunks:
            lines.extend(hunk.format())
        return "\n".join(lines)


def to_unique_path(doc_id: DocumentId, workspace_root: str | None) -> str:
    return doc_id.to_unique_path(workspace_root)


def build_diff_block(entry: EditHistoryEntry, workspace_root: str | None = None) -> DiffBlock | None:
    """Diff block for one edit, or None when every hunk is whitespace-only."""
    base_lines = entry.edit.base_lines
    hunks = []
    for replacement in entry.edit.to_line_replacements():
        hunk = DiffHunk(
            start_line=replacement.line_range.start,
            old_lines=base_lines[replacement.line_range.start : replacement.line_range.end_exclusive],
            new_lines=list(replacement.new_lines),
        )
        if hunk.is_blank:
            continue
        hunks.append(hunk)

    if not hunks:
        return None
    return DiffBlock(path=to_unique_path(entry.doc_id, workspace_root), hunks=hunks)


def generate_doc_diff(entry: EditHistoryEntry, workspace_root: str | None = None) -> str | None:
    block = build_diff_block(entry, workspace_root)
    return None if block is None else block.format()


def parse_hunk_headers(diff_text: str) -> list[tuple[int, int, int]]:
    """``(start_line, old_count, new_count)`` for every hunk header in ``diff_text``."""
    return [(int(m.group(1)), int(m.group(2)), int(m.group(4))) for m in _HUNK_HEADER.finditer(diff_text)]


def build_diff_history(
    history: Sequence[EditHistoryEntry | ViewHistoryEntry],
    docs_in_prompt: set[DocumentId],
    cost: CostFunction,
    options: DiffHistoryOptions,
    workspace_root: str | None = None,
    should_cancel: CancelCheck | None = None,
) -> str:
    """
    The edit history section: diff blocks oldest first, separated by blank
    lines, with a trailing newline when not empty.
    """
    root = workspace_root if options.use_relative_paths else None
    budget = TokenBudget.of(options.max_tokens)
    diffs: list[str] = []

    for entry in reversed(history):
        raise_if_cancelled(should_cancel)
        if len(diffs) >= options.n_entries:
            break
        if isinstance(entry, ViewHistoryEntry):
            continue
        if not isinstance(entry, EditHistoryEntry):
            raise TypeError(f"Unknown history entry: {type(entry).__name__}")
        if options.only_for_docs_in_prompt and entry.doc_id not in docs_in_prompt:
            continue

        diff = generate_doc_diff(entry, root)
        if diff is None:
            continue

        if not budget.consume(cost(diff)).success:
            logger.debug("Diff history budget exhausted after %d entries", len(diffs))
            break
        diffs.append(diff)

    diffs.reverse()
    text = "\n\n".join(diffs)
    return text + "\n" if diffs else text
