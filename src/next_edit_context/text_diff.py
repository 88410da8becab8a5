# next_edit_context/text_diff.py
"""
Line diff oracle.

The clipping and reconciliation code only needs ``diff(a, b) -> changes``;
any callable with the ``LineDiff`` shape can be passed in its place. The
default is backed by ``difflib.SequenceMatcher``.
"""

from __future__ import annotations

import difflib
from typing import Callable

from pydantic import BaseModel

from .models.document import LineRange, split_lines


class LineChange(BaseModel):
    """One changed region: ``original`` lines were replaced by ``modified`` lines."""

    model_config = {"frozen": True}

    original: LineRange
    modified: LineRange


LineDiff = Callable[[str, str], list[LineChange]]


def compute_line_diff(original: str, modified: str) -> list[LineChange]:
    """Changed line regions between two texts, in document order."""
    a = split_lines(original)
    b = split_lines(modified)
    matcher = difflib.SequenceMatcher(a=a, b=b, autojunk=False)

    changes: list[LineChange] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        changes.append(
            LineChange(
                original=LineRange(start=i1, end_exclusive=i2),
                modified=LineRange(start=j1, end_exclusive=j2),
            )
        )
    return changes
