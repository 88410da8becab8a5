# next_edit_context/models/document.py
"""
Document, range and edit models.

Snapshots are immutable: every observed edit produces a new snapshot and
history entries keep the text they were built from. All line and offset
ranges are 0-based with an exclusive end.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, model_validator

_LINE_BREAK = re.compile(r"\r?\n")


def split_lines(text: str) -> list[str]:
    """Split text into lines. An empty text is one empty line."""
    return _LINE_BREAK.split(text)


# =============================================================================
# Ranges
# =============================================================================


class _Range(BaseModel):
    model_config = {"frozen": True}

    start: int = Field(..., ge=0)
    end_exclusive: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_order(self):
        if self.end_exclusive < self.start:
            raise ValueError(f"range end {self.end_exclusive} precedes start {self.start}")
        return self

    @property
    def length(self) -> int:
        return self.end_exclusive - self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end_exclusive

    def contains(self, value: int) -> bool:
        return self.start <= value < self.end_exclusive

    def __repr__(self) -> str:
        return f"{type(self).__name__}[{self.start}, {self.end_exclusive})"


class OffsetRange(_Range):
    """A range of character offsets."""


class LineRange(_Range):
    """A range of 0-based line indices."""


# =============================================================================
# Documents
# =============================================================================


class DocumentId(BaseModel):
    """
    Identity of a document.

    ``fragment`` is set for notebook cells, which share a path with their
    notebook.
    """

    model_config = {"frozen": True}

    path: str
    fragment: str | None = None

    @property
    def is_notebook_cell(self) -> bool:
        return self.fragment is not None

    def to_unique_path(self, workspace_root: str | None = None) -> str:
        """
        Path shown in prompts: relative to ``workspace_root`` when the root
        prefixes it, with ``#fragment`` appended for notebook cells.
        """
        path = self.path
        if workspace_root is not None:
            root = workspace_root if workspace_root.endswith("/") else workspace_root + "/"
            if path.startswith(root):
                path = path[len(root) :]
        return path if self.fragment is None else f"{path}#{self.fragment}"

    def __str__(self) -> str:
        return self.to_unique_path()


class DocumentSnapshot(BaseModel):
    """
    The active document as seen at request time.

    ``document_before_edits`` is the content when the editing session began,
    ``document_after_edits`` is the content now.
    """

    model_config = {"frozen": True}

    id: DocumentId
    document_before_edits: str = ""
    document_after_edits: str = ""
    workspace_root: str | None = None
    language_id: str = "plaintext"

    @property
    def lines(self) -> list[str]:
        return split_lines(self.document_after_edits)


class CurrentDocument(BaseModel):
    """Current content of the active document plus the cursor."""

    model_config = {"frozen": True}

    content: str
    cursor_offset: int = Field(default=0, ge=0)

    @property
    def lines(self) -> list[str]:
        return split_lines(self.content)

    @property
    def cursor_line_offset(self) -> int:
        """0-based line of the cursor."""
        return self.content.count("\n", 0, self.cursor_offset)


# =============================================================================
# Edits
# =============================================================================


class StringReplacement(BaseModel):
    """Replace the characters in ``range`` with ``new_text``."""

    model_config = {"frozen": True}

    range: OffsetRange
    new_text: str = ""

    @classmethod
    def insert(cls, offset: int, text: str) -> StringReplacement:
        return cls(range=OffsetRange(start=offset, end_exclusive=offset), new_text=text)


class StringEdit(BaseModel):
    """Non-overlapping replacements, sorted by start offset."""

    model_config = {"frozen": True}

    replacements: list[StringReplacement] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_sorted(self):
        prev_end = 0
        for r in self.replacements:
            if r.range.start < prev_end:
                raise ValueError("replacements must be sorted and non-overlapping")
            prev_end = r.range.end_exclusive
        return self

    @classmethod
    def single(cls, replacement: StringReplacement) -> StringEdit:
        return cls(replacements=[replacement])

    def apply(self, text: str) -> str:
        parts: list[str] = []
        pos = 0
        for r in self.replacements:
            parts.append(text[pos : r.range.start])
            parts.append(r.new_text)
            pos = r.range.end_exclusive
        parts.append(text[pos:])
        return "".join(parts)


class LineReplacement(BaseModel):
    """Replace the lines in ``line_range`` with ``new_lines``."""

    model_config = {"frozen": True}

    line_range: LineRange
    new_lines: list[str] = Field(default_factory=list)

    def apply(self, lines: list[str]) -> list[str]:
        return lines[: self.line_range.start] + list(self.new_lines) + lines[self.line_range.end_exclusive :]

    def __str__(self) -> str:
        return f"{self.line_range!r} -> {self.new_lines!r}"


class RootedEdit(BaseModel):
    """A string edit together with the text it applies to."""

    model_config = {"frozen": True}

    base: str
    edit: StringEdit

    @property
    def base_lines(self) -> list[str]:
        return split_lines(self.base)

    def apply(self) -> str:
        return self.edit.apply(self.base)

    def to_line_replacements(self) -> list[LineReplacement]:
        """
        Smallest contiguous line hunks that turn the base into the edited text.

        Common leading and trailing lines are cut off first, then the
        remaining slice of the base is diffed against the replacement lines.
        """
        from ..text_diff import compute_line_diff

        old = self.base_lines
        new = split_lines(self.apply())

        prefix = 0
        while prefix < len(old) and prefix < len(new) and old[prefix] == new[prefix]:
            prefix += 1
        suffix = 0
        while (
            suffix < len(old) - prefix
            and suffix < len(new) - prefix
            and old[len(old) - 1 - suffix] == new[len(new) - 1 - suffix]
        ):
            suffix += 1

        old_mid = old[prefix : len(old) - suffix]
        new_mid = new[prefix : len(new) - suffix]
        if not old_mid and not new_mid:
            return []
        if not old_mid or not new_mid:
            return [
                LineReplacement(
                    line_range=LineRange(start=prefix, end_exclusive=prefix + len(old_mid)),
                    new_lines=new_mid,
                )
            ]

        return [
            LineReplacement(
                line_range=LineRange(
                    start=prefix + change.original.start,
                    end_exclusive=prefix + change.original.end_exclusive,
                ),
                new_lines=new_mid[change.modified.start : change.modified.end_exclusive],
            )
            for change in compute_line_diff("\n".join(old_mid), "\n".join(new_mid))
        ]
