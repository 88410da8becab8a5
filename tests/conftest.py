# tests/conftest.py
"""
Shared pytest fixtures and configuration for next_edit_context tests.
"""

import logging

import pytest

from next_edit_context import config
from next_edit_context.models import (
    DocumentId,
    DocumentSnapshot,
    EditHistoryEntry,
    OffsetRange,
    RootedEdit,
    StringEdit,
    StringReplacement,
    ViewHistoryEntry,
)

# Configure logging for tests
logging.basicConfig(level=logging.WARNING)
logging.getLogger("next_edit_context").setLevel(logging.DEBUG)


@pytest.fixture(autouse=True)
def no_aggressiveness_override(monkeypatch):
    """Keep a developer's NEXT_EDIT_AGGRESSIVENESS out of the tests."""
    monkeypatch.setattr(config, "AGGRESSIVENESS_OVERRIDE", None)


@pytest.fixture
def line_cost():
    """Every line costs one token (plus one for its newline when paged)."""
    return lambda text: 1


@pytest.fixture
def char_cost():
    """One token per character."""
    return len


@pytest.fixture
def workspace_root():
    return "/ws"


@pytest.fixture
def active_doc(workspace_root):
    content = "\n".join(f"line {i}" for i in range(30))
    return DocumentSnapshot(
        id=DocumentId(path=f"{workspace_root}/src/app.py"),
        document_before_edits=content,
        document_after_edits=content,
        workspace_root=workspace_root,
        language_id="python",
    )


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_doc_id(name: str, root: str = "/ws") -> DocumentId:
    return DocumentId(path=f"{root}/{name}")


def make_edit_entry(doc_id: DocumentId, base: str, start: int, end: int, new_text: str) -> EditHistoryEntry:
    """Edit replacing ``base[start:end]`` with ``new_text``."""
    replacement = StringReplacement(range=OffsetRange(start=start, end_exclusive=end), new_text=new_text)
    return EditHistoryEntry(doc_id=doc_id, edit=RootedEdit(base=base, edit=StringEdit.single(replacement)))


def make_line_edit(doc_id: DocumentId, lines: list[str], line_idx: int, new_line: str) -> EditHistoryEntry:
    """Edit replacing one whole line."""
    base = "\n".join(lines)
    start = sum(len(line) + 1 for line in lines[:line_idx])
    return make_edit_entry(doc_id, base, start, start + len(lines[line_idx]), new_line)


def make_view_entry(doc_id: DocumentId, content: str, ranges: list[tuple[int, int]] | None = None) -> ViewHistoryEntry:
    return ViewHistoryEntry(
        doc_id=doc_id,
        document_content=content,
        visible_ranges=[OffsetRange(start=s, end_exclusive=e) for s, e in (ranges or [])],
    )
