# next_edit_context/models/history.py
"""
History entries: what the user edited or looked at, oldest first.

``HistoryEntry`` is a tagged union discriminated on ``kind``. Entries are
appended by the host on every observed edit or viewport change and are never
mutated.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from .document import DocumentId, OffsetRange, RootedEdit


class EditHistoryEntry(BaseModel):
    """The user changed ``doc_id``; ``edit.base`` is the text before the change."""

    model_config = {"frozen": True}

    kind: Literal["edit"] = "edit"
    doc_id: DocumentId
    edit: RootedEdit

    @property
    def content(self) -> str:
        """Document text after the edit."""
        return self.edit.apply()


class ViewHistoryEntry(BaseModel):
    """The user looked at ``visible_ranges`` (character offsets) of ``doc_id``."""

    model_config = {"frozen": True}

    kind: Literal["view"] = "view"
    doc_id: DocumentId
    document_content: str
    visible_ranges: list[OffsetRange] = Field(default_factory=list)

    @property
    def content(self) -> str:
        return self.document_content


HistoryEntry = Annotated[Union[EditHistoryEntry, ViewHistoryEntry], Field(discriminator="kind")]

_HISTORY_ADAPTER = TypeAdapter(list[HistoryEntry])


def load_history(data: list[dict]) -> list[EditHistoryEntry | ViewHistoryEntry]:
    """Rebuild a history log from plain dicts (e.g. a recorded session)."""
    return _HISTORY_ADAPTER.validate_python(data)


def dump_history(history: list[EditHistoryEntry | ViewHistoryEntry]) -> list[dict]:
    """Plain-dict form of a history log, readable by ``load_history``."""
    return _HISTORY_ADAPTER.dump_python(history, mode="json")
