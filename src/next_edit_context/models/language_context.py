# next_edit_context/models/language_context.py
"""Context items supplied by a language service (snippets and traits)."""

from __future__ import annotations

from pydantic import BaseModel, Field

from .enums import ContextKind


class LanguageContextItem(BaseModel):
    """
    One context item.

    Snippets carry code in ``value`` and the file it came from in ``uri``;
    traits carry a ``name``/``value`` pair such as a language version.
    """

    model_config = {"frozen": True}

    kind: ContextKind
    value: str
    uri: str | None = None
    name: str | None = None
    on_timeout: bool = Field(default=False, description="Produced after the provider timed out")


class LanguageContextResponse(BaseModel):
    items: list[LanguageContextItem] = Field(default_factory=list)

    @property
    def traits(self) -> list[LanguageContextItem]:
        return [item for item in self.items if item.kind == ContextKind.TRAIT]
