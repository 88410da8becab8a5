# next_edit_context/tags.py
"""Delimiter tags used in prompts and model responses."""

from __future__ import annotations

from typing import NamedTuple


class Tag(NamedTuple):
    start: str
    end: str

    @classmethod
    def named(cls, name: str) -> Tag:
        return cls(f"<|{name}|>", f"<|/{name}|>")


class PromptTags:
    CURSOR = "<|cursor|>"

    RECENT_FILES = Tag.named("recently_viewed_code_snippets")
    RECENT_FILE = Tag.named("recently_viewed_code_snippet")
    CURRENT_FILE = Tag.named("current_file_content")
    EDIT_HISTORY = Tag.named("edit_diff_history")
    AREA_AROUND = Tag.named("area_around_code_to_edit")
    EDIT_WINDOW = Tag.named("code_to_edit")
    EDIT_INTENT = Tag.named("edit_intent")
    AGGRESSIVE = Tag.named("aggressive")


# Fixed-window protocol section separator
FILE_SEP = "<|file_sep|>"
