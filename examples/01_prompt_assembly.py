#!/usr/bin/env python3
"""
01_prompt_assembly.py: Building a next-edit prompt and reading the reply

Demonstrates:
1. Tagging the edit window and clipping the current file to a budget
2. Rendering a prompt with a prompting strategy
3. Reading the edit intent from a streamed reply and gating the suggestion
4. Reconciling a fixed-window reply into line replacements

No API keys required.
"""

from next_edit_context import (
    AggressivenessLevel,
    CurrentDocument,
    DocumentId,
    DocumentSnapshot,
    LineRange,
    PromptingStrategy,
    PromptOptions,
    PromptPieces,
    construct_tagged_file,
    estimate_tokens,
    parse_edit_intent_from_lines,
    reconcile_fixed_window_response,
    render_prompt,
    should_show_edit,
)
from next_edit_context.models import EditHistoryEntry, OffsetRange, RootedEdit, StringEdit, StringReplacement


def section(title: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"{title}")
    print("=" * 60)


BEFORE = """def area(width, height):
    return width * height


def perimeter(width, height):
    return 2 * (width + height)"""


def main() -> None:
    root = "/workspace"
    doc_id = DocumentId(path=f"{root}/shapes.py")

    # The user renamed the first parameter
    start = BEFORE.index("width")
    rename = StringReplacement(range=OffsetRange(start=start, end_exclusive=start + 5), new_text="w")
    entry = EditHistoryEntry(doc_id=doc_id, edit=RootedEdit(base=BEFORE, edit=StringEdit.single(rename)))
    after = entry.content

    active_doc = DocumentSnapshot(
        id=doc_id,
        document_before_edits=BEFORE,
        document_after_edits=after,
        workspace_root=root,
        language_id="python",
    )
    current = CurrentDocument(content=after, cursor_offset=after.index("w,") + 1)

    # ------------------------------------------------------------------ #
    section("1. Tagged current file")
    # ------------------------------------------------------------------ #

    options = PromptOptions(prompting_strategy=PromptingStrategy.XTAB275_EDIT_INTENT)
    edit_window = LineRange(start=0, end_exclusive=2)
    area = LineRange(start=0, end_exclusive=4)
    tagged = construct_tagged_file(current, edit_window, area, options, estimate_tokens)
    print(tagged.area_around_code_to_edit)

    # ------------------------------------------------------------------ #
    section("2. Rendered prompt")
    # ------------------------------------------------------------------ #

    pieces = PromptPieces(
        current_document=current,
        edit_window_lines_range=edit_window,
        area_around_edit_window_lines_range=area,
        active_doc=active_doc,
        history=[entry],
        tagged_current_doc_lines=tagged.clipped.lines or [],
        area_around_code_to_edit=tagged.area_around_code_to_edit,
        cost=estimate_tokens,
        options=options,
    )
    rendered = render_prompt(pieces)
    print(f"Response format: {rendered.response_format.value}")
    print(rendered.user_prompt)

    # ------------------------------------------------------------------ #
    section("3. Edit intent")
    # ------------------------------------------------------------------ #

    reply = ["<|edit_intent|>medium<|/edit_intent|>", "def area(w, height):", "    return w * height"]
    parsed = parse_edit_intent_from_lines(reply)
    print(f"Intent: {parsed.edit_intent.value}, error: {parsed.parse_error}")
    for level in AggressivenessLevel:
        print(f"  show at {level.value:>6}: {should_show_edit(parsed.edit_intent, level)}")
    print("Remaining lines:", list(parsed.remaining_lines))

    # ------------------------------------------------------------------ #
    section("4. Fixed-window reconciliation")
    # ------------------------------------------------------------------ #

    current_lines = after.split("\n")
    response = list(current_lines)
    response[1] = "    return w * height  # area"
    for item in reconcile_fixed_window_response(response, current_lines, cursor_line=0):
        print(item)


if __name__ == "__main__":
    main()
