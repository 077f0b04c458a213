from __future__ import annotations

import io

from rich import console as rich_console
from rich import style as rich_style

from ctxassist.models import EngineSnapshot, EngineStatus, Suggestion
from ctxassist.tui.suggestion_list import (
    SPINNER_FRAMES,
    SuggestionListView,
    footer_text,
    view_offset,
)


def _console() -> rich_console.Console:
    return rich_console.Console(
        file=io.StringIO(),
        force_terminal=True,
        color_system=None,
        width=50,
    )


def _snapshot(
    count: int, selected: int | None = None, hint: str | None = None
) -> EngineSnapshot:
    suggestions = tuple(
        Suggestion(text=f"Item {i}", confidence=0.75) for i in range(count)
    )
    if not suggestions:
        status = EngineStatus.IDLE
    elif selected is None:
        status = EngineStatus.SUGGESTED
    else:
        status = EngineStatus.SELECTING
    return EngineSnapshot(
        status=status,
        raw_text="I need",
        settled_text="I need",
        matched_trigger="i need",
        suggestions=suggestions,
        selected_index=selected,
        hint=hint,
    )


def _texts(lines) -> list[str]:
    return ["".join(segment.text for segment in line) for line in lines]


def test_view_offset_keeps_selection_visible() -> None:
    assert view_offset(None, 10) == 0
    assert view_offset(4, 10) == 0
    assert view_offset(5, 10) == 1
    assert view_offset(9, 10) == 5
    assert view_offset(3, 4) == 0


def test_renders_at_most_five_rows_with_footer() -> None:
    console = _console()
    lines = SuggestionListView().render(_snapshot(8), console)
    texts = _texts(lines)

    assert len(lines) == 6
    assert "Item 0" in texts[0]
    assert "Item 4" in texts[4]
    assert "Item 5" not in "".join(texts)
    assert "75%" in texts[0]
    assert "Showing 5 of 8 suggestions" in texts[-1]
    assert "↓ to select" in texts[-1]


def test_selected_row_is_reversed_and_scrolled_into_view() -> None:
    console = _console()
    lines = SuggestionListView().render(_snapshot(8, selected=6), console)
    texts = _texts(lines)

    assert "Item 2" in texts[0]
    selected_line = lines[4]
    assert "Item 6" in texts[4]
    assert all(
        isinstance(segment.style, rich_style.Style) and segment.style.reverse
        for segment in selected_line
    )
    assert not any(
        isinstance(segment.style, rich_style.Style) and segment.style.reverse
        for segment in lines[0]
    )
    assert len(lines) == 6
    assert "Tab/Enter to accept" in texts[-1]
    assert texts[-1].endswith("…")
    assert "Esc to dismiss" not in "".join(texts)


def test_hint_and_confidence_toggle() -> None:
    console = _console()
    view = SuggestionListView(show_confidence=False)
    lines = view.render(_snapshot(1, hint="Try a platform name"), console)
    texts = _texts(lines)

    assert "%" not in texts[0]
    assert texts[1] == "Try a platform name"
    assert "1 suggestion ·" in texts[2]


def test_loading_footer_spins() -> None:
    snapshot = EngineSnapshot(
        status=EngineStatus.LOADING,
        raw_text="I need",
        settled_text="I need",
        matched_trigger="i need",
        loading=True,
    )
    view = SuggestionListView()
    first = _texts(view.render(snapshot, _console()))
    view.tick()
    second = _texts(view.render(snapshot, _console()))

    assert first == [f"{SPINNER_FRAMES[0]} Loading suggestions..."]
    assert second == [f"{SPINNER_FRAMES[1]} Loading suggestions..."]


def test_idle_renders_nothing() -> None:
    assert footer_text(_snapshot(0)) is None
    assert SuggestionListView().render(_snapshot(0), _console()) == []
