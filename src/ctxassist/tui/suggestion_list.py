from __future__ import annotations

import typing

from rich import cells as rich_cells
from rich import console as rich_console
from rich import segment as rich_segment
from rich import style as rich_style
from rich import text as rich_text

from ctxassist.models import EngineSnapshot, EngineStatus, Suggestion


Lines = typing.List[typing.List[rich_segment.Segment]]
MAX_VISIBLE_ITEMS: typing.Final[int] = 5
SELECTED_STYLE: typing.Final[rich_style.Style] = rich_style.Style(reverse=True)
CONFIDENCE_STYLE: typing.Final[str] = "dim"
HINT_STYLE: typing.Final[str] = "blue"
FOOTER_STYLE: typing.Final[str] = "dim"
SPINNER_FRAMES: typing.Final[tuple[str, ...]] = (
    "⠋",
    "⠙",
    "⠹",
    "⠸",
    "⠼",
    "⠴",
    "⠦",
    "⠧",
    "⠇",
    "⠏",
)


def view_offset(selected_index: int | None, total: int) -> int:
    """First visible row so that the selected row stays on screen."""
    if selected_index is None or total <= MAX_VISIBLE_ITEMS:
        return 0
    if selected_index < MAX_VISIBLE_ITEMS:
        return 0
    return min(selected_index - MAX_VISIBLE_ITEMS + 1, total - MAX_VISIBLE_ITEMS)


def footer_text(snapshot: EngineSnapshot, frame: int = 0) -> str | None:
    if snapshot.status is EngineStatus.LOADING:
        spinner = SPINNER_FRAMES[frame % len(SPINNER_FRAMES)]
        return f"{spinner} Loading suggestions..."
    total = len(snapshot.suggestions)
    if total == 0:
        return None
    if total <= MAX_VISIBLE_ITEMS:
        noun = "suggestion" if total == 1 else "suggestions"
        footer = f"{total} {noun}"
    else:
        footer = f"Showing {MAX_VISIBLE_ITEMS} of {total} suggestions"
    if snapshot.selected_index is None:
        return f"{footer} · ↓ to select"
    return f"{footer} · Tab/Enter to accept · Esc to dismiss"


class SuggestionListView:
    """Renders an ``EngineSnapshot`` as a dropdown below the input line."""

    def __init__(self, show_confidence: bool = True) -> None:
        self._show_confidence = show_confidence
        self._frame = 0

    def tick(self) -> None:
        self._frame += 1

    def render(
        self,
        snapshot: EngineSnapshot,
        console: rich_console.Console,
        options: rich_console.ConsoleOptions | None = None,
    ) -> Lines:
        if options is None:
            options = console.options
        width = options.max_width or console.width
        lines: Lines = []

        total = len(snapshot.suggestions)
        start = view_offset(snapshot.selected_index, total)
        visible = snapshot.suggestions[start : start + MAX_VISIBLE_ITEMS]
        for offset, suggestion in enumerate(visible):
            is_selected = snapshot.selected_index == start + offset
            lines.append(self._render_row(suggestion, is_selected, width))

        if snapshot.hint:
            hint_lines = console.render_lines(
                rich_text.Text(snapshot.hint, style=HINT_STYLE),
                options=options,
                pad=False,
                new_lines=False,
            )
            lines.extend(typing.cast(Lines, hint_lines))

        footer = footer_text(snapshot, self._frame)
        if footer is not None:
            footer_lines = console.render_lines(
                rich_text.Text(
                    footer, style=FOOTER_STYLE, no_wrap=True, overflow="ellipsis"
                ),
                options=options,
                pad=False,
                new_lines=False,
            )
            lines.extend(typing.cast(Lines, footer_lines))
        return lines

    def _render_row(
        self,
        suggestion: Suggestion,
        is_selected: bool,
        width: int,
    ) -> list[rich_segment.Segment]:
        label = suggestion.text.strip() or suggestion.text
        confidence = f"{suggestion.confidence:.0%}" if self._show_confidence else ""
        reserved = rich_cells.cell_len(confidence) + 1 if confidence else 0
        max_label = max(width - reserved - 2, 1)
        if rich_cells.cell_len(label) > max_label:
            label = rich_cells.set_cell_size(label, max_label - 1) + "…"

        row: list[rich_segment.Segment] = [rich_segment.Segment("  " + label)]
        used = 2 + rich_cells.cell_len(label)
        if confidence:
            gap = max(width - used - rich_cells.cell_len(confidence), 1)
            row.append(rich_segment.Segment(" " * gap))
            row.append(
                rich_segment.Segment(
                    confidence, style=rich_style.Style.parse(CONFIDENCE_STYLE)
                )
            )
        elif width > used:
            row.append(rich_segment.Segment(" " * (width - used)))

        if not is_selected:
            return row
        highlighted: list[rich_segment.Segment] = []
        for segment in row:
            base_style = segment.style
            if isinstance(base_style, rich_style.Style):
                style = base_style + SELECTED_STYLE
            else:
                style = SELECTED_STYLE
            highlighted.append(rich_segment.Segment(segment.text, style=style))
        return highlighted
