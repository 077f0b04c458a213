from __future__ import annotations

import typing

from rich import console as rich_console
from rich import segment as rich_segment
from rich import style as rich_style
from rich import text as rich_text

from ctxassist.engine import SuggestionEngine
from ctxassist.models import EngineSnapshot
from ctxassist.tui.keys import KeyEvent, MouseEvent, command_for_key
from ctxassist.tui.line_buffer import LineBuffer
from ctxassist.tui.suggestion_list import Lines, SuggestionListView, view_offset


CURSOR_STYLE: typing.Final[rich_style.Style] = rich_style.Style(reverse=True)
PROMPT_STYLE: typing.Final[str] = "bold cyan"


class AssistSession:
    """Binds a line buffer, a ``SuggestionEngine`` and the dropdown view.

    Key events go to the suggestion popup first while it has something to
    navigate; anything it does not consume edits the buffer, and every edit
    is forwarded to the engine.
    """

    def __init__(
        self,
        engine: SuggestionEngine,
        prompt: str = "> ",
        view: SuggestionListView | None = None,
    ) -> None:
        self._engine = engine
        self._prompt = prompt
        self._buffer = LineBuffer()
        self._view = view if view is not None else SuggestionListView()
        self._snapshot: EngineSnapshot = engine.snapshot()
        self._submit_subscribers: list[typing.Callable[[str], None]] = []
        self._change_subscribers: list[typing.Callable[[], None]] = []
        engine.set_write_back(self._write_back)
        engine.subscribe(self._handle_snapshot)

    @property
    def engine(self) -> SuggestionEngine:
        return self._engine

    @property
    def buffer(self) -> LineBuffer:
        return self._buffer

    @property
    def text(self) -> str:
        return self._buffer.text

    @property
    def snapshot(self) -> EngineSnapshot:
        return self._snapshot

    @property
    def view(self) -> SuggestionListView:
        return self._view

    def subscribe_submit(self, subscriber: typing.Callable[[str], None]) -> None:
        self._submit_subscribers.append(subscriber)

    def subscribe_change(self, subscriber: typing.Callable[[], None]) -> None:
        self._change_subscribers.append(subscriber)

    def type_text(self, text: str) -> None:
        for ch in text:
            self.handle_key(KeyEvent(action="down", key=ch, text=ch))

    def handle_key(self, event: KeyEvent) -> bool:
        if event.action != "down":
            return False
        if self._snapshot.suggestions:
            command = command_for_key(event)
            if command is not None and self._engine.handle(command):
                return True
        if event.key == "enter" and not event.alt:
            self.submit()
            return True
        if self._buffer.on_key_event(event):
            self._engine.notify(self._buffer.text)
            self._mark_dirty()
            return True
        return False

    def handle_mouse(self, event: MouseEvent) -> bool:
        if event.action != "down":
            return False
        snapshot = self._snapshot
        if event.button == "right":
            return self._engine.dismiss()
        if event.button != "left":
            return False
        total = len(snapshot.suggestions)
        index = view_offset(snapshot.selected_index, total) + event.row
        return self._engine.select(index)

    def submit(self) -> None:
        value = self._buffer.text
        self._buffer.text = ""
        self._engine.notify("")
        self._mark_dirty()
        for subscriber in list(self._submit_subscribers):
            subscriber(value)

    def render_lines(
        self,
        console: rich_console.Console,
        options: rich_console.ConsoleOptions | None = None,
    ) -> Lines:
        if options is None:
            options = console.options
        line = rich_text.Text(self._prompt, style=PROMPT_STYLE)
        raw = self._buffer.text
        cursor = self._buffer.cursor
        body = rich_text.Text(raw)
        if cursor >= len(raw):
            body.append(" ")
        body.stylize(CURSOR_STYLE, cursor, cursor + 1)
        line.append_text(body)
        lines = typing.cast(
            Lines,
            console.render_lines(line, options=options, pad=False, new_lines=False),
        )
        lines.extend(self._view.render(self._snapshot, console, options))
        return lines

    def __rich_console__(
        self,
        console: rich_console.Console,
        options: rich_console.ConsoleOptions,
    ) -> rich_console.RenderResult:
        for line in self.render_lines(console, options):
            yield from line
            yield rich_segment.Segment.line()

    def _write_back(self, text: str) -> None:
        self._buffer.text = text
        self._mark_dirty()

    def _handle_snapshot(self, snapshot: EngineSnapshot) -> None:
        self._snapshot = snapshot
        self._mark_dirty()

    def _mark_dirty(self) -> None:
        for subscriber in list(self._change_subscribers):
            subscriber()
