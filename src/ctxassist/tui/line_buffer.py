from __future__ import annotations

import typing

from ctxassist.tui.keys import KeyBinding, KeyEvent


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


class LineBuffer:
    """Single-line editable text with a cursor."""

    def __init__(self, text: str = "") -> None:
        self._text = text
        self._cursor = len(text)
        self._keymap = self._create_keymap()

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: str) -> None:
        self._text = value
        self._cursor = len(value)

    @property
    def cursor(self) -> int:
        return self._cursor

    def _create_keymap(self) -> dict[KeyBinding, typing.Callable[[], None]]:
        return {
            KeyBinding("left"): self.move_cursor_left,
            KeyBinding("right"): self.move_cursor_right,
            KeyBinding("home"): self.move_cursor_start,
            KeyBinding("end"): self.move_cursor_end,
            KeyBinding("a", ctrl=True): self.move_cursor_start,
            KeyBinding("e", ctrl=True): self.move_cursor_end,
            KeyBinding("b", ctrl=True): self.move_cursor_left,
            KeyBinding("f", ctrl=True): self.move_cursor_right,
            KeyBinding("backspace"): self.backspace,
            KeyBinding("delete"): self.delete,
            KeyBinding("u", ctrl=True): self.kill_to_start,
            KeyBinding("k", ctrl=True): self.kill_to_end,
            KeyBinding("w", ctrl=True): self.kill_word_backward,
        }

    def insert(self, text: str) -> None:
        if not text:
            return
        self._text = self._text[: self._cursor] + text + self._text[self._cursor :]
        self._cursor += len(text)

    def backspace(self) -> None:
        if self._cursor == 0:
            return
        self._text = self._text[: self._cursor - 1] + self._text[self._cursor :]
        self._cursor -= 1

    def delete(self) -> None:
        if self._cursor >= len(self._text):
            return
        self._text = self._text[: self._cursor] + self._text[self._cursor + 1 :]

    def move_cursor_left(self) -> None:
        if self._cursor > 0:
            self._cursor -= 1

    def move_cursor_right(self) -> None:
        if self._cursor < len(self._text):
            self._cursor += 1

    def move_cursor_start(self) -> None:
        self._cursor = 0

    def move_cursor_end(self) -> None:
        self._cursor = len(self._text)

    def kill_to_start(self) -> None:
        self._text = self._text[self._cursor :]
        self._cursor = 0

    def kill_to_end(self) -> None:
        self._text = self._text[: self._cursor]

    def kill_word_backward(self) -> None:
        start = self._cursor
        while start > 0 and not _is_word_char(self._text[start - 1]):
            start -= 1
        while start > 0 and _is_word_char(self._text[start - 1]):
            start -= 1
        self._text = self._text[:start] + self._text[self._cursor :]
        self._cursor = start

    def on_key_event(self, event: KeyEvent) -> bool:
        """Apply an editing key; returns True if the event was handled."""
        if event.action != "down":
            return False
        handler = self._keymap.get(KeyBinding.from_event(event))
        if handler is not None:
            handler()
            return True
        if event.text and not event.ctrl and event.text.isprintable():
            self.insert(event.text)
            return True
        return False
