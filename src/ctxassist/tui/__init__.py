from .keys import (
    SUGGESTION_KEYMAP,
    InputEvent,
    InputHandler,
    KeyBinding,
    KeyEvent,
    MouseEvent,
    command_for_key,
)
from .line_buffer import LineBuffer
from .session import AssistSession
from .suggestion_list import SuggestionListView

__all__ = [
    "SUGGESTION_KEYMAP",
    "InputEvent",
    "InputHandler",
    "KeyBinding",
    "KeyEvent",
    "MouseEvent",
    "command_for_key",
    "LineBuffer",
    "AssistSession",
    "SuggestionListView",
]
