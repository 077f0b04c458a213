from __future__ import annotations

import typing

from ctxassist.engine.state import EngineState
from ctxassist.logger import logger
from ctxassist.models import Command, EngineStatus, Suggestion


AcceptHandler = typing.Callable[[Suggestion], None]
ChangeCallback = typing.Callable[[], None]


class SelectionStateMachine:
    """Navigation, accept and dismiss over the current suggestion list.

    States are derived from the shared ``EngineState``:
    idle -> loading -> suggested -> selecting. Every handler returns whether
    the command was consumed so the presentation layer can let unconsumed
    keys fall through to the text surface.
    """

    def __init__(
        self,
        state: EngineState,
        on_accept: AcceptHandler,
        on_change: ChangeCallback | None = None,
    ) -> None:
        self._state = state
        self._on_accept = on_accept
        self._on_change = on_change

    @property
    def status(self) -> EngineStatus:
        return self._state.status

    def handle(self, command: Command) -> bool:
        if command is Command.NEXT:
            return self.move_next()
        if command is Command.PREVIOUS:
            return self.move_previous()
        if command is Command.ACCEPT:
            return self.accept_selected()
        if command is Command.DISMISS:
            return self.dismiss()
        return False

    def move_next(self) -> bool:
        state = self._state
        if not state.suggestions:
            logger.debug("navigation_ignored", command=Command.NEXT.value)
            return False
        if state.selected_index is None:
            state.select(0)
        else:
            state.select(state.selected_index + 1)
        self._notify()
        return True

    def move_previous(self) -> bool:
        state = self._state
        if not state.suggestions:
            logger.debug("navigation_ignored", command=Command.PREVIOUS.value)
            return False
        if state.selected_index is None:
            state.select(len(state.suggestions) - 1)
        else:
            state.select(state.selected_index - 1)
        self._notify()
        return True

    def accept_selected(self) -> bool:
        state = self._state
        index = state.selected_index
        if index is None or not state.suggestions:
            return False
        self._on_accept(state.suggestions[index])
        return True

    def select(self, index: int) -> bool:
        """Pointer selection: highlight ``index`` and accept it."""
        state = self._state
        if index < 0 or index >= len(state.suggestions):
            logger.debug("navigation_ignored", command="select", index=index)
            return False
        state.select(index)
        return self.accept_selected()

    def dismiss(self) -> bool:
        changed = self._state.clear_suggestions()
        if changed:
            self._notify()
        return changed

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()
