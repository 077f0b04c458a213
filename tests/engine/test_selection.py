from __future__ import annotations

from ctxassist.engine.selection import SelectionStateMachine
from ctxassist.engine.state import EngineState
from ctxassist.models import Command, EngineStatus, Suggestion


def _machine(count: int = 3) -> tuple[SelectionStateMachine, EngineState, list[str]]:
    state = EngineState(
        raw_text="I want to",
        settled_text="I want to",
        matched_trigger="i want to",
        suggestions=tuple(Suggestion(text=f"option {i}", confidence=0.8) for i in range(count)),
    )
    accepted: list[str] = []
    machine = SelectionStateMachine(
        state, on_accept=lambda suggestion: accepted.append(suggestion.text)
    )
    return machine, state, accepted


def test_next_starts_at_first_and_clamps_at_last() -> None:
    machine, state, _ = _machine()
    assert machine.status is EngineStatus.SUGGESTED

    for expected in (0, 1, 2, 2, 2):
        assert machine.handle(Command.NEXT)
        assert state.selected_index == expected
    assert machine.status is EngineStatus.SELECTING


def test_previous_from_nothing_selects_last_and_clamps_at_first() -> None:
    machine, state, _ = _machine()

    for expected in (2, 1, 0, 0):
        assert machine.handle(Command.PREVIOUS)
        assert state.selected_index == expected


def test_navigation_without_suggestions_is_not_consumed() -> None:
    machine, state, _ = _machine(count=0)

    assert machine.handle(Command.NEXT) is False
    assert machine.handle(Command.PREVIOUS) is False
    assert state.selected_index is None
    assert machine.status is EngineStatus.IDLE


def test_accept_without_selection_is_a_no_op() -> None:
    machine, state, accepted = _machine()

    assert machine.handle(Command.ACCEPT) is False
    assert accepted == []
    assert len(state.suggestions) == 3


def test_accept_hands_over_selected_suggestion() -> None:
    machine, _, accepted = _machine()

    machine.handle(Command.NEXT)
    machine.handle(Command.NEXT)
    assert machine.handle(Command.ACCEPT)
    assert accepted == ["option 1"]


def test_dismiss_clears_in_any_state() -> None:
    machine, state, _ = _machine()
    machine.handle(Command.NEXT)

    assert machine.handle(Command.DISMISS)
    assert state.suggestions == ()
    assert state.selected_index is None
    assert machine.status is EngineStatus.IDLE
    # Nothing left to clear.
    assert machine.handle(Command.DISMISS) is False


def test_pointer_select_accepts_row() -> None:
    machine, state, accepted = _machine()

    assert machine.select(2)
    assert state.selected_index == 2
    assert accepted == ["option 2"]
    assert machine.select(7) is False
    assert machine.select(-1) is False


def test_change_callback_fires_on_navigation() -> None:
    state = EngineState(suggestions=(Suggestion(text="a", confidence=0.8), Suggestion(text="b", confidence=0.8)))
    changes: list[int | None] = []
    machine = SelectionStateMachine(
        state,
        on_accept=lambda suggestion: None,
        on_change=lambda: changes.append(state.selected_index),
    )

    machine.handle(Command.NEXT)
    machine.handle(Command.NEXT)
    machine.handle(Command.DISMISS)

    assert changes == [0, 1, None]
