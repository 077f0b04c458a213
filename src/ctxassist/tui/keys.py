from __future__ import annotations

import asyncio
import inspect
import typing
from dataclasses import dataclass

from ctxassist.models import Command


KeyAction = typing.Literal["down", "up"]
MouseAction = typing.Literal["move", "down", "up", "scroll"]


@dataclass(frozen=True)
class KeyEvent:
    action: KeyAction
    key: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False
    text: typing.Optional[str] = None


@dataclass(frozen=True)
class MouseEvent:
    """Pointer event addressed to a row of the suggestion list."""

    action: MouseAction
    row: int
    button: typing.Literal["left", "middle", "right", "none"] = "none"


InputEvent = typing.Union[KeyEvent, MouseEvent]
EventSubscriber = typing.Callable[[InputEvent], typing.Awaitable[None] | None]


@dataclass(frozen=True)
class KeyBinding:
    key: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False

    @classmethod
    def from_event(cls, event: KeyEvent) -> "KeyBinding":
        return cls(key=event.key, ctrl=event.ctrl, alt=event.alt, shift=event.shift)


# Keys the suggestion popup consumes while it is open.
SUGGESTION_KEYMAP: typing.Final[dict[KeyBinding, Command]] = {
    KeyBinding("down"): Command.NEXT,
    KeyBinding("n", ctrl=True): Command.NEXT,
    KeyBinding("up"): Command.PREVIOUS,
    KeyBinding("p", ctrl=True): Command.PREVIOUS,
    KeyBinding("tab"): Command.ACCEPT,
    KeyBinding("enter"): Command.ACCEPT,
    KeyBinding("esc"): Command.DISMISS,
    KeyBinding("escape"): Command.DISMISS,
}


def command_for_key(
    event: KeyEvent,
    keymap: typing.Mapping[KeyBinding, Command] = SUGGESTION_KEYMAP,
) -> Command | None:
    if event.action != "down":
        return None
    return keymap.get(KeyBinding.from_event(event))


class InputHandler:
    def __init__(self) -> None:
        self._subscribers: list[EventSubscriber] = []

    def subscribe(self, subscriber: EventSubscriber) -> None:
        if subscriber not in self._subscribers:
            self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: EventSubscriber) -> None:
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    def publish(self, event: InputEvent) -> None:
        if not self._subscribers:
            return
        for subscriber in list(self._subscribers):
            result = subscriber(event)
            if inspect.isawaitable(result):
                asyncio.get_running_loop().create_task(
                    typing.cast(typing.Coroutine[typing.Any, typing.Any, None], result)
                )

    async def run(self) -> None:
        raise NotImplementedError
