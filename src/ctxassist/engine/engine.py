from __future__ import annotations

import asyncio
import inspect
import typing

from ctxassist.engine.acceptance import AcceptancePolicy, AcceptanceResolver, policy_for
from ctxassist.engine.debounce import DebounceTimer
from ctxassist.engine.fetcher import SuggestionFetcher, SuggestionProvider
from ctxassist.engine.selection import SelectionStateMachine
from ctxassist.engine.state import EngineState
from ctxassist.engine.triggers import TriggerMatcher
from ctxassist.models import Command, EngineSnapshot, Suggestion
from ctxassist.settings import DEFAULT_DEBOUNCE_MS, DEFAULT_MIN_LENGTH, EngineSettings


SnapshotSubscriber = typing.Callable[
    [EngineSnapshot], typing.Awaitable[None] | None
]
WriteBack = typing.Callable[[str], None]


class SuggestionEngine:
    """Trigger-based contextual suggestions for one text input surface.

    The input source calls ``notify`` on every change. Once the text has been
    quiet for the debounce delay it is matched against the trigger phrases;
    a match starts a provider fetch tagged with the current generation.
    Subscribers receive an ``EngineSnapshot`` after every state change and
    forward navigation/accept/dismiss commands through ``handle``.
    """

    def __init__(
        self,
        provider: SuggestionProvider,
        phrases: typing.Iterable[str],
        *,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        min_length: int = DEFAULT_MIN_LENGTH,
        policy: AcceptancePolicy | None = None,
        hints: typing.Mapping[str, str] | None = None,
        on_accept: WriteBack | None = None,
    ) -> None:
        self._state = EngineState()
        self._matcher = TriggerMatcher(phrases, min_length=min_length)
        self._debounce = DebounceTimer(debounce_ms, self._handle_settled)
        self._fetcher = SuggestionFetcher(provider, self._state, self._emit)
        self._selection = SelectionStateMachine(
            self._state,
            on_accept=self._handle_accept,
            on_change=self._emit,
        )
        self._resolver = AcceptanceResolver(policy)
        self._hints: dict[str, str] = dict(hints or {})
        self._on_accept = on_accept
        self._subscribers: list[SnapshotSubscriber] = []
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        settings: EngineSettings,
        provider: SuggestionProvider | None = None,
        on_accept: WriteBack | None = None,
    ) -> "SuggestionEngine":
        if provider is None:
            from ctxassist.providers import create_provider

            provider = create_provider(settings)
        hints: dict[str, str] = {}
        for phrase in settings.phrases:
            hint = settings.hint_for(phrase)
            if hint is not None:
                hints[phrase] = hint
        return cls(
            provider,
            settings.phrases,
            debounce_ms=settings.debounce_ms,
            min_length=settings.min_length,
            policy=policy_for(settings.acceptance),
            hints=hints,
            on_accept=on_accept,
        )

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def matcher(self) -> TriggerMatcher:
        return self._matcher

    @property
    def closed(self) -> bool:
        return self._closed

    def snapshot(self) -> EngineSnapshot:
        state = self._state
        return state.snapshot(hint=self._hints.get(state.matched_trigger or ""))

    def subscribe(self, subscriber: SnapshotSubscriber) -> None:
        if subscriber not in self._subscribers:
            self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: SnapshotSubscriber) -> None:
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    def set_write_back(self, on_accept: WriteBack | None) -> None:
        self._on_accept = on_accept

    def notify(self, value: str) -> None:
        if self._closed:
            return
        state = self._state
        if value == state.raw_text:
            return
        state.raw_text = value
        # Shown suggestions are stale as soon as the text changes.
        if state.clear_suggestions():
            self._emit()
        self._debounce.notify(value)

    def handle(self, command: Command) -> bool:
        if self._closed:
            return False
        return self._selection.handle(command)

    def select(self, index: int) -> bool:
        if self._closed:
            return False
        return self._selection.select(index)

    def dismiss(self) -> bool:
        if self._closed:
            return False
        return self._selection.dismiss()

    async def wait_idle(self) -> None:
        """Wait for the pending debounce and any fetch it starts."""
        await self._debounce.wait()
        await self._fetcher.wait()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._debounce.close()
        self._fetcher.cancel_all()
        self._subscribers.clear()

    async def aclose(self) -> None:
        self.close()
        await self._fetcher.aclose()

    def _handle_settled(self, value: str) -> None:
        if self._closed:
            return
        state = self._state
        state.settled_text = value
        state.generation += 1
        trigger = self._matcher.match(value)
        state.matched_trigger = trigger
        if trigger is None:
            state.clear_suggestions()
            state.loading = False
            self._emit()
            return
        self._fetcher.start(trigger, value, state.generation)

    def _handle_accept(self, suggestion: Suggestion) -> None:
        state = self._state
        new_text = self._resolver.accept(
            state.raw_text,
            state.matched_trigger,
            suggestion.text,
        )
        self._debounce.cancel()
        state.raw_text = new_text
        state.settled_text = new_text
        state.generation += 1
        state.matched_trigger = None
        state.clear_suggestions()
        state.loading = False
        self._emit()
        if self._on_accept is not None:
            self._on_accept(new_text)

    def _emit(self) -> None:
        if not self._subscribers:
            return
        snapshot = self.snapshot()
        for subscriber in list(self._subscribers):
            result = subscriber(snapshot)
            if inspect.isawaitable(result):
                asyncio.get_running_loop().create_task(
                    typing.cast(typing.Coroutine[typing.Any, typing.Any, None], result)
                )
