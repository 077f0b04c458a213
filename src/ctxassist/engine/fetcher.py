from __future__ import annotations

import asyncio
import typing

from ctxassist.engine.state import EngineState
from ctxassist.logger import logger
from ctxassist.models import FetchOutcome, Suggestion


ProviderResult = typing.Sequence[Suggestion | typing.Mapping[str, typing.Any]]
SuggestionProvider = typing.Callable[[str], typing.Awaitable[ProviderResult]]
ChangeCallback = typing.Callable[[], None]


def _coerce_suggestion(
    item: Suggestion | typing.Mapping[str, typing.Any],
) -> Suggestion:
    if isinstance(item, Suggestion):
        return item
    return Suggestion.model_validate(item)


class SuggestionFetcher:
    """Runs provider calls and applies their results to an ``EngineState``.

    Every request carries the generation it was issued for. A result is only
    applied when that generation is still the live one; anything else is
    dropped without touching the suggestion list.
    """

    def __init__(
        self,
        provider: SuggestionProvider,
        state: EngineState,
        on_change: ChangeCallback | None = None,
    ) -> None:
        self._provider = provider
        self._state = state
        self._on_change = on_change
        self._tasks: set[asyncio.Task[FetchOutcome]] = set()
        self._latest_generation: int | None = None
        self._last_outcome: FetchOutcome | None = None

    @property
    def in_flight(self) -> int:
        return sum(1 for task in self._tasks if not task.done())

    @property
    def latest_generation(self) -> int | None:
        return self._latest_generation

    @property
    def last_outcome(self) -> FetchOutcome | None:
        """Outcome of the most recently finished ``start`` task."""
        return self._last_outcome

    def start(
        self,
        matched_trigger: str,
        settled_text: str,
        generation: int,
    ) -> asyncio.Task[FetchOutcome]:
        self._begin(generation)
        loop = asyncio.get_running_loop()
        task = loop.create_task(
            self._run(matched_trigger, settled_text, generation),
            name=f"ctxassist-fetch-{generation}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._record_outcome)
        return task

    async def fetch(
        self,
        matched_trigger: str,
        settled_text: str,
        generation: int,
    ) -> FetchOutcome:
        self._begin(generation)
        return await self._run(matched_trigger, settled_text, generation)

    def cancel_all(self) -> None:
        for task in list(self._tasks):
            if not task.done():
                task.cancel()

    async def aclose(self) -> None:
        tasks = list(self._tasks)
        self.cancel_all()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    async def wait(self) -> None:
        """Wait for every outstanding request to finish."""
        while True:
            pending = {task for task in self._tasks if not task.done()}
            if not pending:
                return
            await asyncio.wait(pending)

    def _record_outcome(self, task: asyncio.Task[FetchOutcome]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            self._last_outcome = FetchOutcome.CANCELLED
        elif task.exception() is None:
            self._last_outcome = task.result()

    def _begin(self, generation: int) -> None:
        self._latest_generation = generation
        state = self._state
        state.loading = True
        state.clear_suggestions()
        self._notify()

    async def _run(
        self,
        matched_trigger: str,
        settled_text: str,
        generation: int,
    ) -> FetchOutcome:
        try:
            raw = await self._provider(settled_text)
            suggestions = tuple(_coerce_suggestion(item) for item in raw or ())
        except asyncio.CancelledError:
            self._finish_stale(generation)
            raise
        except Exception as exc:
            if self._is_stale(generation, settled_text):
                self._finish_stale(generation)
                logger.debug(
                    "suggestion_result_stale",
                    trigger=matched_trigger,
                    generation=generation,
                    failed=True,
                )
                return FetchOutcome.STALE
            state = self._state
            state.clear_suggestions()
            state.loading = False
            logger.warning(
                "suggestion_provider_failed",
                trigger=matched_trigger,
                generation=generation,
                error=repr(exc),
            )
            self._notify()
            return FetchOutcome.FAILED

        if self._is_stale(generation, settled_text):
            self._finish_stale(generation)
            logger.debug(
                "suggestion_result_stale",
                trigger=matched_trigger,
                generation=generation,
                live_generation=self._state.generation,
            )
            return FetchOutcome.STALE

        state = self._state
        state.replace_suggestions(suggestions)
        state.loading = False
        self._notify()
        return FetchOutcome.APPLIED

    def _is_stale(self, generation: int, settled_text: str) -> bool:
        state = self._state
        if generation != state.generation:
            return True
        # Typing after the value settled makes the result stale before the
        # next settle bumps the generation.
        return state.raw_text != settled_text

    def _finish_stale(self, generation: int) -> None:
        if generation != self._latest_generation:
            return
        if not self._state.loading:
            return
        self._state.loading = False
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()

