from __future__ import annotations

import dataclasses
import typing

from ctxassist.models import EngineSnapshot, EngineStatus, Suggestion


@dataclasses.dataclass
class EngineState:
    raw_text: str = ""
    settled_text: str = ""
    matched_trigger: str | None = None
    suggestions: tuple[Suggestion, ...] = ()
    selected_index: int | None = None
    loading: bool = False
    generation: int = 0

    @property
    def status(self) -> EngineStatus:
        if self.loading:
            return EngineStatus.LOADING
        if not self.suggestions:
            return EngineStatus.IDLE
        if self.selected_index is None:
            return EngineStatus.SUGGESTED
        return EngineStatus.SELECTING

    def replace_suggestions(self, suggestions: typing.Iterable[Suggestion]) -> None:
        self.suggestions = tuple(suggestions)
        self.selected_index = None

    def clear_suggestions(self) -> bool:
        """Drop suggestions and selection; returns True if anything changed."""
        changed = bool(self.suggestions) or self.selected_index is not None
        self.suggestions = ()
        self.selected_index = None
        return changed

    def select(self, index: int | None) -> None:
        if index is None:
            self.selected_index = None
            return
        if not self.suggestions:
            self.selected_index = None
            return
        self.selected_index = max(0, min(index, len(self.suggestions) - 1))

    def snapshot(self, hint: str | None = None) -> EngineSnapshot:
        return EngineSnapshot(
            status=self.status,
            raw_text=self.raw_text,
            settled_text=self.settled_text,
            matched_trigger=self.matched_trigger,
            suggestions=self.suggestions,
            selected_index=self.selected_index,
            loading=self.loading,
            generation=self.generation,
            hint=hint,
        )
