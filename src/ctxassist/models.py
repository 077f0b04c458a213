from __future__ import annotations

import enum
import typing

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Suggestion(BaseModel):
    """A candidate completion produced by a provider.

    ``confidence`` is expected in ``[0, 1]`` but is passed through as-is;
    ranking is the provider's business.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1)
    confidence: float


class EngineStatus(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUGGESTED = "suggested"
    SELECTING = "selecting"


class FetchOutcome(str, enum.Enum):
    APPLIED = "applied"
    STALE = "stale"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Command(str, enum.Enum):
    NEXT = "next"
    PREVIOUS = "previous"
    ACCEPT = "accept"
    DISMISS = "dismiss"


class AcceptanceMode(str, enum.Enum):
    APPEND = "append"
    CONCATENATE = "concatenate"
    REPLACE = "replace"


class TriggerConfig(BaseModel):
    phrase: str
    completions: list[str] = Field(default_factory=list)
    hint: typing.Optional[str] = Field(default=None)

    @field_validator("phrase")
    @classmethod
    def _normalize_phrase(cls, v: str) -> str:
        phrase = v.lower()
        if not phrase.strip():
            raise ValueError("trigger phrase must not be empty")
        return phrase


class EngineSnapshot(BaseModel):
    """Read-only view of the engine state handed to subscribers."""

    model_config = ConfigDict(frozen=True)

    status: EngineStatus
    raw_text: str
    settled_text: str
    matched_trigger: typing.Optional[str] = None
    suggestions: tuple[Suggestion, ...] = ()
    selected_index: typing.Optional[int] = None
    loading: bool = False
    generation: int = 0
    hint: typing.Optional[str] = None

    @property
    def selected(self) -> Suggestion | None:
        if self.selected_index is None:
            return None
        return self.suggestions[self.selected_index]
