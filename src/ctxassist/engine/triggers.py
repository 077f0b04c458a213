from __future__ import annotations

import typing


class TriggerMatcher:
    """Case-insensitive suffix matcher over an ordered set of trigger phrases."""

    def __init__(self, phrases: typing.Iterable[str], min_length: int = 0) -> None:
        self._phrases: tuple[str, ...] = tuple(
            phrase.lower() for phrase in phrases if phrase
        )
        self._min_length = min_length

    @property
    def phrases(self) -> tuple[str, ...]:
        return self._phrases

    @property
    def min_length(self) -> int:
        return self._min_length

    def match(self, settled_text: str) -> str | None:
        if not settled_text or len(settled_text) < self._min_length:
            return None
        lowered = settled_text.lower()
        for phrase in self._phrases:
            if lowered.endswith(phrase):
                return phrase
        return None
