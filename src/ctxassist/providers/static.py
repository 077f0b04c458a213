from __future__ import annotations

import asyncio
import random
from typing import Final

from ctxassist.models import Suggestion
from ctxassist.providers.base import BaseProvider, ProviderFactory
from ctxassist.settings import EngineSettings

MIN_RANDOM_CONFIDENCE: Final[float] = 0.6
RANDOM_CONFIDENCE_SPAN: Final[float] = 0.4


@ProviderFactory.register("phrase_table")
class PhraseTableProvider(BaseProvider):
    """Canned completions for the configured trigger phrases.

    Stands in for a model call: waits ``latency_ms`` and scores each
    completion with a random confidence in ``[0.6, 1.0)``.
    """

    def __init__(self, settings: EngineSettings) -> None:
        super().__init__(settings)
        self._random = random.Random(settings.provider.seed)

    async def __call__(self, text: str) -> list[Suggestion]:
        lowered = text.lower()
        for trigger in self.settings.triggers:
            if not lowered.endswith(trigger.phrase):
                continue
            latency_ms = self.settings.provider.latency_ms
            if latency_ms:
                await asyncio.sleep(latency_ms / 1000.0)
            return [
                Suggestion(
                    text=completion,
                    confidence=self._random.random() * RANDOM_CONFIDENCE_SPAN
                    + MIN_RANDOM_CONFIDENCE,
                )
                for completion in trigger.completions
            ]
        return []


@ProviderFactory.register("catalog")
class CatalogProvider(BaseProvider):
    """Filters a fixed list of queries by substring, search-box style."""

    async def __call__(self, text: str) -> list[Suggestion]:
        needle = text.strip().lower()
        if not needle:
            return []
        latency_ms = self.settings.provider.latency_ms
        if latency_ms:
            await asyncio.sleep(latency_ms / 1000.0)
        out: list[Suggestion] = []
        for entry in self.settings.provider.catalog:
            if not entry or needle not in entry.lower():
                continue
            confidence = min(len(needle) / len(entry), 1.0)
            out.append(Suggestion(text=entry, confidence=confidence))
        return out
