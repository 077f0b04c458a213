from __future__ import annotations

import pytest

from ctxassist.errors import UnknownProviderError
from ctxassist.providers import (
    CatalogProvider,
    PhraseTableProvider,
    ProviderFactory,
    create_provider,
)
from ctxassist.settings import build_settings


def _phrase_settings(seed: int | None = None):
    return build_settings(
        {
            "provider": {"kind": "phrase_table", "latency_ms": 0, "seed": seed},
            "triggers": {
                "i need": ["more information about", "to finish this by", "help with"],
                "can you": ["provide more details"],
            },
        }
    )


@pytest.mark.asyncio
async def test_phrase_table_returns_completions_for_trailing_phrase() -> None:
    provider = PhraseTableProvider(_phrase_settings())

    suggestions = await provider("Hey, I NEED")

    assert [s.text for s in suggestions] == [
        "more information about",
        "to finish this by",
        "help with",
    ]
    assert all(0.6 <= s.confidence < 1.0 for s in suggestions)


@pytest.mark.asyncio
async def test_phrase_table_without_match_returns_empty() -> None:
    provider = PhraseTableProvider(_phrase_settings())
    assert await provider("nothing to see") == []


@pytest.mark.asyncio
async def test_phrase_table_seed_makes_confidence_repeatable() -> None:
    first = await PhraseTableProvider(_phrase_settings(seed=7))("i need")
    second = await PhraseTableProvider(_phrase_settings(seed=7))("i need")
    assert [s.confidence for s in first] == [s.confidence for s in second]


@pytest.mark.asyncio
async def test_catalog_filters_by_substring() -> None:
    settings = build_settings(
        {
            "provider": {
                "kind": "catalog",
                "latency_ms": 0,
                "catalog": [
                    "contextual assistance patterns",
                    "progressive disclosure",
                    "Contextual assistance examples",
                ],
            },
        }
    )
    provider = CatalogProvider(settings)

    suggestions = await provider("  Contextual ")

    assert [s.text for s in suggestions] == [
        "contextual assistance patterns",
        "Contextual assistance examples",
    ]
    assert suggestions[0].confidence == pytest.approx(10 / 30)
    assert await provider("   ") == []


def test_factory_resolves_registered_kinds() -> None:
    assert {"phrase_table", "catalog", "http"} <= set(ProviderFactory.kinds())
    provider = create_provider(_phrase_settings())
    assert isinstance(provider, PhraseTableProvider)
    assert provider.kind == "phrase_table"


def test_factory_rejects_unknown_kind() -> None:
    settings = build_settings({"provider": {"kind": "oracle"}})
    with pytest.raises(UnknownProviderError) as excinfo:
        create_provider(settings)
    assert excinfo.value.kind == "oracle"
