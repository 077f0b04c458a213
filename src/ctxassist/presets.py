from __future__ import annotations

from typing import Any, Dict, Final

from ctxassist.errors import SettingsError
from ctxassist.settings import EngineSettings, build_settings

# Editor assistant: trailing phrases, three completions each, spliced after the
# phrase with a single space.
EDITOR_PRESET: Final[Dict[str, Any]] = {
    "debounce_ms": 500,
    "min_length": 6,
    "acceptance": "append",
    "provider": {"kind": "phrase_table", "latency_ms": 300},
    "triggers": [
        {
            "phrase": "i want to",
            "completions": [
                "create a new project",
                "learn more about",
                "schedule a meeting",
            ],
        },
        {
            "phrase": "i need",
            "completions": [
                "more information about",
                "to finish this by",
                "help with",
            ],
        },
        {
            "phrase": "can you",
            "completions": [
                "provide more details",
                "explain how this works",
                "help me understand",
            ],
        },
        {
            "phrase": "how do i",
            "completions": [
                "implement this feature",
                "solve this problem",
                "get started with",
            ],
        },
    ],
}

# Ghost text: a single continuation that already carries its leading space or
# punctuation.
GHOST_PRESET: Final[Dict[str, Any]] = {
    "debounce_ms": 800,
    "min_length": 3,
    "acceptance": "concatenate",
    "provider": {"kind": "phrase_table", "latency_ms": 0},
    "triggers": [
        {
            "phrase": "i want to",
            "completions": [" create a responsive layout for my website"],
        },
        {
            "phrase": "the problem with",
            "completions": [
                " current AI interfaces is that they often lack transparency"
            ],
        },
        {
            "phrase": "users need",
            "completions": [
                " contextual assistance that appears at the right time"
                " without being intrusive"
            ],
        },
        {
            "phrase": "in my experience",
            "completions": [
                ", the most effective AI tools adapt to user behavior over time"
            ],
        },
        {
            "phrase": "ai should",
            "completions": [" provide explanations for its suggestions to build trust"],
        },
    ],
}

# Search box: the catalog is filtered by the whole query and the chosen entry
# replaces it.
SEARCH_PRESET: Final[Dict[str, Any]] = {
    "debounce_ms": 300,
    "min_length": 6,
    "acceptance": "replace",
    "provider": {
        "kind": "catalog",
        "latency_ms": 0,
        "catalog": [
            "contextual assistance patterns",
            "contextual assistance examples",
            "contextual assistance vs progressive disclosure",
            "contextual assistance best practices",
            "contextual assistance in mobile apps",
        ],
    },
    "triggers": [
        {
            "phrase": "contex",
            "hint": (
                'Looking for "contextual assistance"? Try refining your search'
                " with specific use cases or platforms."
            ),
        },
        {
            "phrase": "best pract",
            "hint": (
                "For best practices, you might want to include your industry"
                " or specific application area."
            ),
        },
        {
            "phrase": "examples",
            "hint": (
                'Try searching for specific platforms like "mobile" or "web"'
                " to see more relevant examples."
            ),
        },
    ],
}

PRESETS: Final[Dict[str, Dict[str, Any]]] = {
    "editor": EDITOR_PRESET,
    "ghost": GHOST_PRESET,
    "search": SEARCH_PRESET,
}


def get_preset(name: str) -> EngineSettings:
    data = PRESETS.get(name)
    if data is None:
        raise SettingsError(
            f"Unknown preset {name!r}; expected one of: {', '.join(sorted(PRESETS))}"
        )
    return build_settings(data)
