from .acceptance import (
    AcceptancePolicy,
    AcceptanceResolver,
    AppendAfterTrigger,
    ConcatenateAfterTrigger,
    ReplaceText,
    policy_for,
)
from .debounce import DebounceTimer
from .engine import SuggestionEngine
from .fetcher import SuggestionFetcher, SuggestionProvider
from .selection import SelectionStateMachine
from .state import EngineState
from .triggers import TriggerMatcher

__all__ = [
    "AcceptancePolicy",
    "AcceptanceResolver",
    "AppendAfterTrigger",
    "ConcatenateAfterTrigger",
    "ReplaceText",
    "policy_for",
    "DebounceTimer",
    "SuggestionEngine",
    "SuggestionFetcher",
    "SuggestionProvider",
    "SelectionStateMachine",
    "EngineState",
    "TriggerMatcher",
]
