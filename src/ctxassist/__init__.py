from .engine import SuggestionEngine
from .errors import CtxAssistError, ProviderError, SettingsError, UnknownProviderError
from .models import (
    AcceptanceMode,
    Command,
    EngineSnapshot,
    EngineStatus,
    FetchOutcome,
    Suggestion,
    TriggerConfig,
)
from .presets import get_preset
from .settings import EngineSettings, build_settings, load_settings

__version__ = "0.1.0"

__all__ = [
    "SuggestionEngine",
    "CtxAssistError",
    "ProviderError",
    "SettingsError",
    "UnknownProviderError",
    "AcceptanceMode",
    "Command",
    "EngineSnapshot",
    "EngineStatus",
    "FetchOutcome",
    "Suggestion",
    "TriggerConfig",
    "get_preset",
    "EngineSettings",
    "build_settings",
    "load_settings",
]
