from ctxassist.settings import EngineSettings

from .base import BaseProvider, ProviderFactory
from .http import HTTPProvider
from .static import CatalogProvider, PhraseTableProvider


def create_provider(settings: EngineSettings) -> BaseProvider:
    return ProviderFactory.create(settings)


__all__ = [
    "BaseProvider",
    "ProviderFactory",
    "HTTPProvider",
    "CatalogProvider",
    "PhraseTableProvider",
    "create_provider",
]
