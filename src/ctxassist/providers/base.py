from __future__ import annotations

from typing import ClassVar, Type

from ctxassist.errors import UnknownProviderError
from ctxassist.models import Suggestion
from ctxassist.settings import EngineSettings


class BaseProvider:
    """Callable suggestion source: ``await provider(text) -> list[Suggestion]``."""

    kind: ClassVar[str | None] = None

    def __init__(self, settings: EngineSettings) -> None:
        self.settings = settings

    async def __call__(self, text: str) -> list[Suggestion]:
        raise NotImplementedError


class ProviderFactory:
    _registry: ClassVar[dict[str, Type[BaseProvider]]] = {}

    @classmethod
    def register(
        cls,
        kind: str,
        provider_cls: Type[BaseProvider] | None = None,
    ):
        if provider_cls is None:

            def decorator(inner: Type[BaseProvider]) -> Type[BaseProvider]:
                inner.kind = kind
                cls._registry[kind] = inner
                return inner

            return decorator
        provider_cls.kind = kind
        cls._registry[kind] = provider_cls
        return provider_cls

    @classmethod
    def kinds(cls) -> list[str]:
        return sorted(cls._registry)

    @classmethod
    def create(cls, settings: EngineSettings) -> BaseProvider:
        kind = settings.provider.kind
        sub = cls._registry.get(kind)
        if sub is None:
            raise UnknownProviderError(kind)
        return sub(settings)
