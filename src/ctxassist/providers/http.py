from __future__ import annotations

import asyncio
from typing import Optional

import aiohttp
from pydantic import BaseModel, Field, ValidationError

from ctxassist.errors import ProviderError, SettingsError
from ctxassist.models import Suggestion
from ctxassist.providers.base import BaseProvider, ProviderFactory
from ctxassist.settings import EngineSettings


class SuggestionRequest(BaseModel):
    text: str


class SuggestionResponse(BaseModel):
    suggestions: list[Suggestion] = Field(default_factory=list)


@ProviderFactory.register("http")
class HTTPProvider(BaseProvider):
    """POSTs the settled text to a remote endpoint and parses its suggestions.

    Request body: ``{"text": "..."}``.
    Response body: ``{"suggestions": [{"text": "...", "confidence": 0.8}]}``.
    """

    def __init__(self, settings: EngineSettings) -> None:
        super().__init__(settings)
        url = settings.provider.url
        if not url:
            raise SettingsError("http provider requires provider.url")
        self._url: str = url
        timeout_s = settings.provider.timeout_s
        self._timeout: Optional[aiohttp.ClientTimeout] = (
            aiohttp.ClientTimeout(total=timeout_s) if timeout_s is not None else None
        )

    @property
    def url(self) -> str:
        return self._url

    async def __call__(self, text: str) -> list[Suggestion]:
        body = SuggestionRequest(text=text).model_dump()
        headers = dict(self.settings.provider.headers)
        session_kwargs = {}
        if self._timeout is not None:
            session_kwargs["timeout"] = self._timeout
        try:
            async with aiohttp.ClientSession(**session_kwargs) as session:
                async with session.post(self._url, json=body, headers=headers) as resp:
                    if resp.status >= 300:
                        raise ProviderError(
                            f"suggestion endpoint returned HTTP {resp.status}"
                        )
                    try:
                        data = await resp.json(content_type=None)
                    except ValueError as exc:
                        raise ProviderError(
                            f"malformed suggestion response: {exc}"
                        ) from exc
        except asyncio.TimeoutError as exc:
            raise ProviderError("suggestion endpoint timed out") from exc
        except aiohttp.ClientError as exc:
            raise ProviderError(f"suggestion endpoint unreachable: {exc}") from exc

        try:
            return SuggestionResponse.model_validate(data).suggestions
        except ValidationError as exc:
            raise ProviderError(f"malformed suggestion response: {exc}") from exc
