from __future__ import annotations

import asyncio
import contextlib
import typing

import pytest
from aiohttp import web

from ctxassist.errors import ProviderError, SettingsError
from ctxassist.providers import HTTPProvider
from ctxassist.settings import build_settings


Handler = typing.Callable[[web.Request], typing.Awaitable[web.StreamResponse]]


@contextlib.asynccontextmanager
async def _serve(handler: Handler) -> typing.AsyncIterator[str]:
    app = web.Application()
    app.router.add_post("/suggest", handler)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    try:
        sockets = list(site._server.sockets) if site._server is not None else []
        assert sockets
        host, port = sockets[0].getsockname()[:2]
        yield f"http://{host}:{port}/suggest"
    finally:
        await runner.cleanup()


def _provider(url: str, **provider: typing.Any) -> HTTPProvider:
    return HTTPProvider(
        build_settings({"provider": {"kind": "http", "url": url, **provider}})
    )


@pytest.mark.asyncio
async def test_posts_text_and_parses_suggestions() -> None:
    received: list[dict] = []

    async def handler(request: web.Request) -> web.Response:
        received.append(await request.json())
        assert request.headers.get("X-Client") == "ctxassist-tests"
        return web.json_response(
            {
                "suggestions": [
                    {"text": "help me understand", "confidence": 0.9},
                    {"text": "explain how this works", "confidence": 0.6},
                ]
            }
        )

    async with _serve(handler) as url:
        provider = _provider(url, headers={"X-Client": "ctxassist-tests"})
        suggestions = await provider("Can you")

    assert received == [{"text": "Can you"}]
    assert [s.text for s in suggestions] == [
        "help me understand",
        "explain how this works",
    ]
    assert suggestions[0].confidence == pytest.approx(0.9)
    assert suggestions[1].confidence == pytest.approx(0.6)


@pytest.mark.asyncio
async def test_error_status_raises_provider_error() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.Response(status=503, text="busy")

    async with _serve(handler) as url:
        with pytest.raises(ProviderError, match="HTTP 503"):
            await _provider(url)("I need")


@pytest.mark.asyncio
async def test_malformed_body_raises_provider_error() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.json_response({"suggestions": [{"confidence": 0.2}]})

    async with _serve(handler) as url:
        with pytest.raises(ProviderError, match="malformed"):
            await _provider(url)("I need")


@pytest.mark.asyncio
async def test_suggestion_without_confidence_is_malformed() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.json_response({"suggestions": [{"text": "help with"}]})

    async with _serve(handler) as url:
        with pytest.raises(ProviderError, match="malformed"):
            await _provider(url)("I need")


@pytest.mark.asyncio
async def test_non_json_body_raises_provider_error() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.Response(text="<html>nope</html>")

    async with _serve(handler) as url:
        with pytest.raises(ProviderError, match="malformed"):
            await _provider(url)("I need")


@pytest.mark.asyncio
async def test_transport_timeout_raises_provider_error() -> None:
    async def handler(request: web.Request) -> web.Response:
        await asyncio.sleep(0.5)
        return web.json_response({"suggestions": []})

    async with _serve(handler) as url:
        with pytest.raises(ProviderError, match="timed out"):
            await _provider(url, timeout_s=0.05)("I need")


def test_url_is_required() -> None:
    with pytest.raises(SettingsError):
        HTTPProvider(build_settings({"provider": {"kind": "http"}}))
