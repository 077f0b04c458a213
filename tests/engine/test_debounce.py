from __future__ import annotations

import asyncio

import pytest

from ctxassist.engine.debounce import DebounceTimer


@pytest.mark.asyncio
async def test_burst_fires_once_with_last_value() -> None:
    settled: list[str] = []
    timer = DebounceTimer(20, settled.append)

    for value in ("I", "I w", "I wa", "I want"):
        timer.notify(value)
        await asyncio.sleep(0.002)
    assert timer.pending
    await timer.wait()

    assert settled == ["I want"]
    assert not timer.pending


@pytest.mark.asyncio
async def test_separate_bursts_fire_separately() -> None:
    settled: list[str] = []
    timer = DebounceTimer(5, settled.append)

    timer.notify("a")
    await timer.wait()
    timer.notify("ab")
    await timer.wait()

    assert settled == ["a", "ab"]


@pytest.mark.asyncio
async def test_zero_delay_still_waits_for_a_loop_turn() -> None:
    settled: list[str] = []
    timer = DebounceTimer(0, settled.append)

    timer.notify("x")
    assert settled == []
    await timer.wait()
    assert settled == ["x"]


@pytest.mark.asyncio
async def test_cancel_drops_pending_emission() -> None:
    settled: list[str] = []
    timer = DebounceTimer(10, settled.append)

    timer.notify("hello")
    timer.cancel()
    await asyncio.sleep(0.03)

    assert settled == []
    assert not timer.pending


@pytest.mark.asyncio
async def test_close_ignores_later_notifications() -> None:
    settled: list[str] = []
    timer = DebounceTimer(5, settled.append)

    timer.notify("before")
    timer.close()
    timer.notify("after")
    await asyncio.sleep(0.02)

    assert timer.closed
    assert settled == []
