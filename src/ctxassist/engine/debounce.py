from __future__ import annotations

import asyncio
import typing


SettledCallback = typing.Callable[[str], None]


class DebounceTimer:
    """Collapses a burst of ``notify`` calls into one ``settled`` callback.

    The callback fires once with the last notified value after ``delay_ms``
    of quiet. Must be driven from a running event loop.
    """

    def __init__(self, delay_ms: int, on_settled: SettledCallback) -> None:
        self._delay_ms = delay_ms
        self._on_settled = on_settled
        self._task: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def pending(self) -> bool:
        task = self._task
        return task is not None and not task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def notify(self, value: str) -> None:
        if self._closed:
            return
        self.cancel()
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._wait_and_fire(value))

    def cancel(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()

    def close(self) -> None:
        self.cancel()
        self._closed = True

    async def wait(self) -> None:
        """Wait until the pending emission has fired or been cancelled."""
        task = self._task
        if task is None or task.done():
            return
        await asyncio.wait({task})

    async def _wait_and_fire(self, value: str) -> None:
        try:
            await asyncio.sleep(self._delay_ms / 1000.0)
        except asyncio.CancelledError:
            return
        if self._closed or self._task is not asyncio.current_task():
            return
        self._task = None
        self._on_settled(value)

