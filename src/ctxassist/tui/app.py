from __future__ import annotations

import asyncio
import contextlib
import typing

from rich import console as rich_console
from rich import live as rich_live

from ctxassist.engine import SuggestionEngine, SuggestionProvider
from ctxassist.logger import logger
from ctxassist.models import EngineStatus
from ctxassist.settings import EngineSettings
from ctxassist.tui.keys import InputEvent, InputHandler, KeyEvent
from ctxassist.tui.session import AssistSession


SPINNER_INTERVAL_S: typing.Final[float] = 0.08
EXIT_KEYS: typing.Final[frozenset[str]] = frozenset({"c", "d"})


class DemoApp:
    """Interactive prompt with the suggestion dropdown rendered by ``rich.live``.

    Ctrl+C or Ctrl+D exits; Enter submits the line and echoes it above the
    prompt.
    """

    def __init__(
        self,
        settings: EngineSettings,
        console: rich_console.Console | None = None,
        input_handler: InputHandler | None = None,
        prompt: str = "> ",
        provider: SuggestionProvider | None = None,
    ) -> None:
        self._settings = settings
        self._console = console if console is not None else rich_console.Console()
        self._input_handler = input_handler
        self._engine = SuggestionEngine.from_settings(settings, provider=provider)
        self._session = AssistSession(self._engine, prompt=prompt)
        self._live: rich_live.Live | None = None
        self._exit_event = asyncio.Event()
        self._submitted: list[str] = []
        self._session.subscribe_change(self._refresh)
        self._session.subscribe_submit(self._on_submit)

    @property
    def session(self) -> AssistSession:
        return self._session

    @property
    def submitted(self) -> list[str]:
        return list(self._submitted)

    def request_exit(self) -> None:
        self._exit_event.set()

    def on_input_event(self, event: InputEvent) -> None:
        if not isinstance(event, KeyEvent):
            self._session.handle_mouse(event)
            return
        if event.action == "down" and event.ctrl and event.key in EXIT_KEYS:
            self.request_exit()
            return
        self._session.handle_key(event)

    async def run(self) -> None:
        handler = self._input_handler
        if handler is None:
            from ctxassist.tui.posix import PosixKeyReader

            handler = PosixKeyReader()
        handler.subscribe(self.on_input_event)

        reader_task = asyncio.create_task(handler.run(), name="ctxassist-input")
        spinner_task = asyncio.create_task(self._spin(), name="ctxassist-spinner")
        exit_task = asyncio.create_task(self._exit_event.wait())
        try:
            with rich_live.Live(
                self._session,
                console=self._console,
                auto_refresh=False,
                transient=True,
            ) as live:
                self._live = live
                live.refresh()
                await asyncio.wait(
                    {reader_task, exit_task}, return_when=asyncio.FIRST_COMPLETED
                )
        finally:
            self._live = None
            handler.unsubscribe(self.on_input_event)
            for task in (spinner_task, exit_task, reader_task):
                task.cancel()
            for task in (spinner_task, exit_task, reader_task):
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            await self._engine.aclose()
            logger.debug("demo_closed", submitted=len(self._submitted))

    async def _spin(self) -> None:
        while True:
            await asyncio.sleep(SPINNER_INTERVAL_S)
            if self._session.snapshot.status is EngineStatus.LOADING:
                self._session.view.tick()
                self._refresh()

    def _on_submit(self, value: str) -> None:
        self._submitted.append(value)
        live = self._live
        if live is not None:
            live.console.print(value, markup=False, highlight=False)

    def _refresh(self) -> None:
        live = self._live
        if live is not None:
            live.refresh()


async def run_demo(
    settings: EngineSettings,
    console: rich_console.Console | None = None,
    provider: SuggestionProvider | None = None,
) -> list[str]:
    app = DemoApp(settings, console=console, provider=provider)
    await app.run()
    return app.submitted
