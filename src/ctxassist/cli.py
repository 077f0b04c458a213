from __future__ import annotations

import asyncio
import sys
from pathlib import Path
import typing

import click
from rich import console as rich_console
from rich import table as rich_table

from ctxassist.engine import SuggestionEngine
from ctxassist.errors import CtxAssistError
from ctxassist.logger import configure_logging, logger
from ctxassist.models import EngineSnapshot
from ctxassist.presets import PRESETS, get_preset
from ctxassist.providers import BaseProvider, create_provider
from ctxassist.settings import EngineSettings, load_settings


LOG_LEVELS: typing.Final[tuple[str, ...]] = ("debug", "info", "warning", "error")


def _resolve_settings(preset: str, config: Path | None) -> EngineSettings:
    if config is not None:
        return load_settings(config)
    return get_preset(preset)


def _prepare(
    preset: str, config: Path | None
) -> tuple[EngineSettings, BaseProvider]:
    try:
        settings = _resolve_settings(preset, config)
        return settings, create_provider(settings)
    except CtxAssistError as exc:
        raise click.ClickException(str(exc)) from exc


def _settings_options(
    func: typing.Callable[..., typing.Any],
) -> typing.Callable[..., typing.Any]:
    func = click.option(
        "--config",
        "config",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="YAML or JSON settings file; overrides --preset.",
    )(func)
    func = click.option(
        "--preset",
        type=click.Choice(sorted(PRESETS)),
        default="editor",
        show_default=True,
    )(func)
    return func


def _print_suggestions(
    console: rich_console.Console, snapshot: EngineSnapshot
) -> None:
    if snapshot.matched_trigger is None:
        console.print("[dim]No trigger phrase matched.[/dim]")
        return
    if not snapshot.suggestions:
        console.print(
            f"[dim]No suggestions for trigger[/dim] {snapshot.matched_trigger!r}"
        )
        return
    table = rich_table.Table(title=f"Trigger: {snapshot.matched_trigger}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Suggestion")
    table.add_column("Confidence", justify="right")
    for index, suggestion in enumerate(snapshot.suggestions, start=1):
        table.add_row(str(index), suggestion.text, f"{suggestion.confidence:.0%}")
    console.print(table)
    if snapshot.hint:
        console.print(f"[blue]{snapshot.hint}[/blue]")


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS),
    default="warning",
    show_default=True,
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write logs to this file.",
)
def main(log_level: str, log_file: Path | None) -> None:
    """Contextual suggestion engine playground."""
    configure_logging(level=log_level, log_file=log_file)


@main.command("presets")
def presets_command() -> None:
    """List the built-in presets."""
    console = rich_console.Console()
    table = rich_table.Table()
    table.add_column("Preset")
    table.add_column("Debounce", justify="right")
    table.add_column("Min length", justify="right")
    table.add_column("Acceptance")
    table.add_column("Provider")
    table.add_column("Triggers")
    for name in sorted(PRESETS):
        settings = get_preset(name)
        table.add_row(
            name,
            f"{settings.debounce_ms} ms",
            str(settings.min_length),
            settings.acceptance.value,
            settings.provider.kind,
            ", ".join(settings.phrases),
        )
    console.print(table)


@main.command("suggest")
@click.argument("text")
@_settings_options
def suggest_command(text: str, preset: str, config: Path | None) -> None:
    """Feed TEXT through a fresh engine and print the suggestions."""
    console = rich_console.Console()
    settings, provider = _prepare(preset, config)

    async def _run() -> EngineSnapshot:
        engine = SuggestionEngine.from_settings(settings, provider=provider)
        try:
            engine.notify(text)
            await engine.wait_idle()
            return engine.snapshot()
        finally:
            await engine.aclose()

    snapshot = asyncio.run(_run())
    _print_suggestions(console, snapshot)


@main.command("replay")
@click.argument("text")
@_settings_options
@click.option(
    "--interval-ms",
    type=click.IntRange(min=0),
    default=100,
    show_default=True,
    help="Delay between typed characters.",
)
def replay_command(
    text: str, preset: str, config: Path | None, interval_ms: int
) -> None:
    """Type TEXT one character at a time and print every published snapshot."""
    console = rich_console.Console()
    settings, provider = _prepare(preset, config)

    def _print_snapshot(snapshot: EngineSnapshot) -> None:
        console.print(
            f"[dim]gen={snapshot.generation}[/dim] "
            f"{snapshot.status.value:<9} "
            f"{snapshot.raw_text!r} "
            f"suggestions={len(snapshot.suggestions)}",
            highlight=False,
        )

    async def _run() -> EngineSnapshot:
        engine = SuggestionEngine.from_settings(settings, provider=provider)
        engine.subscribe(_print_snapshot)
        try:
            for end in range(1, len(text) + 1):
                engine.notify(text[:end])
                await asyncio.sleep(interval_ms / 1000.0)
            await engine.wait_idle()
            return engine.snapshot()
        finally:
            await engine.aclose()

    snapshot = asyncio.run(_run())
    _print_suggestions(console, snapshot)


@main.command("demo")
@_settings_options
def demo_command(preset: str, config: Path | None) -> None:
    """Interactive prompt with live suggestions (POSIX terminals only)."""
    if sys.platform == "win32":
        raise click.ClickException("The demo needs a POSIX terminal.")
    if not sys.stdin.isatty():
        raise click.ClickException("The demo needs an interactive terminal.")
    settings, provider = _prepare(preset, config)

    from ctxassist.tui.app import run_demo

    submitted = asyncio.run(run_demo(settings, provider=provider))
    logger.info("demo_finished", submitted=len(submitted))


if __name__ == "__main__":
    main()
