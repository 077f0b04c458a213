from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import os
import sys
import typing

from ctxassist.logger import logger
from ctxassist.tui.keys import InputHandler, KeyEvent


ESC: typing.Final[bytes] = b"\x1b"
ESC_TIMEOUT_S: typing.Final[float] = 0.05


def _key(name: str, *, ctrl: bool = False, text: str | None = None) -> KeyEvent:
    return KeyEvent(action="down", key=name, ctrl=ctrl, text=text)


# Only the keys the prompt and the suggestion list react to.
_SEQUENCES: typing.Final[dict[bytes, KeyEvent]] = {
    b"\t": _key("tab", text="\t"),
    b"\r": _key("enter", text="\n"),
    b"\n": _key("enter", text="\n"),
    b"\x7f": _key("backspace"),
    b"\x1b[A": _key("up"),
    b"\x1b[B": _key("down"),
    b"\x1b[C": _key("right"),
    b"\x1b[D": _key("left"),
    b"\x1bOA": _key("up"),
    b"\x1bOB": _key("down"),
    b"\x1bOC": _key("right"),
    b"\x1bOD": _key("left"),
    b"\x1b[H": _key("home"),
    b"\x1b[F": _key("end"),
    b"\x1b[3~": _key("delete"),
    **{
        bytes([ord(letter) - 96]): _key(letter, ctrl=True)
        for letter in "abcdefknpuw"
    },
}
_PREFIXES: typing.Final[frozenset[bytes]] = frozenset(
    seq[:end] for seq in _SEQUENCES for end in range(1, len(seq))
)
_LONGEST_FIRST: typing.Final[list[bytes]] = sorted(_SEQUENCES, key=len, reverse=True)


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _char_event(ch: str, alt: bool = False) -> KeyEvent:
    upper = ch.isalpha() and ch.isupper()
    return KeyEvent(
        action="down",
        key=ch.lower() if upper else ch,
        alt=alt,
        shift=upper,
        text=ch,
    )


class PosixInputDecoder:
    """Turns raw terminal bytes into ``KeyEvent`` objects.

    Incomplete escape sequences and partial UTF-8 characters stay buffered
    until the next ``feed`` call.
    """

    def __init__(self) -> None:
        self._buffer = b""

    @property
    def pending(self) -> bytes:
        return self._buffer

    def flush_escape(self) -> list[KeyEvent]:
        """Emit a lone ESC that was waiting for a possible sequence tail."""
        if self._buffer != ESC:
            return []
        self._buffer = b""
        return [_key("esc")]

    def feed(self, data: bytes) -> list[KeyEvent]:
        self._buffer += data
        events: list[KeyEvent] = []
        while self._buffer and self._consume(events):
            pass
        return events

    def _consume(self, events: list[KeyEvent]) -> bool:
        """Decode one key from the buffer; False while it is still incomplete."""
        buf = self._buffer
        for seq in _LONGEST_FIRST:
            if buf.startswith(seq):
                self._buffer = buf[len(seq) :]
                events.append(_SEQUENCES[seq])
                return True
        if buf in _PREFIXES:
            return False

        if buf[:1] == ESC and len(buf) >= 2:
            # ESC followed by a byte that starts no known sequence: Alt+key.
            self._buffer = buf[2:]
            known = _SEQUENCES.get(buf[1:2])
            if known is not None:
                events.append(dataclasses.replace(known, alt=True))
            elif chr(buf[1]).isprintable():
                events.append(_char_event(chr(buf[1]), alt=True))
            return True

        size = _utf8_length(buf[0])
        if len(buf) < size:
            return False
        self._buffer = buf[size:]
        ch = buf[:size].decode("utf-8", errors="replace")
        if ch.isprintable():
            events.append(_char_event(ch))
        return True


@contextlib.contextmanager
def _cbreak(fd: int) -> typing.Iterator[None]:
    import termios
    import tty

    saved = termios.tcgetattr(fd)
    tty.setcbreak(fd)
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


class PosixKeyReader(InputHandler):
    """Watches a terminal fd on the event loop and publishes decoded keys.

    The terminal is kept in cbreak mode while ``run`` is active. A lone ESC
    is published once no sequence tail arrives within ``esc_timeout``.
    """

    def __init__(
        self, fd: int | None = None, esc_timeout: float = ESC_TIMEOUT_S
    ) -> None:
        super().__init__()
        self._fd = sys.stdin.fileno() if fd is None else fd
        self._esc_timeout = esc_timeout
        self._decoder = PosixInputDecoder()
        self._esc_timer: asyncio.TimerHandle | None = None
        self._stopped: asyncio.Future[None] | None = None

    @property
    def running(self) -> bool:
        return self._stopped is not None and not self._stopped.done()

    async def run(self) -> None:
        if sys.platform == "win32":
            raise RuntimeError("PosixKeyReader is not supported on Windows")
        loop = asyncio.get_running_loop()
        self._stopped = loop.create_future()
        with _cbreak(self._fd):
            loop.add_reader(self._fd, self._on_readable)
            try:
                await self._stopped
            finally:
                loop.remove_reader(self._fd)
                self._cancel_esc_timer()
                self._stopped = None

    def stop(self) -> None:
        stopped = self._stopped
        if stopped is not None and not stopped.done():
            stopped.set_result(None)

    def _on_readable(self) -> None:
        try:
            data = os.read(self._fd, 1024)
        except OSError as exc:
            logger.debug("key_reader_failed", error=repr(exc))
            data = b""
        if not data:
            self.stop()
            return
        self._cancel_esc_timer()
        self._publish_all(self._decoder.feed(data))
        if self._decoder.pending == ESC:
            self._esc_timer = asyncio.get_running_loop().call_later(
                self._esc_timeout, self._flush_escape
            )

    def _flush_escape(self) -> None:
        self._esc_timer = None
        self._publish_all(self._decoder.flush_escape())

    def _cancel_esc_timer(self) -> None:
        if self._esc_timer is not None:
            self._esc_timer.cancel()
            self._esc_timer = None

    def _publish_all(self, events: list[KeyEvent]) -> None:
        for event in events:
            self.publish(event)
