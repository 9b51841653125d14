from __future__ import annotations

import asyncio
import sys
from typing import Any, List, Optional, TextIO

QUIT_KEYS = {"q", "Q", "\x03"}


class QuitKeys:
    """Puts a TTY stdin in cbreak mode and sets ``stop_event`` on a quit key.

    Anything else typed is ignored. Does nothing when stdin is not a terminal.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        stop_event: asyncio.Event,
        stream: TextIO = sys.stdin,
    ):
        self.loop = loop
        self.stop_event = stop_event
        self.stream = stream
        self._fd: Optional[int] = None
        self._old_termios: Optional[List[Any]] = None

    def feed(self, ch: str):
        if ch in QUIT_KEYS:
            self.stop_event.set()

    def _on_stdin(self):
        ch = self.stream.read(1)
        if ch:
            self.feed(ch)

    def __enter__(self) -> "QuitKeys":
        if not self.stream.isatty():
            return self
        import termios
        import tty

        self._fd = self.stream.fileno()
        self._old_termios = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)
        self.loop.add_reader(self._fd, self._on_stdin)
        return self

    def __exit__(self, *exc_info):
        if self._fd is None:
            return
        import termios

        try:
            self.loop.remove_reader(self._fd)
            if self._old_termios is not None:
                termios.tcsetattr(self._fd, termios.TCSADRAIN, self._old_termios)
        finally:
            self._fd = None
            self._old_termios = None
