"""Terminal output helpers: coloured status lines and a progress spinner."""

from __future__ import annotations

import os
import sys
import threading
from typing import TextIO

_RED = "31"
_GREEN = "32"

_SPINNER_FRAMES = "⠁⠂⠄⡀⢀⠠⠐⠈"
_TICK_SECONDS = 0.1
_CLEAR_LINE = "\r\x1b[2K"


def no_emoji() -> bool:
    """Return True when the NO_EMOJI environment variable is set."""
    return "NO_EMOJI" in os.environ


def _paint(text: str, code: str, stream: TextIO | None = None) -> str:
    stream = stream if stream is not None else sys.stdout
    if not stream.isatty():
        return text
    return f"\x1b[{code}m{text}\x1b[0m"


def warn(message: str) -> None:
    """Print a red warning line."""
    prefix = "!" if no_emoji() else "⚠️ "
    print(f"{_paint(prefix, _RED)} {_paint(message, _RED)}")


def success(message: str) -> None:
    """Print a green success line."""
    prefix = "✓" if no_emoji() else "✅"
    print(f"{_paint(prefix, _GREEN)} {_paint(message, _GREEN)}")


class Spinner:
    """A spinner with a message, animated on stderr while it is a terminal."""

    def __init__(self, message: str) -> None:
        self.message = message
        self.finished = False
        self._stream = sys.stderr
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        if self._stream.isatty():
            self._thread = threading.Thread(target=self._spin, daemon=True)
            self._thread.start()

    def _spin(self) -> None:
        frame = 0
        while not self._stop.is_set():
            with self._lock:
                symbol = _SPINNER_FRAMES[frame % len(_SPINNER_FRAMES)]
                self._stream.write(f"{_CLEAR_LINE}{symbol} {self.message}")
                self._stream.flush()
            frame += 1
            self._stop.wait(_TICK_SECONDS)

    def set_message(self, message: str) -> None:
        """Replace the text shown next to the spinner."""
        with self._lock:
            self.message = message

    def finish_and_clear(self) -> None:
        """Stop the spinner and erase its line."""
        if self.finished:
            return
        self.finished = True
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            with self._lock:
                self._stream.write(_CLEAR_LINE)
                self._stream.flush()

    def __enter__(self) -> Spinner:
        return self

    def __exit__(self, *args: object) -> None:
        self.finish_and_clear()