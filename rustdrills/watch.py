"""Watch mode: re-check exercises whenever a source file changes."""

from __future__ import annotations

import errno
import os
import queue
import subprocess
import sys
import threading
from collections.abc import Iterator, Sequence
from enum import Enum
from itertools import chain
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from rustdrills.exercise import Exercise
from rustdrills.verify import verify

EXERCISES_DIR = Path("./exercises")
_POLL_SECONDS = 1.0
_DEBOUNCE_SECONDS = 0.2

_HELP = "\n".join(
    [
        "Commands available to you in watch mode:",
        "  hint   - prints the current exercise's hint",
        "  clear  - clears the screen",
        "  quit   - quits watch mode",
        "  !<cmd> - executes a command, like `!rustc --explain E0381`",
        "  help   - displays this help message",
        "",
        "Watch mode automatically re-evaluates the current exercise",
        "when you edit a file's contents.",
    ]
)


class WatchStatus(Enum):
    """How watch mode ended."""

    FINISHED = "finished"
    UNFINISHED = "unfinished"


def handle_command(line: str, hint: str | None) -> bool:
    """Carry out one watch-mode command; return True when the user asked to quit."""
    command = line.strip()
    if command == "hint":
        if hint is not None:
            print(hint)
    elif command == "clear":
        print("\x1b[2J\x1b[1;1H")
    elif command == "quit":
        print("Bye!")
        return True
    elif command == "help":
        print(_HELP)
    elif command.startswith("!"):
        cmd = command[1:]
        parts = cmd.split()
        if not parts:
            print("no command provided")
        else:
            try:
                subprocess.run(parts, check=False)
            except OSError as err:
                print(f"failed to execute command `{cmd}`: {err}")
    else:
        print(f"unknown command: {command}")
    return False


class _Shell:
    """Reads commands from standard input on a background thread."""

    def __init__(self, hint: str | None) -> None:
        self.hint = hint
        self.should_quit = threading.Event()

    def start(self) -> None:
        print(
            "Welcome to watch mode! You can type 'help' to get an overview "
            "of the commands you can use here."
        )
        threading.Thread(target=self._loop, daemon=True).start()

    def _loop(self) -> None:
        while True:
            try:
                line = sys.stdin.readline()
            except (OSError, ValueError) as err:
                print(f"error reading command: {err}")
                return
            if not line:
                return
            if handle_command(line, self.hint):
                self.should_quit.set()


class _RustFileHandler(FileSystemEventHandler):
    def __init__(self, events: queue.Queue[Path]) -> None:
        super().__init__()
        self._events = events

    def on_created(self, event: FileSystemEvent) -> None:
        self._enqueue(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._enqueue(event)

    def _enqueue(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._events.put(Path(os.fsdecode(event.src_path)))


def _clear_screen() -> None:
    print("\x1bc")


def _ends_with(path: Path, suffix: Path) -> bool:
    tail = suffix.parts
    return len(tail) <= len(path.parts) and path.parts[len(path.parts) - len(tail):] == tail


def _pending_for(filepath: Path, exercises: Sequence[Exercise]) -> Iterator[Exercise]:
    current = next((e for e in exercises if _ends_with(filepath, e.path)), None)
    others = (
        e for e in exercises if not e.looks_done() and not _ends_with(filepath, e.path)
    )
    return chain([current] if current is not None else [], others)


def _collect(events: queue.Queue[Path], first: Path) -> list[Path]:
    paths = [first]
    while True:
        try:
            paths.append(events.get(timeout=_DEBOUNCE_SECONDS))
        except queue.Empty:
            return list(dict.fromkeys(paths))


def watch(
    exercises: Sequence[Exercise], verbose: bool, success_hints: bool
) -> WatchStatus:
    """Verify exercises, then re-verify on every edit until all are done or the user quits."""
    if not EXERCISES_DIR.is_dir():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(EXERCISES_DIR))

    events: queue.Queue[Path] = queue.Queue()
    observer = Observer()
    observer.schedule(_RustFileHandler(events), str(EXERCISES_DIR), recursive=True)
    observer.start()
    try:
        _clear_screen()
        failed = verify(exercises, (0, len(exercises)), verbose, success_hints)
        if failed is None:
            return WatchStatus.FINISHED
        shell = _Shell(failed.hint)
        shell.start()

        while True:
            try:
                first = events.get(timeout=_POLL_SECONDS)
            except queue.Empty:
                pass
            else:
                for path in _collect(events, first):
                    if path.suffix != ".rs" or not path.exists():
                        continue
                    filepath = path.resolve()
                    num_done = sum(1 for e in exercises if e.looks_done())
                    _clear_screen()
                    failed = verify(
                        _pending_for(filepath, exercises),
                        (num_done, len(exercises)),
                        verbose,
                        success_hints,
                    )
                    if failed is None:
                        return WatchStatus.FINISHED
                    shell.hint = failed.hint
            if shell.should_quit.is_set():
                return WatchStatus.UNFINISHED
    finally:
        observer.stop()
        observer.join()