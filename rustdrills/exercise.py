"""Exercise descriptions, their completion state, and compiling and running them."""

from __future__ import annotations

import contextlib
import os
import re
import subprocess
import threading
import tomllib
import weakref
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

RUSTC_COLOR_ARGS = ("--color", "always")
RUSTC_EDITION_ARGS = ("--edition", "2021")
I_AM_DONE_REGEX = re.compile(r"^\s*///?\s*I\s+AM\s+NOT\s+DONE", re.MULTILINE)
CONTEXT = 2
CLIPPY_CARGO_TOML_PATH = Path("./exercises/clippy/Cargo.toml")
BUILD_SCRIPT_CARGO_TOML_PATH = Path("./exercises/tests/Cargo.toml")


def temp_file() -> str:
    """Return a temporary binary name unique to this process and thread."""
    return f"./temp_{os.getpid()}_{threading.get_ident()}"


def _remove(path: str) -> None:
    with contextlib.suppress(OSError):
        os.remove(path)


def clean() -> None:
    """Remove the temporary binary, ignoring a missing file."""
    _remove(temp_file())


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _run_command(args: list[str]) -> subprocess.CompletedProcess[bytes]:
    return subprocess.run(args, capture_output=True, check=False)


def _cargo_toml(name: str) -> str:
    return "\n".join(
        [
            "[package]",
            f'name = "{name}"',
            'version = "0.0.1"',
            'edition = "2021"',
            "[[bin]]",
            f'name = "{name}"',
            f'path = "{name}.rs"',
        ]
    )


def _write_cargo_toml(path: Path, name: str) -> None:
    try:
        path.write_text(_cargo_toml(name), encoding="utf-8")
    except OSError as err:
        if "NO_EMOJI" in os.environ:
            message = "Failed to write Clippy Cargo.toml file."
        else:
            message = "Failed to write 📎 Clippy 📎 Cargo.toml file."
        raise OSError(message) from err


def _source_lines(source: str) -> list[str]:
    lines = source.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


class Mode(Enum):
    """How an exercise is checked."""

    COMPILE = "compile"
    TEST = "test"
    CLIPPY = "clippy"
    BUILD_SCRIPT = "buildscript"


@dataclass(frozen=True)
class ContextLine:
    """A source line shown around the pending marker."""

    line: str
    number: int
    important: bool


@dataclass(frozen=True)
class State:
    """Completion state: done when there is no pending context."""

    context: tuple[ContextLine, ...] = ()

    def done(self) -> bool:
        return not self.context


@dataclass(frozen=True)
class ExerciseOutput:
    """Captured output of a finished command."""

    stdout: str
    stderr: str


class ExerciseFailed(Exception):
    """A compile or run step exited unsuccessfully."""

    def __init__(self, output: ExerciseOutput) -> None:
        super().__init__(output.stderr or output.stdout)
        self.output = output


@dataclass
class Exercise:
    """One exercise as described in info.toml."""

    name: str
    path: Path
    mode: Mode
    hint: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Exercise:
        return cls(
            name=data["name"],
            path=Path(data["path"]),
            mode=Mode(data["mode"]),
            hint=data["hint"],
        )

    def compile(self) -> CompiledExercise:
        """Build the exercise; raise ExerciseFailed if the build fails."""
        rustc = ["rustc", str(self.path), "-o", temp_file(), *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS]
        match self.mode:
            case Mode.COMPILE:
                result = _run_command(rustc)
            case Mode.TEST:
                result = _run_command(["rustc", "--test", *rustc[1:]])
            case Mode.CLIPPY:
                _write_cargo_toml(CLIPPY_CARGO_TOML_PATH, self.name)
                # Also build an executable so clippy exercises can be run.
                _run_command(rustc)
                manifest = str(CLIPPY_CARGO_TOML_PATH)
                _run_command(["cargo", "clean", "--manifest-path", manifest, *RUSTC_COLOR_ARGS])
                result = _run_command(
                    [
                        "cargo", "clippy", "--manifest-path", manifest, *RUSTC_COLOR_ARGS,
                        "--", "-D", "warnings", "-D", "clippy::float_cmp",
                    ]
                )
            case Mode.BUILD_SCRIPT:
                _write_cargo_toml(BUILD_SCRIPT_CARGO_TOML_PATH, self.name)
                result = _run_command(
                    ["cargo", "test", "--manifest-path", str(BUILD_SCRIPT_CARGO_TOML_PATH)]
                )

        if result.returncode == 0:
            return CompiledExercise(self)
        clean()
        raise ExerciseFailed(ExerciseOutput(_decode(result.stdout), _decode(result.stderr)))

    def _run(self) -> ExerciseOutput:
        if self.mode is Mode.BUILD_SCRIPT:
            return ExerciseOutput("", "")
        arg = "--show-output" if self.mode is Mode.TEST else ""
        result = _run_command([temp_file(), arg])
        output = ExerciseOutput(_decode(result.stdout), _decode(result.stderr))
        if result.returncode != 0:
            raise ExerciseFailed(output)
        return output

    def state(self) -> State:
        """Inspect the source for the pending marker and its surrounding lines."""
        source = self.path.read_text(encoding="utf-8")
        if not I_AM_DONE_REGEX.search(source):
            return State()

        lines = _source_lines(source)
        matched = next(
            (index for index, line in enumerate(lines) if I_AM_DONE_REGEX.search(line)),
            None,
        )
        if matched is None:
            raise ValueError(f"{self.path}: pending marker spans several lines")

        first = max(matched - CONTEXT, 0)
        last = matched + CONTEXT
        return State(
            tuple(
                ContextLine(line=line, number=index + 1, important=index == matched)
                for index, line in enumerate(lines)
                if first <= index <= last
            )
        )

    def looks_done(self) -> bool:
        """Return True when the pending marker has been removed."""
        return self.state().done()

    def __str__(self) -> str:
        return str(self.path)


class CompiledExercise:
    """A built exercise; the temporary binary is removed on close."""

    def __init__(self, exercise: Exercise) -> None:
        self.exercise = exercise
        self._finalizer = weakref.finalize(self, _remove, temp_file())

    def run(self) -> ExerciseOutput:
        """Run the binary; raise ExerciseFailed if it exits unsuccessfully."""
        return self.exercise._run()

    def close(self) -> None:
        self._finalizer()

    def __enter__(self) -> CompiledExercise:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def load_exercises(path: str | os.PathLike[str]) -> list[Exercise]:
    """Read the exercise list from an info.toml file."""
    with open(path, "rb") as handle:
        data = tomllib.load(handle)
    return [Exercise.from_dict(entry) for entry in data["exercises"]]