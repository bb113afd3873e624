"""Checking exercises in order, with progress and completion prompts."""

from __future__ import annotations

import math
import sys
from collections.abc import Iterable

from rustdrills.exercise import CompiledExercise, Exercise, ExerciseFailed, Mode
from rustdrills.ui import Spinner, no_emoji, success, warn

_BAR_WIDTH = 60
_SEPARATOR = "===================="


def _style(text: object, *codes: str) -> str:
    if not sys.stdout.isatty():
        return str(text)
    return f"\x1b[{';'.join(codes)}m{text}\x1b[0m"


def _bold(text: object) -> str:
    return _style(text, "1")


class _ProgressBar:
    """A progress bar drawn on stderr while it is a terminal."""

    def __init__(self, total: int, position: int) -> None:
        self.total = total
        self.position = position
        self.percentage = position / total * 100.0 if total else math.nan
        self._stream = sys.stderr
        self._draw()

    def _draw(self) -> None:
        if not self._stream.isatty():
            return
        filled = min(_BAR_WIDTH, _BAR_WIDTH * self.position // self.total) if self.total else 0
        bar = "#" * filled
        if filled < _BAR_WIDTH:
            bar += ">" + "-" * (_BAR_WIDTH - filled - 1)
        self._stream.write(
            f"\r\x1b[2KProgress: [{bar}] {self.position}/{self.total} ({self.percentage:.1f} %)"
        )
        self._stream.flush()

    def inc(self) -> None:
        self.position += 1
        self.percentage += 100.0 / self.total
        self._draw()

    def close(self) -> None:
        if self._stream.isatty():
            self._stream.write("\n")
            self._stream.flush()


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int],
    verbose: bool,
    success_hints: bool,
) -> Exercise | None:
    """Check exercises in order; return the first one that fails or is unfinished."""
    num_done, total = progress
    bar = _ProgressBar(total, num_done)
    try:
        for exercise in exercises:
            try:
                finished = _check(exercise, verbose, success_hints)
            except ExerciseFailed:
                finished = False
            if not finished:
                return exercise
            bar.inc()
        return None
    finally:
        bar.close()


def _check(exercise: Exercise, verbose: bool, success_hints: bool) -> bool:
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            return _compile_and_test(exercise, True, verbose, success_hints)
        case Mode.COMPILE:
            return _compile_and_run_interactively(exercise, success_hints)
        case Mode.CLIPPY:
            return _compile_only(exercise, success_hints)


def test(exercise: Exercise, verbose: bool) -> None:
    """Build and run the exercise's tests; raise ExerciseFailed on failure."""
    _compile_and_test(exercise, False, verbose, False)


def _compile(exercise: Exercise, spinner: Spinner) -> CompiledExercise:
    try:
        return exercise.compile()
    except ExerciseFailed as err:
        spinner.finish_and_clear()
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(err.output.stderr)
        raise


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    with Spinner(f"Compiling {exercise}...") as spinner:
        _compile(exercise, spinner).close()
    return prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    with Spinner(f"Compiling {exercise}...") as spinner:
        with _compile(exercise, spinner) as compiled:
            spinner.set_message(f"Running {exercise}...")
            try:
                output = compiled.run()
            except ExerciseFailed as err:
                spinner.finish_and_clear()
                warn(f"Ran {exercise} with errors")
                print(err.output.stdout)
                print(err.output.stderr)
                raise
    return prompt_for_completion(exercise, output.stdout, success_hints)


def _compile_and_test(
    exercise: Exercise, interactive: bool, verbose: bool, success_hints: bool
) -> bool:
    with Spinner(f"Testing {exercise}...") as spinner:
        with _compile(exercise, spinner) as compiled:
            try:
                output = compiled.run()
            except ExerciseFailed as err:
                spinner.finish_and_clear()
                warn(f"Testing of {exercise} failed! Please try again. Here's the output:")
                print(err.output.stdout)
                raise
    if verbose:
        print(output.stdout)
    if interactive:
        return prompt_for_completion(exercise, None, success_hints)
    return True


def prompt_for_completion(
    exercise: Exercise, prompt_output: str | None, success_hints: bool
) -> bool:
    """Return True if the exercise is done; otherwise show where its marker is."""
    state = exercise.state()
    if state.done():
        return True

    match exercise.mode:
        case Mode.COMPILE:
            success(f"Successfully ran {exercise}!")
        case Mode.TEST:
            success(f"Successfully tested {exercise}!")
        case Mode.CLIPPY | Mode.BUILD_SCRIPT:
            success(f"Successfully compiled {exercise}!")

    emoji_free = no_emoji()
    clippy_message = (
        "The code is compiling, and Clippy is happy!"
        if emoji_free
        else "The code is compiling, and 📎 Clippy 📎 is happy!"
    )
    success_message = {
        Mode.COMPILE: "The code is compiling!",
        Mode.TEST: "The code is compiling, and the tests pass!",
        Mode.CLIPPY: clippy_message,
        Mode.BUILD_SCRIPT: "Build script works!",
    }[exercise.mode]

    print()
    if emoji_free:
        print(f"~*~ {success_message} ~*~")
    else:
        print(f"🎉 🎉  {success_message} 🎉 🎉")
    print()

    separator = _bold(_SEPARATOR)
    if prompt_output is not None:
        print("Output:")
        print(separator)
        print(prompt_output)
        print(separator)
        print()
    if success_hints:
        print("Hints:")
        print(separator)
        print(exercise.hint)
        print(separator)
        print()

    print("You can keep working on this exercise,")
    print(f"or jump into the next one by removing the {_bold('`I AM NOT DONE`')} comment:")
    print()
    for context_line in state.context:
        text = _bold(context_line.line) if context_line.important else context_line.line
        number = _style(f"{context_line.number:>2}", "34", "1")
        print(f"{number} {_style('|', '34')}  {text}")

    return False