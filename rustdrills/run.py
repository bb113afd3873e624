"""Running a single exercise and resetting it."""

from __future__ import annotations

import subprocess

from rustdrills.exercise import Exercise, ExerciseFailed, Mode
from rustdrills.ui import Spinner, success, warn
from rustdrills.verify import test


def run(exercise: Exercise, verbose: bool) -> None:
    """Build and run one exercise; raise ExerciseFailed if it fails."""
    if exercise.mode in (Mode.TEST, Mode.BUILD_SCRIPT):
        test(exercise, verbose)
    else:
        _compile_and_run(exercise)


def reset(exercise: Exercise) -> subprocess.Popen[bytes]:
    """Start stashing the changes made to the exercise file."""
    return subprocess.Popen(["git", "stash", "--", str(exercise.path)])


def _compile_and_run(exercise: Exercise) -> None:
    with Spinner(f"Compiling {exercise}...") as spinner:
        try:
            compiled = exercise.compile()
        except ExerciseFailed as err:
            spinner.finish_and_clear()
            warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
            print(err.output.stderr)
            raise
        with compiled:
            spinner.set_message(f"Running {exercise}...")
            try:
                output = compiled.run()
            except ExerciseFailed as err:
                spinner.finish_and_clear()
                print(err.output.stdout)
                print(err.output.stderr)
                warn(f"Ran {exercise} with errors")
                raise
    print(output.stdout)
    success(f"Successfully ran {exercise}")