"""Running a single exercise and resetting it."""

from __future__ import annotations

import subprocess

from rich.console import Console
from rich.status import Status

from .exercise import CompilationError, Exercise, Mode, RunError
from .ui import success, warn
from .verify import ExerciseFailed, test


def _spinner(message: str) -> Status:
    return Console(highlight=False, soft_wrap=True).status(message)


def run(exercise: Exercise, verbose: bool = False) -> None:
    """Compile and run one exercise, or its tests; raise ExerciseFailed on failure."""
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            test(exercise, verbose)
        case Mode.COMPILE | Mode.CLIPPY:
            _compile_and_run(exercise)


def reset(exercise: Exercise) -> subprocess.Popen:
    """Stash the changes made to the exercise file with git."""
    try:
        return subprocess.Popen(["git", "stash", "--", str(exercise.path)])
    except OSError as err:
        raise ExerciseFailed(exercise) from err


def _compile_and_run(exercise: Exercise) -> None:
    try:
        with _spinner(f"Compiling {exercise}..."):
            compiled = exercise.compile()
    except CompilationError as err:
        warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
        print(err.output.stderr)
        raise ExerciseFailed(exercise) from err

    with compiled:
        try:
            with _spinner(f"Running {exercise}..."):
                output = compiled.run()
        except RunError as err:
            print(err.output.stdout)
            print(err.output.stderr)
            warn(f"Ran {exercise} with errors")
            raise ExerciseFailed(exercise) from err

    print(output.stdout)
    success(f"Successfully ran {exercise}")