"""Checking exercises one after another and reporting progress."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum, auto

from rich.console import Console
from rich.status import Status
from rich.text import Text

from .exercise import CompilationError, CompiledExercise, Exercise, Mode, Pending, RunError
from .ui import no_emoji, success, warn

BAR_WIDTH = 60
SEPARATOR = "===================="


class RunMode(Enum):
    """Whether a passing test should prompt about the progress marker."""

    INTERACTIVE = auto()
    NON_INTERACTIVE = auto()


class ExerciseFailed(Exception):
    """An exercise did not compile, did not run, or is still marked as pending."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(str(exercise))
        self.exercise = exercise


def _console() -> Console:
    return Console(highlight=False, soft_wrap=True)


def _spinner(message: str) -> Status:
    return _console().status(message)


def _print_progress(position: int, total: int, percentage: float) -> None:
    if total <= 0 or position >= total:
        filled, head = BAR_WIDTH, ""
    else:
        filled, head = BAR_WIDTH * max(position, 0) // total, ">"
    rest = BAR_WIDTH - filled - len(head)
    _console().print(
        Text.assemble(
            "Progress: [",
            ("#" * filled + head, "green"),
            ("-" * rest, "red"),
            f"] {position}/{total} ({percentage:.1f} %)",
        )
    )


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int],
    verbose: bool = False,
    success_hints: bool = False,
) -> None:
    """Check exercises in order; raise ExerciseFailed on the first that is not done."""
    num_done, total = progress
    step = 100.0 / total if total else 0.0
    percentage = num_done * step
    position = num_done
    _print_progress(position, total, percentage)

    for exercise in exercises:
        if not _check(exercise, verbose, success_hints):
            raise ExerciseFailed(exercise)
        percentage += step
        position += 1
        _print_progress(position, total, percentage)


def _check(exercise: Exercise, verbose: bool, success_hints: bool) -> bool:
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            return compile_and_test(exercise, RunMode.INTERACTIVE, verbose, success_hints)
        case Mode.COMPILE:
            return _compile_and_run_interactively(exercise, success_hints)
        case Mode.CLIPPY:
            return _compile_only(exercise, success_hints)
    raise ValueError(f"unknown mode {exercise.mode!r}")


def test(exercise: Exercise, verbose: bool = False) -> None:
    """Compile and run the exercise's test harness; raise ExerciseFailed on failure."""
    compile_and_test(exercise, RunMode.NON_INTERACTIVE, verbose, False)


test.__test__ = False  # keep test collectors from picking this up


def _compile(exercise: Exercise, message: str) -> CompiledExercise:
    try:
        with _spinner(message):
            return exercise.compile()
    except CompilationError as err:
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(err.output.stderr)
        raise ExerciseFailed(exercise) from err


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    _compile(exercise, f"Compiling {exercise}...").close()
    return prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    with _compile(exercise, f"Compiling {exercise}...") as compiled:
        try:
            with _spinner(f"Running {exercise}..."):
                output = compiled.run()
        except RunError as err:
            warn(f"Ran {exercise} with errors")
            print(err.output.stdout)
            print(err.output.stderr)
            raise ExerciseFailed(exercise) from err
        return prompt_for_completion(exercise, output.stdout, success_hints)


def compile_and_test(
    exercise: Exercise,
    run_mode: RunMode,
    verbose: bool = False,
    success_hints: bool = False,
) -> bool:
    """Compile and run the test harness; return whether the exercise counts as done."""
    message = f"Testing {exercise}..."
    with _compile(exercise, message) as compiled:
        try:
            with _spinner(message):
                output = compiled.run()
        except RunError as err:
            warn(f"Testing of {exercise} failed! Please try again. Here's the output:")
            print(err.output.stdout)
            raise ExerciseFailed(exercise) from err

        if verbose:
            print(output.stdout)
        if run_mode is RunMode.INTERACTIVE:
            return prompt_for_completion(exercise, None, success_hints)
        return True


def _success_message(mode: Mode, emoji_free: bool) -> str:
    match mode:
        case Mode.COMPILE:
            return "The code is compiling!"
        case Mode.TEST:
            return "The code is compiling, and the tests pass!"
        case Mode.CLIPPY:
            if emoji_free:
                return "The code is compiling, and Clippy is happy!"
            return "The code is compiling, and 📎 Clippy 📎 is happy!"
        case Mode.BUILD_SCRIPT:
            return "Build script works!"
    raise ValueError(f"unknown mode {mode!r}")


def _print_block(console: Console, title: str, body: str) -> None:
    separator = Text(SEPARATOR, style="bold")
    print(title)
    console.print(separator)
    print(body)
    console.print(separator)
    print()


def prompt_for_completion(
    exercise: Exercise, prompt_output: str | None, success_hints: bool = False
) -> bool:
    """Return True when the exercise is done, else show where its marker is and return False."""
    state = exercise.state()
    if not isinstance(state, Pending):
        return True

    match exercise.mode:
        case Mode.COMPILE:
            success(f"Successfully ran {exercise}!")
        case Mode.TEST:
            success(f"Successfully tested {exercise}!")
        case Mode.CLIPPY | Mode.BUILD_SCRIPT:
            success(f"Successfully compiled {exercise}!")

    emoji_free = no_emoji()
    message = _success_message(exercise.mode, emoji_free)
    print()
    print(f"~*~ {message} ~*~" if emoji_free else f"🎉 🎉  {message} 🎉 🎉")
    print()

    console = _console()
    if prompt_output is not None:
        _print_block(console, "Output:", prompt_output)
    if success_hints:
        _print_block(console, "Hints:", exercise.hint)

    print("You can keep working on this exercise,")
    console.print(
        Text.assemble(
            "or jump into the next one by removing the ",
            ("`I AM NOT DONE`", "bold"),
            " comment:",
        )
    )
    print()
    for context_line in state.context:
        console.print(
            Text.assemble(
                (f"{context_line.number:>2}", "bold blue"),
                " ",
                ("|", "blue"),
                "  ",
                (context_line.line, "bold" if context_line.important else ""),
            )
        )
    return False