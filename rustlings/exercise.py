"""Exercises: loading, compiling, running and checking their progress marker."""

from __future__ import annotations

import os
import re
import subprocess
import threading
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .ui import no_emoji

RUSTC_COLOR_ARGS = ("--color", "always")
RUSTC_EDITION_ARGS = ("--edition", "2021")
I_AM_DONE_REGEX = re.compile(r"^\s*///?\s*I\s+AM\s+NOT\s+DONE", re.MULTILINE)
CONTEXT = 2
CLIPPY_CARGO_TOML_PATH = "./exercises/clippy/Cargo.toml"
BUILD_SCRIPT_CARGO_TOML_PATH = "./exercises/tests/Cargo.toml"


def temp_file() -> str:
    """Return a temporary binary name unique to this process and thread."""
    return f"./temp_{os.getpid()}_ThreadId{threading.get_ident()}"


def clean() -> None:
    """Remove the temporary binary, ignoring a missing file."""
    try:
        os.remove(temp_file())
    except OSError:
        pass


class Mode(Enum):
    """How an exercise is checked."""

    COMPILE = "compile"
    TEST = "test"
    CLIPPY = "clippy"
    BUILD_SCRIPT = "buildscript"


@dataclass(frozen=True)
class ContextLine:
    """A source line shown around the progress marker of a pending exercise."""

    line: str
    number: int
    important: bool


@dataclass(frozen=True)
class Done:
    """State of an exercise whose progress marker has been removed."""


@dataclass(frozen=True)
class Pending:
    """State of an exercise still carrying its progress marker."""

    context: list[ContextLine] = field(default_factory=list)


State = Done | Pending


@dataclass(frozen=True)
class ExerciseOutput:
    """Captured output of a command."""

    stdout: str
    stderr: str


class CompilationError(Exception):
    """The exercise failed to compile."""

    def __init__(self, output: ExerciseOutput) -> None:
        super().__init__(output.stderr)
        self.output = output


class RunError(Exception):
    """The compiled exercise exited unsuccessfully."""

    def __init__(self, output: ExerciseOutput) -> None:
        super().__init__(output.stderr)
        self.output = output


def _capture(args: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(args, capture_output=True, check=False)


def _output_of(result: subprocess.CompletedProcess) -> ExerciseOutput:
    return ExerciseOutput(
        stdout=(result.stdout or b"").decode("utf-8", errors="replace"),
        stderr=(result.stderr or b"").decode("utf-8", errors="replace"),
    )


def _lines(text: str) -> list[str]:
    parts = text.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


class CompiledExercise:
    """A successfully compiled exercise; closing it removes the binary."""

    def __init__(self, exercise: Exercise) -> None:
        self.exercise = exercise

    def run(self) -> ExerciseOutput:
        """Run the compiled binary, raising RunError on failure."""
        return self.exercise._execute_binary()

    def close(self) -> None:
        """Remove the compiled binary."""
        clean()

    def __enter__(self) -> CompiledExercise:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


@dataclass
class Exercise:
    """One exercise as described in info.toml."""

    name: str
    path: Path
    mode: Mode
    hint: str = ""

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.mode = Mode(self.mode)

    def __str__(self) -> str:
        return str(self.path)

    def _manifest(self) -> str:
        return (
            "[package]\n"
            f'name = "{self.name}"\n'
            'version = "0.0.1"\n'
            'edition = "2021"\n'
            "[[bin]]\n"
            f'name = "{self.name}"\n'
            f'path = "{self.name}.rs"'
        )

    def _write_manifest(self, target: str) -> None:
        message = (
            "Failed to write Clippy Cargo.toml file."
            if no_emoji()
            else "Failed to write 📎 Clippy 📎 Cargo.toml file."
        )
        try:
            Path(target).write_text(self._manifest(), encoding="utf-8")
        except OSError as err:
            raise RuntimeError(message) from err

    def compile(self) -> CompiledExercise:
        """Build the exercise; raise CompilationError when the build fails."""
        source = str(self.path)
        binary = temp_file()
        match self.mode:
            case Mode.COMPILE:
                result = _capture(
                    ["rustc", source, "-o", binary, *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS]
                )
            case Mode.TEST:
                result = _capture(
                    ["rustc", "--test", source, "-o", binary,
                     *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS]
                )
            case Mode.CLIPPY:
                self._write_manifest(CLIPPY_CARGO_TOML_PATH)
                # Build a runnable binary too; a failure here shows up in clippy.
                _capture(["rustc", source, "-o", binary, *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS])
                _capture(
                    ["cargo", "clean", "--manifest-path", CLIPPY_CARGO_TOML_PATH, *RUSTC_COLOR_ARGS]
                )
                result = _capture(
                    ["cargo", "clippy", "--manifest-path", CLIPPY_CARGO_TOML_PATH,
                     *RUSTC_COLOR_ARGS, "--", "-D", "warnings", "-D", "clippy::float_cmp"]
                )
            case Mode.BUILD_SCRIPT:
                self._write_manifest(BUILD_SCRIPT_CARGO_TOML_PATH)
                result = _capture(
                    ["cargo", "test", "--manifest-path", BUILD_SCRIPT_CARGO_TOML_PATH]
                )

        if result.returncode == 0:
            return CompiledExercise(self)
        clean()
        raise CompilationError(_output_of(result))

    def _execute_binary(self) -> ExerciseOutput:
        if self.mode is Mode.BUILD_SCRIPT:
            return ExerciseOutput(stdout="", stderr="")
        arg = "--show-output" if self.mode is Mode.TEST else ""
        result = _capture([temp_file(), arg])
        output = _output_of(result)
        if result.returncode != 0:
            raise RunError(output)
        return output

    def state(self) -> State:
        """Return Done, or Pending with the lines around the progress marker."""
        source = self.path.read_text(encoding="utf-8")
        if not I_AM_DONE_REGEX.search(source):
            return Done()

        lines = _lines(source)
        matched = next(
            (index for index, line in enumerate(lines) if I_AM_DONE_REGEX.search(line)),
            None,
        )
        if matched is None:
            raise RuntimeError("progress marker spans several lines")

        first = max(matched - CONTEXT, 0)
        window = lines[first : matched + CONTEXT + 1]
        return Pending(
            [
                ContextLine(line=line, number=index + 1, important=index == matched)
                for index, line in enumerate(window, start=first)
            ]
        )

    def looks_done(self) -> bool:
        """Return True when the progress marker is gone from the source."""
        return isinstance(self.state(), Done)


def load_exercises(path: str | os.PathLike = "info.toml") -> list[Exercise]:
    """Read the exercise list from an info.toml file."""
    with open(path, "rb") as handle:
        data = tomllib.load(handle)
    try:
        return [
            Exercise(
                name=entry["name"],
                path=Path(entry["path"]),
                mode=Mode(entry["mode"]),
                hint=entry["hint"],
            )
            for entry in data["exercises"]
        ]
    except (KeyError, TypeError, ValueError) as err:
        raise ValueError(f"invalid exercise list in {path}: {err}") from err