"""Watch mode: re-check exercises whenever their files change."""

from __future__ import annotations

import os
import queue
import subprocess
import sys
import threading
from collections.abc import Iterator, Sequence
from enum import Enum, auto
from pathlib import Path
from typing import TextIO

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .exercise import Exercise
from .verify import ExerciseFailed, verify

EXERCISES_DIR = "./exercises"

HELP_TEXT = """Commands available to you in watch mode:
  hint   - prints the current exercise's hint
  clear  - clears the screen
  quit   - quits watch mode
  !<cmd> - executes a command, like `!rustc --explain E0381`
  help   - displays this help message

Watch mode automatically re-evaluates the current exercise
when you edit a file's contents."""


class WatchStatus(Enum):
    """How watch mode ended."""

    FINISHED = auto()
    UNFINISHED = auto()


class WatchShell:
    """The small command interpreter that runs alongside watch mode."""

    def __init__(self, hint: str | None = None, stream: TextIO | None = None) -> None:
        self.hint = hint
        self.should_quit = threading.Event()
        self._stream = stream

    def handle(self, line: str) -> None:
        """Carry out one command typed by the user."""
        command = line.strip()
        if command == "hint":
            hint = self.hint
            if hint is not None:
                print(hint)
        elif command == "clear":
            print("\x1b[2J\x1b[1;1H")
        elif command == "quit":
            self.should_quit.set()
            print("Bye!")
        elif command == "help":
            print(HELP_TEXT)
        elif command.startswith("!"):
            rest = command[1:]
            parts = rest.split()
            if not parts:
                print("no command provided")
                return
            try:
                subprocess.run(parts, check=False)
            except OSError as err:
                print(f"failed to execute command `{rest}`: {err}")
        else:
            print(f"unknown command: {command}")

    def run(self) -> None:
        """Read and handle commands until quit or end of input."""
        stream = self._stream if self._stream is not None else sys.stdin
        while not self.should_quit.is_set():
            try:
                line = stream.readline()
            except (OSError, ValueError) as err:
                print(f"error reading command: {err}")
                return
            if not line:
                return
            self.handle(line)


class _EventForwarder(FileSystemEventHandler):
    def __init__(self, events: queue.Queue[Path]) -> None:
        super().__init__()
        self._events = events

    def on_created(self, event: FileSystemEvent) -> None:
        self._forward(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._forward(event)

    def _forward(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._events.put(Path(os.fsdecode(event.src_path)))


def _clear_screen() -> None:
    print("\x1bc")


def _ends_with(path: Path, suffix: Path) -> bool:
    tail = Path(suffix).parts
    return bool(tail) and path.parts[-len(tail):] == tail


def _pending_after_change(exercises: Sequence[Exercise], changed: Path) -> Iterator[Exercise]:
    """The changed exercise first, then every other one not yet done."""
    edited = next((e for e in exercises if _ends_with(changed, e.path)), None)
    if edited is not None:
        yield edited
    yield from (
        e for e in exercises if not _ends_with(changed, e.path) and not e.looks_done()
    )


def _drain(events: queue.Queue[Path]) -> list[Path]:
    try:
        first = events.get(timeout=1)
    except queue.Empty:
        return []
    paths = {first: None}
    while True:
        try:
            paths[events.get_nowait()] = None
        except queue.Empty:
            return list(paths)


def watch(
    exercises: Sequence[Exercise], verbose: bool = False, success_hints: bool = False
) -> WatchStatus:
    """Verify the exercises, then re-verify on every change until done or told to quit."""
    events: queue.Queue[Path] = queue.Queue()
    observer = Observer()
    observer.schedule(_EventForwarder(events), EXERCISES_DIR, recursive=True)
    observer.start()
    try:
        _clear_screen()
        try:
            verify(exercises, (0, len(exercises)), verbose, success_hints)
            return WatchStatus.FINISHED
        except ExerciseFailed as failed:
            shell = WatchShell(failed.exercise.hint)

        print(
            "Welcome to watch mode! You can type 'help' to get an overview "
            "of the commands you can use here."
        )
        threading.Thread(target=shell.run, daemon=True).start()

        while True:
            for path in _drain(events):
                if path.suffix != ".rs" or not path.exists():
                    continue
                changed = path.resolve()
                num_done = sum(1 for e in exercises if e.looks_done())
                _clear_screen()
                try:
                    verify(
                        _pending_after_change(exercises, changed),
                        (num_done, len(exercises)),
                        verbose,
                        success_hints,
                    )
                    return WatchStatus.FINISHED
                except ExerciseFailed as failed:
                    shell.hint = failed.exercise.hint
            if shell.should_quit.is_set():
                return WatchStatus.UNFINISHED
    finally:
        observer.stop()
        observer.join()