import os
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from rustlings.exercise import (
    CLIPPY_CARGO_TOML_PATH,
    CompilationError,
    ContextLine,
    Done,
    Exercise,
    ExerciseOutput,
    Mode,
    Pending,
    RunError,
    clean,
    load_exercises,
    temp_file,
)

PENDING_EXERCISE = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"
FINISHED_EXERCISE = "// fake_exercise\n\nfn main() {\n\n}\n"
TEST_SUCCESS = (
    "#[test]\nfn passing() {\n"
    '    println!("THIS TEST TOO SHALL PASS");\n'
    "    assert!(true);\n}\n"
)


def _completed(args, code=0, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess(args, code, stdout=stdout, stderr=stderr)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_pending_state(workdir):
    path = _write(workdir / "pending_exercise.rs", PENDING_EXERCISE)
    exercise = Exercise("pending_exercise", path, Mode.COMPILE, "")
    expected = [
        ContextLine("// fake_exercise", 1, False),
        ContextLine("", 2, False),
        ContextLine("// I AM NOT DONE", 3, True),
        ContextLine("", 4, False),
        ContextLine("fn main() {", 5, False),
    ]
    assert exercise.state() == Pending(expected)
    assert exercise.looks_done() is False


def test_finished_exercise(workdir):
    path = _write(workdir / "finished_exercise.rs", FINISHED_EXERCISE)
    exercise = Exercise("finished_exercise", path, Mode.COMPILE, "")
    assert exercise.state() == Done()
    assert exercise.looks_done() is True


def test_marker_on_last_line_keeps_window_inside_file(workdir):
    path = _write(workdir / "end.rs", "a\nb\nc\n/// I   AM NOT   DONE\n")
    state = Exercise("end", path, Mode.COMPILE).state()
    assert [line.number for line in state.context] == [2, 3, 4]
    assert [line.important for line in state.context] == [False, False, True]


def test_clean(workdir):
    Path(temp_file()).touch()
    path = _write(workdir / "pending_exercise.rs", PENDING_EXERCISE)
    exercise = Exercise("example", path, Mode.COMPILE, "")
    with patch("rustlings.exercise.subprocess.run", return_value=_completed([])):
        compiled = exercise.compile()
    compiled.close()
    assert not Path(temp_file()).exists()


def test_context_manager_removes_binary(workdir):
    path = _write(workdir / "x.rs", FINISHED_EXERCISE)
    exercise = Exercise("x", path, Mode.COMPILE)
    with patch("rustlings.exercise.subprocess.run", return_value=_completed([])):
        with exercise.compile():
            Path(temp_file()).touch()
    assert not Path(temp_file()).exists()


def test_exercise_with_output(workdir):
    path = _write(workdir / "testSuccess.rs", TEST_SUCCESS)
    exercise = Exercise("exercise_with_output", path, Mode.TEST, "")
    calls = []

    def fake_run(args, **kwargs):
        calls.append(args)
        if args[0] == "rustc":
            return _completed(args)
        return _completed(args, stdout=b"THIS TEST TOO SHALL PASS\n")

    with patch("rustlings.exercise.subprocess.run", side_effect=fake_run):
        with exercise.compile() as compiled:
            out = compiled.run()
    assert "THIS TEST TOO SHALL PASS" in out.stdout
    assert calls[0][:2] == ["rustc", "--test"]
    assert calls[1] == [temp_file(), "--show-output"]


def test_compile_failure_raises_and_cleans(workdir):
    Path(temp_file()).touch()
    path = _write(workdir / "bad.rs", "fn main() {\n    let\n}\n")
    exercise = Exercise("bad", path, Mode.COMPILE)
    failed = _completed([], code=1, stderr=b"error: expected pattern")
    with patch("rustlings.exercise.subprocess.run", return_value=failed):
        with pytest.raises(CompilationError) as info:
            exercise.compile()
    assert info.value.output.stderr == "error: expected pattern"
    assert not Path(temp_file()).exists()


def test_run_failure_raises_run_error(workdir):
    path = _write(workdir / "t.rs", FINISHED_EXERCISE)
    exercise = Exercise("t", path, Mode.COMPILE)

    def fake_run(args, **kwargs):
        if args[0] == "rustc":
            return _completed(args)
        return _completed(args, code=101, stdout=b"out", stderr=b"panicked")

    with patch("rustlings.exercise.subprocess.run", side_effect=fake_run):
        compiled = exercise.compile()
        with pytest.raises(RunError) as info:
            compiled.run()
    assert info.value.output == ExerciseOutput(stdout="out", stderr="panicked")


def test_build_script_run_is_empty(workdir):
    (workdir / "exercises" / "tests").mkdir(parents=True)
    exercise = Exercise("build1", Path("exercises/tests/build1.rs"), Mode.BUILD_SCRIPT)
    with patch("rustlings.exercise.subprocess.run", return_value=_completed([])) as mocked:
        output = exercise.compile().run()
    assert output == ExerciseOutput(stdout="", stderr="")
    assert mocked.call_count == 1
    assert mocked.call_args.args[0][:2] == ["cargo", "test"]


def test_clippy_writes_manifest(workdir):
    (workdir / "exercises" / "clippy").mkdir(parents=True)
    exercise = Exercise("clippy1", Path("exercises/clippy/clippy1.rs"), Mode.CLIPPY)
    with patch("rustlings.exercise.subprocess.run", return_value=_completed([])) as mocked:
        exercise.compile()
    manifest = Path(CLIPPY_CARGO_TOML_PATH).read_text(encoding="utf-8")
    assert 'name = "clippy1"' in manifest
    assert 'path = "clippy1.rs"' in manifest
    assert mocked.call_count == 3
    assert mocked.call_args.args[0][:2] == ["cargo", "clippy"]


def test_clippy_without_directory_raises(workdir):
    exercise = Exercise("clippy1", Path("exercises/clippy/clippy1.rs"), Mode.CLIPPY)
    with pytest.raises(RuntimeError):
        exercise.compile()


def test_str_is_path():
    exercise = Exercise("a", Path("exercises/intro/intro1.rs"), Mode.COMPILE)
    assert str(exercise) == str(Path("exercises/intro/intro1.rs"))


def test_temp_file_names_process():
    assert temp_file().startswith(f"./temp_{os.getpid()}_")


def test_clean_ignores_missing_file(workdir):
    clean()
    assert not Path(temp_file()).exists()


def test_load_exercises(workdir):
    _write(
        workdir / "info.toml",
        '[[exercises]]\nname = "intro1"\npath = "exercises/intro/intro1.rs"\n'
        'mode = "compile"\nhint = "No hints."\n\n'
        '[[exercises]]\nname = "build"\npath = "exercises/tests/build.rs"\n'
        'mode = "buildscript"\nhint = ""\n',
    )
    exercises = load_exercises("info.toml")
    assert [e.name for e in exercises] == ["intro1", "build"]
    assert exercises[0].mode is Mode.COMPILE
    assert exercises[1].mode is Mode.BUILD_SCRIPT
    assert exercises[0].hint == "No hints."
    assert exercises[0].path == Path("exercises/intro/intro1.rs")


def test_load_exercises_rejects_unknown_mode(workdir):
    _write(
        workdir / "info.toml",
        '[[exercises]]\nname = "x"\npath = "x.rs"\nmode = "bogus"\nhint = ""\n',
    )
    with pytest.raises(ValueError):
        load_exercises("info.toml")


def test_load_exercises_requires_hint(workdir):
    _write(workdir / "info.toml", '[[exercises]]\nname = "x"\npath = "x.rs"\nmode = "test"\n')
    with pytest.raises(ValueError):
        load_exercises("info.toml")