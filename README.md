# rustlings

A command-line companion for working through small Rust exercises. It reads the
exercise list from `info.toml`, compiles each exercise with `rustc` (or `cargo`
for Clippy and build-script exercises), runs it, and tells you whether it is
done.

## Requirements

- Python 3.11 or later
- A Rust toolchain with `rustc` on your `PATH` (`cargo` and Clippy for the
  Clippy exercises, `git` for `reset`)

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Usage

Run every command from the directory that holds `info.toml`. Anywhere else the
command prints a message and exits with status 1. The command also exits with
status 1 if `rustc --version` cannot be run. Only `-v` skips both checks.

```
rustlings                 # welcome text and a short introduction
rustlings -v              # print the version
rustlings watch           # verify exercises in order, re-checking on every save
rustlings verify          # verify all exercises once, in the listed order
rustlings run <name>      # compile and run (or test) a single exercise
rustlings run next        # run the first exercise that is not done yet
rustlings hint <name>     # show the hint for an exercise
rustlings reset <name>    # restore an exercise with "git stash -- <file>"
rustlings list            # table of exercises with Done/Pending status
rustlings lsp             # write rust-project.json for rust-analyzer
rustlings cicvverify      # grade every exercise and write a JSON report
```

Put `--nocapture` before the subcommand to see the output of test exercises,
for example `rustlings --nocapture run testSuccess`.

Exit status is 0 on success and 1 in these cases:

- a verification or run fails
- an exercise name is unknown
- `run next` finds nothing left to do
- `run`, `reset` or `hint` is given without a name

### The exercise list

`info.toml` holds an `exercises` array. Each entry has a `name`, a `path`, a
`hint` and a `mode`. The mode is one of:

- `compile`: built with `rustc` and run
- `test`: built as a test harness and run with `--show-output`
- `clippy`: checked with `cargo clippy`, treating warnings as errors. The
  manifest is written to `./exercises/clippy/Cargo.toml`.
- `buildscript`: run with `cargo test`. The manifest is written to
  `./exercises/tests/Cargo.toml`.

### Marking an exercise done

Each exercise holds an `// I AM NOT DONE` comment. An exercise that compiles and
passes but still has the marker counts as pending. In that case `verify` and
`watch` show the two lines on either side of the marker, then stop. Delete the
marker to move on. `run` does not look at the marker.

### Watch mode

`rustlings watch` first verifies every exercise. If one is not done, it watches
`./exercises` and re-verifies whenever a `.rs` file there is created or
modified. The changed exercise is checked first, then every other pending
exercise. While it runs you can type:

- `hint`: print the hint for the exercise that failed last
- `clear`: clear the screen
- `quit`: leave watch mode
- `!<cmd>`: run a command, such as `!rustc --explain E0381`
- `help`: list these commands

Pass `--success-hints` to show an exercise's hint when it passes but still has
its marker.

### Listing exercises

`rustlings list` takes these options:

- `-p` / `--paths`: print only exercise paths
- `-n` / `--names`: print only exercise names
- `-f` / `--filter <patterns>`: keep only exercises whose name or path contains
  one of the comma-separated patterns. Patterns are lower-cased before matching.
- `-u` / `--unsolved`: keep only pending exercises
- `-s` / `--solved`: keep only finished exercises

The list ends with a line giving how many exercises are done and the
percentage.

### rust-analyzer support

`rustlings lsp` writes `./rust-project.json` with one crate for every `.rs`
file below `./exercises`. The standard library source path comes from the
`RUST_SRC_PATH` environment variable. If that is not set, it is taken from
`rustc --print sysroot`.

### Grading report

`rustlings cicvverify` runs every exercise concurrently and prints each result
as it finishes. It then writes `.github/result/check_result.json`. The report
holds each exercise's name and result, along with the number of exercises,
successes and failures and the total time in seconds. The `.github/result`
directory must already exist.

### Emoji

Set the `NO_EMOJI` environment variable to use plain-text status markers.

## Using it from Python

The pieces behind the commands can be imported:

- `rustlings.exercise`: `load_exercises`, `Exercise` with `compile()`,
  `state()` and `looks_done()`, and the `Done` and `Pending` states
- `rustlings.verify`: `verify`, which raises `ExerciseFailed` at the first
  exercise that is not done
- `rustlings.run`: `run` and `reset`
- `rustlings.project`: `RustAnalyzerProject`
- `rustlings.cli`: `main`, `find_exercise`, `list_exercises` and `cicv_verify`