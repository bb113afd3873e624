# rustdrills

A command-line coach for working through small Rust exercises. Each exercise is
a single `.rs` file listed in an `info.toml` file. `rustdrills` compiles it, runs
it or runs its tests, and tells you when it passes. An exercise counts as
unfinished while it still contains an `// I AM NOT DONE` marker comment
(`/// I AM NOT DONE` is recognised too).

## Requirements

- Python 3.11 or later
- A Rust toolchain with `rustc` on your `PATH`. Clippy and build-script
  exercises also need `cargo`; `reset` needs `git`.

## Installation

```
pip install .
```

## Usage

Run every command from the directory that holds `info.toml`. Without that file,
or without a working `rustc`, every command except `--version` exits with
status 1.

```
rustdrills                 # welcome text and a short introduction
rustdrills --version       # print the version
rustdrills watch           # verify exercises in order, re-checking when files change
rustdrills verify          # verify all exercises in order; exit status 1 at the first failure
rustdrills run <name>      # compile and run or test a single exercise
rustdrills run next        # run the first unfinished exercise
rustdrills hint <name>     # print the hint for an exercise
rustdrills reset <name>    # run `git stash -- <path>` for the exercise file
rustdrills list            # table of exercises and their status
rustdrills lsp             # write rust-project.json for rust-analyzer
rustdrills cicvverify      # grade every exercise and write a JSON report
```

`--nocapture` (given before the subcommand) shows the output of test
exercises. An unknown exercise name prints a message and exits with status 1.

### Exercise modes

`mode` in `info.toml` decides how an exercise is checked:

- `compile`: built with `rustc` and the binary run
- `test`: built with `rustc --test` and run with `--show-output`
- `clippy`: a `Cargo.toml` is written to `exercises/clippy/` and
  `cargo clippy` is run with warnings denied
- `buildscript`: a `Cargo.toml` is written to `exercises/tests/` and
  `cargo test` is run

In `verify` and `watch`, an exercise that passes but still has its marker
comment stops the run and shows the lines around the marker.

### Listing exercises

`rustdrills list` takes these options:

- `-p`, `--paths`: print only the paths
- `-n`, `--names`: print only the names
- `-f`, `--filter PATTERNS`: keep exercises whose name or path contains one of
  the comma-separated patterns (the patterns are lower-cased first)
- `-u`, `--unsolved`: only exercises not yet solved
- `-s`, `--solved`: only solved exercises

The listing ends with a progress line counting all exercises.

### Watch mode

`rustdrills watch` needs an `exercises` directory. It verifies the exercises in
order and, after a failure, re-checks whenever a `.rs` file below `exercises`
is created or modified. You can type these commands:

- `hint`: print the hint for the current exercise
- `clear`: clear the screen
- `quit`: leave watch mode
- `!<cmd>`: run a command, such as `!rustc --explain E0381`
- `help`: list these commands

Pass `--success-hints` to print hints as soon as an exercise passes.

### rust-analyzer support

`rustdrills lsp` writes `rust-project.json` in the current directory with one
crate for every `.rs` file below `exercises`. The standard library sources are
taken from `RUST_SRC_PATH` if it is set, otherwise from `rustc --print sysroot`.

### Grading report

`rustdrills cicvverify` runs every exercise concurrently and writes the outcome
of each, with totals and the elapsed time in seconds, to
`.github/result/check_result.json`. That directory must already exist. The
report looks like this:

```json
{
  "exercises": [{"name": "intro1", "result": true}],
  "user_name": null,
  "statistics": {
    "total_exercations": 1,
    "total_succeeds": 1,
    "total_failures": 0,
    "total_time": 2
  }
}
```

Exercises appear in the order they finished.

### Environment

Set `NO_EMOJI` to print plain-text symbols instead of emoji.

## The `info.toml` format

```toml
[[exercises]]
name = "intro1"
path = "exercises/intro/intro1.rs"
mode = "compile"
hint = "Remove the I AM NOT DONE comment to move on."
```

`mode` is one of `compile`, `test`, `clippy` or `buildscript`.

## What it does not include

`rustdrills` is only the runner. It ships no exercises and no `info.toml`; you
supply both.