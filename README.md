# rustdrills

A command-line companion for working through small Rust exercises. Each
exercise is a Rust source file, listed in an `info.toml` file in the directory
you run the tool from. rustdrills compiles an exercise with `rustc`, or with
`cargo` for Clippy and build-script exercises, and runs it or its tests. It
then tells you whether the exercise is finished.

An exercise counts as pending for as long as its file still holds a line
starting with an `// I AM NOT DONE` comment. Remove that line once the code
does what it should.

## Requirements

- Python 3.11 or newer
- A Rust toolchain with `rustc` on your `PATH`. Clippy and build-script
  exercises also need `cargo`.
- `git`, for the `reset` command.

## Installation

```
pip install .
```

## The exercise list

Every command except `--version` needs an `info.toml` in the current directory
and a working `rustc`; otherwise it prints a message and exits with code 1.
The file lists the exercises in the order they are meant to be solved:

```toml
[[exercises]]
name = "intro1"
path = "exercises/intro/intro1.rs"
mode = "compile"
hint = "Remove the I AM NOT DONE comment."
```

`mode` is one of:

- `compile`: build the file with `rustc` and run the binary
- `test`: build the file as a test harness with `rustc --test` and run the tests
- `clippy`: write `exercises/clippy/Cargo.toml` for the exercise and run
  `cargo clippy` on it with warnings denied
- `buildscript`: write `exercises/tests/Cargo.toml` for the exercise and run
  `cargo test` on it

## Usage

Run every command from the directory that holds `info.toml`:

```
rustdrills                    # welcome screen and introduction
rustdrills --version          # print the version
rustdrills watch              # verify exercises in order and re-check on every edit
rustdrills verify             # verify all exercises in the recommended order
rustdrills run <name>         # compile and run (or test) one exercise
rustdrills run next           # run the first exercise that is not done yet
rustdrills hint <name>        # show the hint for an exercise
rustdrills reset <name>       # stash your changes to an exercise with git
rustdrills list               # table of exercises with Done/Pending status
rustdrills lsp                # write rust-project.json for rust-analyzer
rustdrills cicvverify         # grade all exercises and write a JSON report
```

`next` may be given as the name to `run`, `hint` and `reset`. An unknown name,
or a missing one, ends with exit code 1.

Add `--nocapture` before the subcommand to show the output of test exercises.

`verify` exits with code 1 at the first exercise that fails to compile, fails
its run or tests, or still carries the pending marker. For a pending exercise
it shows the lines around the marker.

### Listing

`rustdrills list` takes these options:

- `-p`, `--paths`: print only the paths of the exercises
- `-n`, `--names`: print only the names of the exercises
- `-f`, `--filter TEXT`: keep exercises whose name or path contains any of the
  comma-separated patterns
- `-u`, `--unsolved`: show only pending exercises
- `-s`, `--solved`: show only finished exercises

The list ends with a progress line such as
`Progress: You completed 3 / 10 exercises (30.0 %).`

### Watch mode

`rustdrills watch` verifies the exercises one by one and stops at the first that
fails or is still marked as not done. Whenever a `.rs` file under `exercises/`
is created or modified, it checks that exercise first and then the others that
are still pending. Add `--success-hints` to show the hint as soon as an
exercise compiles. While the watcher runs you can type:

- `hint`: print the hint for the current exercise
- `clear`: clear the screen
- `quit`: leave watch mode
- `!<cmd>`: run a command, for example `!rustc --explain E0381`
- `help`: list these commands

### rust-analyzer

`rustdrills lsp` writes `rust-project.json` with one crate for every `.rs` file
below `exercises/`. The standard library sources are taken from
`RUST_SRC_PATH` when it is set, and otherwise from `rustc --print sysroot`.

### Grading report

`rustdrills cicvverify` runs every exercise concurrently, always showing test
output, and writes `.github/result/check_result.json`. The report holds a pass
or fail result for each exercise, with totals for exercises, successes,
failures and elapsed seconds.

### Output

Set the `NO_EMOJI` environment variable to get plain-text markers instead of
emoji.

## Using it from Python

`rustdrills.cli.main(argv=None)` runs the command line and returns its exit
code. The pieces behind it can be used on their own:

- `rustdrills.exercise`: `load_exercises(path)`, `Exercise` with `compile()`,
  `state()` and `looks_done()`, and the `CompilationError` and `ExerciseFailed`
  exceptions
- `rustdrills.verify`: `verify(exercises, progress, verbose, success_hints)`,
  which returns the first unfinished exercise or `None`
- `rustdrills.run`: `run(exercise, verbose)` and `reset(exercise)`
- `rustdrills.project`: `RustAnalyzerProject`
- `rustdrills.cli`: `find_exercise`, `list_exercises` and `cicv_verify`

## What it does not do

rustdrills ships no exercises and no `info.toml`. It works only on an exercise
set that you provide in the layout described above.