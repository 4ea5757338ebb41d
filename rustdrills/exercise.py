"""Exercises: their description, completion state, compilation and execution."""

from __future__ import annotations

import os
import re
import subprocess
import threading
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

RUSTC_COLOR_ARGS = ("--color", "always")
RUSTC_EDITION_ARGS = ("--edition", "2021")
I_AM_DONE_REGEX = re.compile(r"^\s*///?\s*I\s+AM\s+NOT\s+DONE", re.MULTILINE)
CONTEXT = 2
CLIPPY_CARGO_TOML_PATH = "./exercises/clippy/Cargo.toml"
BUILD_SCRIPT_CARGO_TOML_PATH = "./exercises/tests/Cargo.toml"


def temp_file() -> str:
    """Return a temporary file name unique to this process and thread."""
    return f"./temp_{os.getpid()}_ThreadId{threading.get_ident()}"


def clean() -> None:
    """Remove the temporary binary, if any."""
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
    """A source line shown around the pending marker."""

    line: str
    number: int
    important: bool


@dataclass(frozen=True)
class State:
    """Completion state: done when there is no pending context."""

    context: tuple[ContextLine, ...] = ()

    def done(self) -> bool:
        return not self.context


@dataclass(frozen=True)
class ExerciseOutput:
    """Captured output of a compiler or exercise run."""

    stdout: str
    stderr: str


class CompilationError(Exception):
    """Raised when an exercise fails to compile."""

    def __init__(self, exercise: Exercise, output: ExerciseOutput) -> None:
        super().__init__(f"compilation of {exercise} failed")
        self.exercise = exercise
        self.output = output


class ExerciseFailed(Exception):
    """Raised when a compiled exercise exits unsuccessfully."""

    def __init__(self, exercise: Exercise, output: ExerciseOutput) -> None:
        super().__init__(f"running {exercise} failed")
        self.exercise = exercise
        self.output = output


def _execute(args: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(args, capture_output=True, check=False)


def _output(proc: subprocess.CompletedProcess) -> ExerciseOutput:
    return ExerciseOutput(
        stdout=(proc.stdout or b"").decode("utf-8", errors="replace"),
        stderr=(proc.stderr or b"").decode("utf-8", errors="replace"),
    )


def _cargo_toml(name: str) -> str:
    return (
        "[package]\n"
        f'name = "{name}"\n'
        'version = "0.0.1"\n'
        'edition = "2021"\n'
        "[[bin]]\n"
        f'name = "{name}"\n'
        f'path = "{name}.rs"'
    )


def _write_cargo_toml(path: str, name: str) -> None:
    try:
        Path(path).write_text(_cargo_toml(name), encoding="utf-8")
    except OSError as err:
        if "NO_EMOJI" in os.environ:
            message = "Failed to write Clippy Cargo.toml file."
        else:
            message = "Failed to write 📎 Clippy 📎 Cargo.toml file."
        raise OSError(message) from err


def _source_lines(source: str) -> list[str]:
    lines = source.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


@dataclass
class Exercise:
    """An exercise as described in info.toml."""

    name: str
    path: Path
    mode: Mode
    hint: str = ""

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.mode = Mode(self.mode)

    def __str__(self) -> str:
        return str(self.path)

    def compile(self) -> CompiledExercise:
        """Compile the exercise; raise CompilationError on failure."""
        path = str(self.path)
        target = temp_file()
        match self.mode:
            case Mode.COMPILE:
                proc = _execute(
                    ["rustc", path, "-o", target, *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS]
                )
            case Mode.TEST:
                proc = _execute(
                    ["rustc", "--test", path, "-o", target,
                     *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS]
                )
            case Mode.CLIPPY:
                _write_cargo_toml(CLIPPY_CARGO_TOML_PATH, self.name)
                # Build an executable too, so clippy exercises can be run.
                _execute(
                    ["rustc", path, "-o", target, *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS]
                )
                # A clean is needed for clippy to report every lint.
                _execute(
                    ["cargo", "clean", "--manifest-path", CLIPPY_CARGO_TOML_PATH,
                     *RUSTC_COLOR_ARGS]
                )
                proc = _execute(
                    ["cargo", "clippy", "--manifest-path", CLIPPY_CARGO_TOML_PATH,
                     *RUSTC_COLOR_ARGS, "--", "-D", "warnings", "-D", "clippy::float_cmp"]
                )
            case Mode.BUILD_SCRIPT:
                _write_cargo_toml(BUILD_SCRIPT_CARGO_TOML_PATH, self.name)
                proc = _execute(
                    ["cargo", "test", "--manifest-path", BUILD_SCRIPT_CARGO_TOML_PATH]
                )
        if proc.returncode == 0:
            return CompiledExercise(self)
        clean()
        raise CompilationError(self, _output(proc))

    def run(self) -> ExerciseOutput:
        """Run the compiled binary; raise ExerciseFailed on a non-zero exit."""
        match self.mode:
            case Mode.TEST:
                arg = "--show-output"
            case Mode.BUILD_SCRIPT:
                return ExerciseOutput(stdout="", stderr="")
            case _:
                arg = ""
        proc = _execute([temp_file(), arg])
        output = _output(proc)
        if proc.returncode == 0:
            return output
        raise ExerciseFailed(self, output)

    def state(self) -> State:
        """Return whether the file still carries the pending marker."""
        source = self.path.read_text(encoding="utf-8")
        if not I_AM_DONE_REGEX.search(source):
            return State()
        lines = _source_lines(source)
        matched = next(
            (i for i, line in enumerate(lines) if I_AM_DONE_REGEX.search(line)), None
        )
        if matched is None:
            raise RuntimeError(f"pending marker in {self} does not sit on one line")
        low = max(matched - CONTEXT, 0)
        high = matched + CONTEXT
        return State(
            tuple(
                ContextLine(line=line, number=i + 1, important=i == matched)
                for i, line in enumerate(lines)
                if low <= i <= high
            )
        )

    def looks_done(self) -> bool:
        """Check, from the marker alone, whether the exercise is solved."""
        return self.state().done()


class CompiledExercise:
    """A successful compilation; closing it removes the binary."""

    def __init__(self, exercise: Exercise) -> None:
        self.exercise = exercise

    def run(self) -> ExerciseOutput:
        return self.exercise.run()

    def close(self) -> None:
        clean()

    def __enter__(self) -> CompiledExercise:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def load_exercises(path: str | os.PathLike = "info.toml") -> list[Exercise]:
    """Read the exercise list from a TOML file."""
    with open(path, "rb") as handle:
        data = tomllib.load(handle)
    return [
        Exercise(
            name=entry["name"],
            path=Path(entry["path"]),
            mode=Mode(entry["mode"]),
            hint=entry["hint"],
        )
        for entry in data["exercises"]
    ]