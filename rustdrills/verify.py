"""Verification of exercises: compile, run or test them and report progress."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

import click

from .exercise import (
    CompilationError,
    CompiledExercise,
    Exercise,
    ExerciseFailed,
    Mode,
)
from .ui import success, warn

BAR_WIDTH = 60


class _StatusLine:
    """A one-line status message on stderr, shown only on a terminal."""

    def __init__(self) -> None:
        self._active = sys.stderr.isatty()
        self._shown = False

    def show(self, message: str) -> None:
        if self._active:
            sys.stderr.write(f"\r\x1b[2K{message}")
            sys.stderr.flush()
            self._shown = True

    def clear(self) -> None:
        if self._shown:
            sys.stderr.write("\r\x1b[2K")
            sys.stderr.flush()
            self._shown = False


@contextmanager
def _status(message: str) -> Iterator[_StatusLine]:
    line = _StatusLine()
    line.show(message)
    try:
        yield line
    finally:
        line.clear()


class _Progress:
    """A progress bar drawn on stderr."""

    def __init__(self, position: int, total: int) -> None:
        self.position = position
        self.total = total

    def _percentage(self) -> float:
        return self.position / self.total * 100.0 if self.total else 0.0

    def _bar(self) -> str:
        filled = self.position * BAR_WIDTH // self.total if self.total else 0
        if filled >= BAR_WIDTH:
            return "#" * BAR_WIDTH
        return "#" * filled + ">" + "-" * (BAR_WIDTH - filled - 1)

    def draw(self) -> None:
        click.echo(
            f"\rProgress: [{self._bar()}] {self.position}/{self.total} "
            f"({self._percentage():.1f} %)",
            nl=False,
            err=True,
        )

    def advance(self) -> None:
        self.position += 1
        self.draw()

    def finish(self) -> None:
        click.echo(err=True)


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int],
    verbose: bool,
    success_hints: bool,
) -> Exercise | None:
    """Check exercises in order; return the first one not done, or None."""
    num_done, total = progress
    bar = _Progress(num_done, total)
    bar.draw()
    try:
        for exercise in exercises:
            try:
                done = _check(exercise, verbose, success_hints)
            except (CompilationError, ExerciseFailed):
                done = False
            if not done:
                return exercise
            bar.advance()
    finally:
        bar.finish()
    return None


def _check(exercise: Exercise, verbose: bool, success_hints: bool) -> bool:
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            return _compile_and_test(exercise, True, verbose, success_hints)
        case Mode.COMPILE:
            return _compile_and_run_interactively(exercise, success_hints)
        case Mode.CLIPPY:
            return _compile_only(exercise, success_hints)
    raise ValueError(f"unknown mode {exercise.mode!r}")


def test(exercise: Exercise, verbose: bool) -> None:
    """Compile and run an exercise's test harness without prompting."""
    _compile_and_test(exercise, False, verbose, False)


def _compile(exercise: Exercise, status: _StatusLine) -> CompiledExercise:
    try:
        return exercise.compile()
    except CompilationError as err:
        status.clear()
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        click.echo(err.output.stderr)
        raise


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    with _status(f"Compiling {exercise}...") as status:
        compiled = _compile(exercise, status)
    compiled.close()
    return prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    with _status(f"Compiling {exercise}...") as status:
        with _compile(exercise, status) as compiled:
            status.show(f"Running {exercise}...")
            try:
                output = compiled.run()
            except ExerciseFailed as err:
                status.clear()
                warn(f"Ran {exercise} with errors")
                click.echo(err.output.stdout)
                click.echo(err.output.stderr)
                raise
            status.clear()
            return prompt_for_completion(exercise, output.stdout, success_hints)


def _compile_and_test(
    exercise: Exercise, interactive: bool, verbose: bool, success_hints: bool
) -> bool:
    with _status(f"Testing {exercise}...") as status:
        with _compile(exercise, status) as compiled:
            try:
                output = compiled.run()
            except ExerciseFailed as err:
                status.clear()
                warn(f"Testing of {exercise} failed! Please try again. Here's the output:")
                click.echo(err.output.stdout)
                raise
            status.clear()
            if verbose:
                click.echo(output.stdout)
            if interactive:
                return prompt_for_completion(exercise, None, success_hints)
            return True


def prompt_for_completion(
    exercise: Exercise, prompt_output: str | None, success_hints: bool
) -> bool:
    """Return True if the exercise is done; otherwise show where the marker sits."""
    state = exercise.state()
    if state.done():
        return True

    match exercise.mode:
        case Mode.COMPILE:
            success(f"Successfully ran {exercise}!")
        case Mode.TEST:
            success(f"Successfully tested {exercise}!")
        case Mode.CLIPPY | Mode.BUILD_SCRIPT:
            success(f"Successfully compiled {exercise}!")

    no_emoji = "NO_EMOJI" in os.environ
    if no_emoji:
        clippy_msg = "The code is compiling, and Clippy is happy!"
    else:
        clippy_msg = "The code is compiling, and 📎 Clippy 📎 is happy!"
    success_msg = {
        Mode.COMPILE: "The code is compiling!",
        Mode.TEST: "The code is compiling, and the tests pass!",
        Mode.CLIPPY: clippy_msg,
        Mode.BUILD_SCRIPT: "Build script works!",
    }[exercise.mode]

    click.echo()
    if no_emoji:
        click.echo(f"~*~ {success_msg} ~*~")
    else:
        click.echo(f"🎉 🎉  {success_msg} 🎉 🎉")
    click.echo()

    if prompt_output is not None:
        click.echo("Output:")
        click.echo(separator())
        click.echo(prompt_output)
        click.echo(separator())
        click.echo()
    if success_hints:
        click.echo("Hints:")
        click.echo(separator())
        click.echo(exercise.hint)
        click.echo(separator())
        click.echo()

    click.echo("You can keep working on this exercise,")
    click.echo(
        "or jump into the next one by removing the "
        f"{click.style('`I AM NOT DONE`', bold=True)} comment:"
    )
    click.echo()
    for context_line in state.context:
        text = (
            click.style(context_line.line, bold=True)
            if context_line.important
            else context_line.line
        )
        number = click.style(f"{context_line.number:>2}", fg="blue", bold=True)
        click.echo(f"{number} {click.style('|', fg='blue')}  {text}")
    return False


def separator() -> str:
    """A bold horizontal rule."""
    return click.style("=" * 20, bold=True)