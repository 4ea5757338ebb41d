"""Running a single exercise and resetting it."""

from __future__ import annotations

import subprocess

import click

from .exercise import Exercise, ExerciseFailed, CompilationError, Mode
from .ui import success, warn
from .verify import _status, test


def run(exercise: Exercise, verbose: bool) -> None:
    """Compile and run, or test, one exercise; raise if it fails."""
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            test(exercise, verbose)
        case Mode.COMPILE | Mode.CLIPPY:
            _compile_and_run(exercise)


def reset(exercise: Exercise) -> subprocess.Popen:
    """Stash the changes made to the exercise file with git."""
    return subprocess.Popen(["git", "stash", "--", str(exercise.path)])


def _compile_and_run(exercise: Exercise) -> None:
    with _status(f"Compiling {exercise}...") as status:
        try:
            compiled = exercise.compile()
        except CompilationError as err:
            status.clear()
            warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
            click.echo(err.output.stderr)
            raise
        with compiled:
            status.show(f"Running {exercise}...")
            try:
                output = compiled.run()
            except ExerciseFailed as err:
                status.clear()
                click.echo(err.output.stdout)
                click.echo(err.output.stderr)
                warn(f"Ran {exercise} with errors")
                raise
            status.clear()
            click.echo(output.stdout)
            success(f"Successfully ran {exercise}")