"""The command line: listing, running, verifying and watching exercises."""

from __future__ import annotations

import json
import os
import subprocess
import sys
import threading
import time
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

import click

from .exercise import CompilationError, Exercise, ExerciseFailed, load_exercises
from .project import RustAnalyzerProject
from .run import reset, run
from .verify import verify
from .watch import WatchStatus, watch

VERSION = "5.5.1"
INFO_FILE = "info.toml"
CHECK_RESULT_PATH = ".github/result/check_result.json"

DEFAULT_OUT = """Thanks for installing rustdrills!

Is this your first time? Don't worry, rustdrills was made for beginners! We are
going to teach you a lot of things about Rust, but before we can get
started, here's a couple of notes about how rustdrills operates:

1. The central concept behind rustdrills is that you solve exercises. These
   exercises usually have some sort of syntax error in them, which will cause
   them to fail compilation or testing. Sometimes there's a logic error instead
   of a syntax error. No matter what error, it's your job to find it and fix it!
   You'll know when you fixed it because then, the exercise will compile and
   rustdrills will be able to move on to the next exercise.
2. If you run rustdrills in watch mode (which we recommend), it'll automatically
   start with the first exercise. Don't get confused by an error message popping
   up as soon as you run rustdrills! This is part of the exercise that you're
   supposed to solve, so open the exercise file in an editor and start your
   detective work!
3. If you're stuck on an exercise, there is a helpful hint you can view by typing
   'hint' (in watch mode), or running `rustdrills hint exercise_name`.
4. If an exercise doesn't make sense to you, feel free to open an issue!
   We look at every issue, and sometimes, other learners do too so you can
   help each other out!
5. If you want to use `rust-analyzer` with exercises, which provides features like
   autocompletion, run the command `rustdrills lsp`.

Got all that? Great! To get started, run `rustdrills watch` in order to get the first
exercise. Make sure to have your editor open!"""

FINISH_LINE = """+----------------------------------------------------+
|          You made it to the Fe-nish line!          |
+----------------------------------------------------+

We hope you enjoyed learning about the various aspects of Rust!
If you noticed any issues, please don't hesitate to report them.
You can also contribute your own exercises to help the greater community!

Before reporting an issue or contributing, please read the contributing guidelines."""

WELCOME = """       welcome to...

   r u s t d r i l l s"""


@dataclass
class ExerciseResult:
    """Whether one exercise passed."""

    name: str
    result: bool


@dataclass
class ExerciseStatistics:
    """Totals for a batch check."""

    total_exercations: int
    total_succeeds: int = 0
    total_failures: int = 0
    total_time: int = 0


@dataclass
class ExerciseCheckList:
    """The report written after checking every exercise."""

    statistics: ExerciseStatistics
    exercises: list[ExerciseResult] = field(default_factory=list)
    user_name: str | None = None

    def to_dict(self) -> dict:
        return {
            "exercises": [
                {"name": item.name, "result": item.result} for item in self.exercises
            ],
            "user_name": self.user_name,
            "statistics": {
                "total_exercations": self.statistics.total_exercations,
                "total_succeeds": self.statistics.total_succeeds,
                "total_failures": self.statistics.total_failures,
                "total_time": self.statistics.total_time,
            },
        }


def find_exercise(name: str, exercises: Iterable[Exercise]) -> Exercise:
    """Find an exercise by name; "next" means the first one not yet done."""
    if name == "next":
        for exercise in exercises:
            if not exercise.looks_done():
                return exercise
        raise LookupError(
            "🎉 Congratulations! You have done all the exercises!\n"
            "🔚 There are no more exercises to do next!"
        )
    for exercise in exercises:
        if exercise.name == name:
            return exercise
    raise LookupError(f"No exercise found for '{name}'!")


def rustc_exists() -> bool:
    """Check that the compiler can be started."""
    try:
        proc = subprocess.run(
            ["rustc", "--version"], stdout=subprocess.DEVNULL, check=False
        )
    except OSError:
        return False
    return proc.returncode == 0


def list_exercises(
    exercises: Iterable[Exercise],
    paths: bool = False,
    names: bool = False,
    name_filter: str | None = None,
    unsolved: bool = False,
    solved: bool = False,
) -> Iterator[str]:
    """Yield the lines of the exercise listing, ending with the progress line."""
    exercises = list(exercises)
    if not paths and not names:
        yield f"{'Name':<17}\t{'Path':<46}\t{'Status':<7}"
    filters = [f for f in (name_filter or "").lower().split(",") if f.strip()]
    done_count = 0
    for exercise in exercises:
        fname = str(exercise.path)
        matches = any(f in exercise.name or f in fname for f in filters)
        done = exercise.looks_done()
        if done:
            done_count += 1
        status = "Done" if done else "Pending"
        wanted = (
            (done and solved)
            or (not done and unsolved)
            or (not solved and not unsolved)
        )
        if wanted and (matches or name_filter is None):
            if paths:
                yield fname
            elif names:
                yield exercise.name
            else:
                yield f"{exercise.name:<17}\t{fname:<46}\t{status:<7}"
    if exercises:
        percentage = f"{done_count / len(exercises) * 100.0:.1f}"
    else:
        percentage = "NaN"
    yield (
        f"Progress: You completed {done_count} / {len(exercises)} "
        f"exercises ({percentage} %)."
    )


def cicv_verify(exercises: Iterable[Exercise], verbose: bool) -> ExerciseCheckList:
    """Run every exercise concurrently and collect a result report.

    Test output is always shown, whatever verbose says.
    """
    exercises = list(exercises)
    total = len(exercises)
    started = int(time.time())
    check_list = ExerciseCheckList(statistics=ExerciseStatistics(total_exercations=total))
    lock = threading.Lock()
    rights = 0

    def check(exercise: Exercise, task_started: int) -> None:
        nonlocal rights
        try:
            run(exercise, True)
        except (CompilationError, ExerciseFailed):
            passed = False
        else:
            passed = True
        with lock:
            if passed:
                rights += 1
                print(f"{exercise.name}执行成功")
            else:
                print(f"{exercise.name}执行失败")
            print(f"总的题目数: {total}")
            print(f"当前做正确的题目数: {rights}")
            print(f"当前修改试卷耗时: {int(time.time()) - task_started} s")
            check_list.exercises.append(ExerciseResult(name=exercise.name, result=passed))
            if passed:
                check_list.statistics.total_succeeds += 1
            else:
                check_list.statistics.total_failures += 1

    with ThreadPoolExecutor() as pool:
        futures = [pool.submit(check, e, int(time.time())) for e in exercises]
        for future in futures:
            future.result()

    total_time = int(time.time()) - started
    print(
        "===============================试卷批改完成,总耗时: "
        f"{total_time} s; =================================="
    )
    check_list.statistics.total_time = total_time
    return check_list


@dataclass
class _Session:
    exercises: list[Exercise]
    verbose: bool


def _exit(code: int) -> click.exceptions.Exit:
    return click.exceptions.Exit(code)


def _require_name(name: str | None) -> str:
    if name is None:
        click.echo("Required positional arguments not provided:\n    name", err=True)
        raise _exit(1)
    return name


def _find(name: str | None, exercises: list[Exercise]) -> Exercise:
    try:
        return find_exercise(_require_name(name), exercises)
    except LookupError as err:
        click.echo(err.args[0])
        raise _exit(1) from err


@click.group(
    invoke_without_command=True,
    help="A collection of small exercises to get you used to writing and reading Rust code.",
)
@click.option("--nocapture", is_flag=True, help="show outputs from the test exercises")
@click.option("-v", "--version", "show_version", is_flag=True, help="show the executable version")
@click.pass_context
def _cli(ctx: click.Context, nocapture: bool, show_version: bool) -> None:
    if show_version:
        click.echo(f"v{VERSION}")
        raise _exit(0)
    if ctx.invoked_subcommand is None:
        click.echo(f"\n{WELCOME}\n")
    if not Path(INFO_FILE).exists():
        click.echo(f"{sys.argv[0]} must be run from the rustdrills directory")
        click.echo("Try `cd rustdrills/`!")
        raise _exit(1)
    if not rustc_exists():
        click.echo("We cannot find `rustc`.")
        click.echo("Try running `rustc --version` to diagnose your problem.")
        click.echo("For instructions on how to install Rust, check the README.")
        raise _exit(1)
    exercises = load_exercises(INFO_FILE)
    if ctx.invoked_subcommand is None:
        click.echo(f"{DEFAULT_OUT}\n")
        raise _exit(0)
    ctx.obj = _Session(exercises=exercises, verbose=nocapture)


@_cli.command("list", help="Lists the exercises available.")
@click.option("-p", "--paths", is_flag=True, help="show only the paths of the exercises")
@click.option("-n", "--names", is_flag=True, help="show only the names of the exercises")
@click.option(
    "-f",
    "--filter",
    "name_filter",
    default=None,
    help="match exercise names; comma separated patterns are acceptable",
)
@click.option("-u", "--unsolved", is_flag=True, help="display only exercises not yet solved")
@click.option("-s", "--solved", is_flag=True, help="display only exercises that have been solved")
@click.pass_obj
def _list_command(
    session: _Session,
    paths: bool,
    names: bool,
    name_filter: str | None,
    unsolved: bool,
    solved: bool,
) -> None:
    try:
        for line in list_exercises(
            session.exercises, paths, names, name_filter, unsolved, solved
        ):
            click.echo(line)
    except BrokenPipeError:
        raise _exit(0)
    except OSError:
        raise _exit(1)


@_cli.command("run", help="Runs/Tests a single exercise.")
@click.argument("name", required=False)
@click.pass_obj
def _run_command(session: _Session, name: str | None) -> None:
    exercise = _find(name, session.exercises)
    try:
        run(exercise, session.verbose)
    except (CompilationError, ExerciseFailed):
        raise _exit(1)


@_cli.command("reset", help='Resets a single exercise using "git stash -- <filename>".')
@click.argument("name", required=False)
@click.pass_obj
def _reset_command(session: _Session, name: str | None) -> None:
    exercise = _find(name, session.exercises)
    try:
        reset(exercise)
    except OSError:
        raise _exit(1)


@_cli.command("hint", help="Returns a hint for the given exercise.")
@click.argument("name", required=False)
@click.pass_obj
def _hint_command(session: _Session, name: str | None) -> None:
    click.echo(_find(name, session.exercises).hint)


@_cli.command("verify", help="Verifies all exercises according to the recommended order.")
@click.pass_obj
def _verify_command(session: _Session) -> None:
    exercises = session.exercises
    if verify(exercises, (0, len(exercises)), session.verbose, False) is not None:
        raise _exit(1)


@_cli.command("cicvverify", help="Checks every exercise and writes a result report.")
@click.pass_obj
def _cicv_command(session: _Session) -> None:
    check_list = cicv_verify(session.exercises, session.verbose)
    target = Path(CHECK_RESULT_PATH)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(
        json.dumps(check_list.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
    )


@_cli.command("lsp", help="Enable rust-analyzer for exercises.")
def _lsp_command() -> None:
    project = RustAnalyzerProject()
    try:
        project.get_sysroot_src()
    except OSError as err:
        raise click.ClickException(
            "Couldn't find toolchain path, do you have `rustc` installed?"
        ) from err
    project.exercises_to_json()
    if not project.crates:
        click.echo(
            "Failed find any exercises, make sure you're in the `rustdrills` folder"
        )
        return
    try:
        project.write_to_disk()
    except OSError:
        click.echo("Failed to write rust-project.json to disk for rust-analyzer")
        return
    click.echo("Successfully generated rust-project.json")
    click.echo(
        "rust-analyzer will now parse exercises, restart your language server or editor"
    )


@_cli.command("watch", help="Reruns `verify` when files were edited.")
@click.option("--success-hints", is_flag=True, help="show hints on success")
@click.pass_obj
def _watch_command(session: _Session, success_hints: bool) -> None:
    try:
        status = watch(session.exercises, session.verbose, success_hints)
    except OSError as err:
        click.echo(f"Error: Could not watch your progress. Error message was {err!r}.")
        click.echo(
            "Most likely you've run out of disk space or your 'inotify limit' "
            "has been reached."
        )
        raise _exit(1)
    if status is WatchStatus.FINISHED:
        emoji = "★" if "NO_EMOJI" in os.environ else "🎉"
        click.echo(f"{emoji} All exercises completed! {emoji}")
        click.echo(f"\n{FINISH_LINE}\n")
    else:
        click.echo("We hope you're enjoying learning about Rust!")
        click.echo(
            "If you want to continue working on the exercises at a later point, "
            "you can simply run `rustdrills watch` again"
        )


def main(argv: list[str] | None = None) -> int:
    """Run the command line and return the exit code."""
    try:
        result = _cli.main(args=argv, prog_name="rustdrills", standalone_mode=False)
    except click.ClickException as err:
        err.show()
        return err.exit_code
    except click.Abort:
        click.echo("Aborted!", err=True)
        return 1
    return result if isinstance(result, int) else 0


if __name__ == "__main__":
    sys.exit(main())