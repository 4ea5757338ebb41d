"""Watch mode: re-verify exercises whenever their files change."""

from __future__ import annotations

import os
import queue
import subprocess
import sys
import threading
from collections.abc import Iterable
from enum import Enum
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .exercise import Exercise
from .verify import verify

EXERCISES_DIR = "./exercises"

HELP_TEXT = (
    "Commands available to you in watch mode:\n"
    "  hint   - prints the current exercise's hint\n"
    "  clear  - clears the screen\n"
    "  quit   - quits watch mode\n"
    "  !<cmd> - executes a command, like `!rustc --explain E0381`\n"
    "  help   - displays this help message\n"
    "\n"
    "Watch mode automatically re-evaluates the current exercise\n"
    "when you edit a file's contents."
)


class WatchStatus(Enum):
    """How watch mode ended."""

    FINISHED = "finished"
    UNFINISHED = "unfinished"


def handle_shell_command(
    line: str, hint_holder: dict, quit_event: threading.Event
) -> None:
    """Act on one line typed in watch mode.

    hint_holder maps "hint" to the hint of the exercise that failed last.
    """
    command = line.strip()
    if command == "hint":
        hint = hint_holder.get("hint")
        if hint is not None:
            print(hint)
    elif command == "clear":
        print("\x1b[2J\x1b[1;1H")
    elif command == "quit":
        quit_event.set()
        print("Bye!")
    elif command == "help":
        print(HELP_TEXT)
    elif command.startswith("!"):
        cmd = command[1:]
        parts = cmd.split()
        if not parts:
            print("no command provided")
        else:
            try:
                subprocess.run(parts, check=False)
            except OSError as err:
                print(f"failed to execute command `{cmd}`: {err}")
    else:
        print(f"unknown command: {command}")


def spawn_watch_shell(hint_holder: dict, quit_event: threading.Event) -> threading.Thread:
    """Start a background thread reading commands from standard input."""
    print(
        "Welcome to watch mode! You can type 'help' to get an overview "
        "of the commands you can use here."
    )

    def loop() -> None:
        while True:
            try:
                line = sys.stdin.readline()
            except (OSError, ValueError) as err:
                print(f"error reading command: {err}")
                return
            if not line:
                return
            handle_shell_command(line, hint_holder, quit_event)

    thread = threading.Thread(target=loop, name="watch-shell", daemon=True)
    thread.start()
    return thread


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, events: queue.Queue) -> None:
        super().__init__()
        self._events = events

    def _record(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._events.put(Path(os.fsdecode(event.src_path)))

    def on_created(self, event: FileSystemEvent) -> None:
        self._record(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._record(event)


def _clear_screen() -> None:
    print("\x1bc")


def _ends_with(path: Path, suffix: Path) -> bool:
    tail = tuple(part for part in suffix.parts if part != ".")
    return bool(tail) and path.parts[-len(tail):] == tail


def _drain(events: queue.Queue, first: Path) -> list[Path]:
    paths = [first]
    while True:
        try:
            path = events.get_nowait()
        except queue.Empty:
            return paths
        if path not in paths:
            paths.append(path)


def watch(
    exercises: Iterable[Exercise], verbose: bool, success_hints: bool
) -> WatchStatus:
    """Verify exercises, then re-verify on every change until done or quit."""
    exercises = list(exercises)
    events: queue.Queue = queue.Queue()
    quit_event = threading.Event()
    observer = Observer()
    observer.schedule(_ChangeHandler(events), EXERCISES_DIR, recursive=True)
    observer.start()
    try:
        _clear_screen()
        failed = verify(exercises, (0, len(exercises)), verbose, success_hints)
        if failed is None:
            return WatchStatus.FINISHED
        hint_holder = {"hint": failed.hint}
        spawn_watch_shell(hint_holder, quit_event)
        while True:
            try:
                changed = events.get(timeout=1.0)
            except queue.Empty:
                changed = None
            if changed is not None:
                for path in _drain(events, changed):
                    if path.suffix != ".rs" or not path.exists():
                        continue
                    filepath = path.resolve()
                    current = [e for e in exercises if _ends_with(filepath, e.path)][:1]
                    pending = current + [
                        e
                        for e in exercises
                        if not e.looks_done() and not _ends_with(filepath, e.path)
                    ]
                    num_done = sum(1 for e in exercises if e.looks_done())
                    _clear_screen()
                    failed = verify(
                        pending, (num_done, len(exercises)), verbose, success_hints
                    )
                    if failed is None:
                        return WatchStatus.FINISHED
                    hint_holder["hint"] = failed.hint
            if quit_event.is_set():
                return WatchStatus.UNFINISHED
    finally:
        observer.stop()
        observer.join()