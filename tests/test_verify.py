import subprocess
from pathlib import Path

import pytest

from rustdrills.exercise import CompilationError, Exercise, ExerciseFailed, Mode
from rustdrills.verify import prompt_for_completion, separator, test, verify

PENDING = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"
FINISHED = "// fake_exercise\n\nfn main() {\n\n}\n"


class FakeToolchain:
    def __init__(self):
        self.compile_code = 0
        self.compile_stderr = b""
        self.run_code = 0
        self.run_stdout = b""
        self.run_stderr = b""
        self.calls = []

    def __call__(self, args, **kwargs):
        args = list(args)
        self.calls.append(args)
        if args[0] in ("rustc", "cargo"):
            return subprocess.CompletedProcess(args, self.compile_code, b"", self.compile_stderr)
        return subprocess.CompletedProcess(args, self.run_code, self.run_stdout, self.run_stderr)

    def count(self, program):
        return sum(1 for call in self.calls if call[0] == program)


@pytest.fixture
def toolchain(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NO_EMOJI", raising=False)
    fake = FakeToolchain()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


def make_exercise(name, mode, pending=False, hint=""):
    path = Path(f"{name}.rs")
    path.write_text(PENDING if pending else FINISHED, encoding="utf-8")
    return Exercise(name=name, path=path, mode=mode, hint=hint)


def test_verify_all_done_returns_none(toolchain):
    exercises = [make_exercise("one", Mode.COMPILE), make_exercise("two", Mode.COMPILE)]
    assert verify(exercises, (0, 2), False, False) is None
    assert toolchain.count("rustc") == 2


def test_verify_stops_at_compile_failure(toolchain, capsys):
    toolchain.compile_code = 1
    toolchain.compile_stderr = b"error[E0425]: cannot find value"
    first = make_exercise("first", Mode.COMPILE)
    second = make_exercise("second", Mode.COMPILE)
    assert verify([first, second], (0, 2), False, False) is first
    assert toolchain.count("rustc") == 1
    out = capsys.readouterr().out
    assert "Compiling of first.rs failed! Please try again." in out
    assert "error[E0425]" in out


def test_verify_pending_exercise_prints_context(toolchain, capsys):
    toolchain.run_stdout = b"hello from the binary"
    exercise = make_exercise("pending", Mode.COMPILE, pending=True)
    assert verify([exercise], (0, 1), False, False) is exercise
    out = capsys.readouterr().out
    assert "Successfully ran pending.rs!" in out
    assert "The code is compiling!" in out
    assert "Output:" in out
    assert "hello from the binary" in out
    assert "// I AM NOT DONE" in out
    assert "fn main() {" in out


def test_verify_test_failure_reports_output(toolchain, capsys):
    toolchain.run_code = 101
    toolchain.run_stdout = b"test not_passing ... FAILED"
    exercise = make_exercise("tests", Mode.TEST)
    assert verify([exercise], (0, 1), False, False) is exercise
    out = capsys.readouterr().out
    assert "Testing of tests.rs failed! Please try again." in out
    assert "FAILED" in out


@pytest.mark.parametrize("verbose", [True, False])
def test_verify_verbose_controls_test_output(toolchain, capsys, verbose):
    toolchain.run_stdout = b"THIS TEST TOO SHALL PASS"
    exercise = make_exercise("testSuccess", Mode.TEST)
    assert verify([exercise], (0, 1), verbose, False) is None
    assert ("THIS TEST TOO SHALL PASS" in capsys.readouterr().out) is verbose


def test_test_mode_passes_show_output(toolchain, capsys):
    toolchain.run_stdout = b"shown harness output"
    exercise = make_exercise("shown", Mode.TEST)
    test(exercise, True)
    assert "shown harness output" in capsys.readouterr().out
    binary_calls = [call for call in toolchain.calls if call[0] not in ("rustc", "cargo")]
    assert binary_calls[0][1] == "--show-output"
    assert "--test" in toolchain.calls[0]


def test_test_raises_compilation_error(toolchain):
    toolchain.compile_code = 1
    exercise = make_exercise("broken", Mode.TEST)
    with pytest.raises(CompilationError) as info:
        test(exercise, False)
    assert info.value.exercise is exercise


def test_test_raises_exercise_failed(toolchain):
    toolchain.run_code = 1
    exercise = make_exercise("failing", Mode.TEST)
    with pytest.raises(ExerciseFailed):
        test(exercise, True)


def test_test_does_not_prompt_for_pending(toolchain, capsys):
    exercise = make_exercise("pending_test_exercise", Mode.TEST, pending=True)
    test(exercise, False)
    assert "I AM NOT DONE" not in capsys.readouterr().out


def test_prompt_for_done_exercise_is_silent(toolchain, capsys):
    exercise = make_exercise("done", Mode.COMPILE)
    assert prompt_for_completion(exercise, "ignored", True) is True
    assert capsys.readouterr().out == ""


def test_prompt_shows_hints(toolchain, capsys):
    exercise = make_exercise("hinted", Mode.TEST, pending=True, hint="Hello!")
    assert prompt_for_completion(exercise, None, True) is False
    out = capsys.readouterr().out
    assert "Hints:" in out
    assert "Hello!" in out
    assert "Output:" not in out
    assert "Successfully tested hinted.rs!" in out


def test_prompt_without_emoji(toolchain, capsys, monkeypatch):
    monkeypatch.setenv("NO_EMOJI", "1")
    exercise = make_exercise("plain", Mode.TEST, pending=True)
    assert prompt_for_completion(exercise, None, False) is False
    assert "~*~ The code is compiling, and the tests pass! ~*~" in capsys.readouterr().out


def test_verify_clippy_writes_manifest(toolchain):
    Path("exercises/clippy").mkdir(parents=True)
    exercise = make_exercise("clippy1", Mode.CLIPPY)
    assert verify([exercise], (0, 1), False, False) is None
    manifest = Path("exercises/clippy/Cargo.toml").read_text(encoding="utf-8")
    assert 'name = "clippy1"' in manifest
    assert ["cargo", "clippy"] == toolchain.calls[-1][:2]


def test_separator_is_a_rule():
    assert "=" * 20 in separator()