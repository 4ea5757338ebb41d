import json
import os
import subprocess
from pathlib import Path

from rustdrills.project import Crate, RustAnalyzerProject


def test_crate_defaults():
    crate = Crate("exercises/a.rs")
    assert crate.to_dict() == {
        "root_module": "exercises/a.rs",
        "edition": "2021",
        "deps": [],
        "cfg": ["test"],
    }


def test_to_json_round_trip():
    project = RustAnalyzerProject(sysroot_src="/src", crates=[Crate("a.rs")])
    data = json.loads(project.to_json())
    assert data["sysroot_src"] == "/src"
    assert data["crates"] == [Crate("a.rs").to_dict()]
    assert list(data) == ["sysroot_src", "crates"]


def test_exercises_to_json_collects_rust_files(tmp_path):
    root = tmp_path / "exercises"
    (root / "nested").mkdir(parents=True)
    (root / "intro1.rs").write_text("")
    (root / "nested" / "deep.rs").write_text("")
    (root / "README.md").write_text("")
    project = RustAnalyzerProject()
    project.exercises_to_json(root)
    modules = sorted(Path(c.root_module).relative_to(root).as_posix() for c in project.crates)
    assert modules == ["intro1.rs", "nested/deep.rs"]


def test_exercises_to_json_empty_dir(tmp_path):
    project = RustAnalyzerProject()
    project.exercises_to_json(tmp_path)
    assert project.crates == []


def test_write_to_disk(tmp_path):
    target = tmp_path / "rust-project.json"
    project = RustAnalyzerProject(crates=[Crate("b.rs")])
    project.write_to_disk(target)
    assert target.read_text() == project.to_json()


def test_sysroot_from_environment(monkeypatch):
    monkeypatch.setenv("RUST_SRC_PATH", "/custom/src")
    project = RustAnalyzerProject()
    project.get_sysroot_src()
    assert project.sysroot_src == "/custom/src"


def test_sysroot_from_rustc(monkeypatch, capsys):
    monkeypatch.delenv("RUST_SRC_PATH", raising=False)
    calls = []

    def fake_run(args, **kwargs):
        calls.append(list(args))
        return subprocess.CompletedProcess(args, 0, stdout=b"/opt/toolchain\n", stderr=b"")

    monkeypatch.setattr(subprocess, "run", fake_run)
    project = RustAnalyzerProject()
    project.get_sysroot_src()
    assert calls == [["rustc", "--print", "sysroot"]]
    assert project.sysroot_src == os.path.join(
        "/opt/toolchain", "lib", "rustlib", "src", "rust", "library"
    )
    assert "Determined toolchain: /opt/toolchain" in capsys.readouterr().out