"""Generation of rust-project.json so rust-analyzer understands the exercises."""

from __future__ import annotations

import glob
import json
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Crate:
    """One crate entry of rust-project.json."""

    root_module: str
    edition: str = "2021"
    deps: list[str] = field(default_factory=list)
    # "test" lets rust-analyzer work inside #[test] blocks.
    cfg: list[str] = field(default_factory=lambda: ["test"])

    def to_dict(self) -> dict:
        return {
            "root_module": self.root_module,
            "edition": self.edition,
            "deps": list(self.deps),
            "cfg": list(self.cfg),
        }


@dataclass
class RustAnalyzerProject:
    """The contents of rust-project.json."""

    sysroot_src: str = ""
    crates: list[Crate] = field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps(
            {
                "sysroot_src": self.sysroot_src,
                "crates": [crate.to_dict() for crate in self.crates],
            },
            separators=(",", ":"),
            ensure_ascii=False,
        )

    def write_to_disk(self, path: str | os.PathLike = "./rust-project.json") -> None:
        """Write the project file."""
        Path(path).write_text(self.to_json(), encoding="utf-8")

    def exercises_to_json(self, root: str | os.PathLike = "./exercises") -> None:
        """Add a crate for every .rs file below root."""
        pattern = os.path.join(os.fspath(root), "**", "*")
        for path in sorted(glob.glob(pattern, recursive=True)):
            if Path(path).suffix == ".rs":
                self.crates.append(Crate(root_module=path))

    def get_sysroot_src(self) -> None:
        """Find the standard library sources of the default toolchain."""
        env_path = os.environ.get("RUST_SRC_PATH")
        if env_path is not None:
            self.sysroot_src = env_path
            return
        proc = subprocess.run(
            ["rustc", "--print", "sysroot"], capture_output=True, check=False
        )
        output = proc.stdout.decode("utf-8", errors="replace")
        parts = output.split()
        toolchain = parts[0] if parts else output
        print(f"Determined toolchain: {toolchain}\n")
        self.sysroot_src = str(
            Path(toolchain) / "lib" / "rustlib" / "src" / "rust" / "library"
        )