[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rustdrills"
version = "5.5.1"
description = "Small Rust exercises that are compiled, run and checked from the command line, with a watch mode"
requires-python = ">=3.11"
keywords = ["rust", "exercises", "learning", "education", "rustc", "clippy"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education :: Computer Aided Instruction (CAI)",
]
dependencies = [
    "click>=8.1",
    "watchdog>=3.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
]

[project.scripts]
rustdrills = "rustdrills.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["rustdrills"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
