"""Compile, run and check small Rust exercises from the command line."""

__version__ = "5.5.1"