"""Coloured status messages for the terminal."""

from __future__ import annotations

import os

import click


def _no_emoji() -> bool:
    return "NO_EMOJI" in os.environ


def _emit(icon: str, fallback: str, message: str, colour: str) -> None:
    marker = fallback if _no_emoji() else icon
    click.echo(f"{click.style(marker, fg=colour)} {click.style(message, fg=colour)}")


def warn(message: str) -> None:
    """Print a warning in red."""
    _emit("⚠️ ", "!", message, "red")


def success(message: str) -> None:
    """Print a success message in green."""
    _emit("✅", "✓", message, "green")