"""Workflow command helpers for the GitHub Actions runner.

The runner reads ``::command::`` lines from stdout and step outputs from the
file named by ``GITHUB_OUTPUT``.
"""

from __future__ import annotations

import os
import sys
import uuid
from pathlib import Path
from typing import TextIO


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _emit(command: str, message: str, stream: TextIO | None = None) -> None:
    print(f"::{command}::{_escape_data(message)}", file=stream or sys.stdout)


def set_secret(value: str | None, stream: TextIO | None = None) -> None:
    """Ask the runner to mask *value* in all later log output."""
    if value:
        _emit("add-mask", value, stream)


def set_failed(message: str, stream: TextIO | None = None) -> int:
    """Report an error annotation; the caller exits with the returned code."""
    _emit("error", message, stream)
    return 1


def set_output(name: str, value: str) -> bool:
    """Append a step output; returns False outside of a runner."""
    output_file = os.environ.get("GITHUB_OUTPUT")
    if not output_file:
        return False
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with Path(output_file).open("a", encoding="utf-8") as fh:
        fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
    return True


__all__ = ["set_failed", "set_output", "set_secret"]
