"""Shared test fixtures for all test modules."""

from collections.abc import Callable
from datetime import date
from pathlib import Path

import pytest


@pytest.fixture
def write_input(tmp_path: Path) -> Callable[..., str]:
    """Factory fixture writing lines to a temporary input file.

    Returns the file path as a string, ready to be handed to a reader.
    """

    def _write(*lines: str, name: str = "input.txt") -> str:
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def reference_day() -> date:
    """Date given to time-only timestamp formats."""
    return date(2021, 4, 15)
