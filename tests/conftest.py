"""Shared fixtures for the Kenosis tests."""

import io
import os

import pytest
from rich.console import Console

from console_ui import ConsoleUI


def write_file(path, size: int = 0):
    """Create *path* (and its parents) holding *size* bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    return path


@pytest.fixture
def quiet_ui():
    """ConsoleUI writing to an in-memory buffer instead of the terminal."""
    console = Console(file=io.StringIO(), width=120, force_terminal=False, color_system=None)
    return ConsoleUI(console=console)


def ui_output(ui: ConsoleUI) -> str:
    return ui.console.file.getvalue()


skip_if_root = pytest.mark.skipif(
    hasattr(os, "geteuid") and os.geteuid() == 0, reason="permission bits are not enforced for root"
)
