"""
tests/conftest.py — Shared fixtures for unit and integration tests.

Two ways to observe output:
  - `display`: a RecordingDisplay that logs each capability call with the
    PLAIN text written. Use it for structure (order, counts, cursor math).
  - `captured`: a real ConsoleDisplay over a StringIO. Use it when the exact
    escape sequences matter.

Rich decides at Console construction time whether it may emit colour and
control codes, based on the environment. The autouse fixture pins that
environment so results do not depend on the shell running the tests.
"""

from __future__ import annotations

import io
import re

import pytest
from rich.text import Text

from mindot.app.display import ConsoleDisplay, make_console


ANSI = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")


def strip_ansi(value: str) -> str:
    return ANSI.sub("", value)


@pytest.fixture(autouse=True)
def _terminal_env(monkeypatch):
    monkeypatch.setenv("TERM", "xterm-256color")
    for name in ("NO_COLOR", "FORCE_COLOR", "TTY_COMPATIBLE", "COLUMNS", "LINES"):
        monkeypatch.delenv(name, raising=False)
    for name in ("MINDOT_THRESHOLD", "MINDOT_GATE_FORMULA", "MINDOT_UNKNOWN_COVERAGE",
                 "MINDOT_SHOW_MESSAGES", "MINDOT_WIDTH"):
        monkeypatch.delenv(name, raising=False)


class RecordingDisplay:
    """Display fake: records ("write", plain) / ("up", n) / ("hide",) / ("show",)."""

    def __init__(self, width: int = 80) -> None:
        self.width = width
        self.ops: list[tuple] = []
        self.texts: list[Text] = []

    def write(self, text) -> None:
        if isinstance(text, Text):
            self.texts.append(text)
            self.ops.append(("write", text.plain))
        else:
            self.texts.append(Text(text))
            self.ops.append(("write", text))

    def cursor_up(self, lines: int) -> None:
        self.ops.append(("up", lines))

    def hide_cursor(self) -> None:
        self.ops.append(("hide",))

    def show_cursor(self) -> None:
        self.ops.append(("show",))

    @property
    def written(self) -> str:
        return "".join(op[1] for op in self.ops if op[0] == "write")


class Captured:
    """A ConsoleDisplay whose output can be read back (and reset)."""

    def __init__(self, width: int = 80) -> None:
        self.buffer  = io.StringIO()
        self.console = make_console(file=self.buffer, width=width)
        self.display = ConsoleDisplay(self.console)

    @property
    def raw(self) -> str:
        return self.buffer.getvalue()

    @property
    def plain(self) -> str:
        return strip_ansi(self.raw)

    def reset(self) -> None:
        self.buffer.seek(0)
        self.buffer.truncate()


@pytest.fixture
def display():
    return RecordingDisplay()


@pytest.fixture
def captured():
    return Captured()


@pytest.fixture
def strip():
    return strip_ansi


@pytest.fixture
def make_display():
    """Factory for RecordingDisplay with a chosen width."""
    return RecordingDisplay


@pytest.fixture
def make_captured():
    """Factory for Captured with a chosen console width."""
    return Captured
