"""
display.py — The terminal surface every other module writes through.

Wraps a single rich Console. Nothing in mindot writes to stdout directly:
the dot matrix, the failure tree and the summary all go through a
ConsoleDisplay so tests can point the console at a StringIO and assert on
the exact escape sequences.

Pattern:
    1. Build the console with make_console() (optionally over a file).
    2. Wrap it in ConsoleDisplay.
    3. Hand the display to the coordinator factory in app/__init__.py.

The five semantic styles map onto fixed 8/16-colour SGR codes:

    pending      37  white
    pass         96  bright_cyan
    fail         31  red
    fail-header  90  bright_black
    error        91  bright_red

color_system="standard" pins rich to exactly those codes, whatever the
real terminal supports.
"""

from __future__ import annotations

from typing import IO, Protocol

from rich.console import Console
from rich.control import Control
from rich.text import Text
from rich.theme import Theme


THEME = Theme({
    "pending":     "white",
    "pass":        "bright_cyan",
    "fail":        "red",
    "fail-header": "bright_black",
    "error":       "bright_red",
    "count":       "bold",
})


def make_console(file: IO[str] | None = None, width: int | None = None) -> Console:
    """
    Builds the console used for all reporter output.

    force_terminal is always on: the renderer relies on cursor movement, so
    writing plain text to a pipe would only produce garbage anyway.
    """
    return Console(
        file=file,
        width=width,
        theme=THEME,
        force_terminal=True,
        color_system="standard",
        highlight=False,
        markup=False,
        emoji=False,
    )


class Display(Protocol):
    """What the renderer and the coordinator need from a terminal."""

    @property
    def width(self) -> int: ...

    def write(self, text: Text | str) -> None: ...

    def cursor_up(self, lines: int) -> None: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...


class ConsoleDisplay:
    """Display backed by a rich Console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console if console is not None else make_console()

    @property
    def width(self) -> int:
        return self.console.width

    def write(self, text: Text | str) -> None:
        # soft_wrap: the grid does its own wrapping; rich must not add breaks.
        self.console.print(text, end="", soft_wrap=True)

    def cursor_up(self, lines: int) -> None:
        # Equivalent of CSI n F: up n lines, then back to column 1.
        if lines > 0:
            self.console.control(Control.move(0, -lines), Control.move_to_column(0))
        else:
            self.console.control(Control.move_to_column(0))

    def hide_cursor(self) -> None:
        self.console.control(Control.show_cursor(False))

    def show_cursor(self) -> None:
        self.console.control(Control.show_cursor(True))
