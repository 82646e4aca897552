"""
services/dot_matrix.py — The in-place dot grid.

One cell per collected test, wrapped at a fixed grid width:

    pending  .  white
    pass     .  bright cyan
    fail     .  red

Repaint strategy:
  - Never diff. Every outcome repaints the WHOLE grid region.
  - Every repaint starts by moving the cursor up exactly rows + 1 lines
    and ends with two line breaks (the last grid row, then the spacer
    line the summary will later overwrite). Because the amount written
    never depends on how many cells are filled, the cursor always lands
    on the same row and the region never drifts or grows.
  - The column counter runs across the whole grid, so the wrap point is
    continuous between filled and pending cells.

This only works if nothing else writes to the terminal between
initialize() and close(). The pytest plugin removes the standard terminal
reporter for that reason.
"""

from __future__ import annotations

import logging
import math
from itertools import groupby

from rich.text import Text

from mindot.app.display import Display
from mindot.app.errors import ErrorCode, ReporterError
from mindot.app.models.coverage import CoverageSnapshot


logger = logging.getLogger(__name__)

GLYPH = "."


class DotMatrix:

    def __init__(self, display: Display, total_slots: int, grid_width: int) -> None:
        if total_slots < 0:
            raise ReporterError(
                ErrorCode.INVALID_GRID,
                f"total_slots must be >= 0, got {total_slots}.",
                field="total_slots",
            )
        if grid_width < 1:
            raise ReporterError(
                ErrorCode.INVALID_GRID,
                f"grid_width must be >= 1, got {grid_width}.",
                field="grid_width",
            )
        self.display     = display
        self.total_slots = total_slots
        self.grid_width  = grid_width
        self.outcomes: list[bool] = []   # True = pass, append-only

    # ── Derived state ──────────────────────────────────────────────────────

    @property
    def rows(self) -> int:
        return math.ceil(self.total_slots / self.grid_width)

    @property
    def passes(self) -> int:
        return sum(1 for ok in self.outcomes if ok)

    @property
    def failures(self) -> int:
        return sum(1 for ok in self.outcomes if not ok)

    # ── Lifecycle ──────────────────────────────────────────────────────────

    def initialize(self) -> None:
        """Reserves rows + 1 lines, hides the cursor and paints the empty grid."""
        logger.debug(
            "dot matrix: %d slots, width %d, %d rows",
            self.total_slots, self.grid_width, self.rows,
        )
        self.display.hide_cursor()
        self.display.write("\n" * (self.rows + 1))
        self.repaint()

    def record_pass(self) -> None:
        self._record(True)

    def record_fail(self) -> None:
        self._record(False)

    def close(self, coverage: CoverageSnapshot) -> None:
        """Writes the summary on the spacer line below the grid and shows the cursor."""
        self.display.cursor_up(1)
        self.display.write(self.summary(coverage) + "\n")
        self.display.show_cursor()

    # ── Rendering ──────────────────────────────────────────────────────────

    def frame(self) -> Text:
        """The grid body for the current outcomes. Pure: writes nothing."""
        styles = ["pass" if ok else "fail" for ok in self.outcomes]
        styles += ["pending"] * (self.total_slots - len(self.outcomes))

        out = Text()
        for start in range(0, self.total_slots, self.grid_width):
            if start:
                out.append("\n")
            row = styles[start:start + self.grid_width]
            for style, run in groupby(row):
                out.append(GLYPH * len(list(run)), style=style)
        out.append("\n\n")
        return out

    def repaint(self) -> None:
        self.display.cursor_up(self.rows + 1)
        self.display.write(self.frame())

    def summary(self, coverage: CoverageSnapshot) -> Text:
        return Text.assemble(
            (str(self.passes), "count"),
            (" passed", "pending"),
            "  ",
            (str(self.failures), "count"),
            (" failed", "pending"),
            "  ",
            (coverage.text(), "pending"),
        )

    # ── Private ────────────────────────────────────────────────────────────

    def _record(self, ok: bool) -> None:
        if len(self.outcomes) >= self.total_slots:
            raise ReporterError(
                ErrorCode.GRID_OVERFLOW,
                f"Outcome {len(self.outcomes) + 1} recorded for a grid of "
                f"{self.total_slots} tests.",
            )
        self.outcomes.append(ok)
        self.repaint()
