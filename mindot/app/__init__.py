"""
app/__init__.py — Coordinator factory.

Pattern: create_coordinator(...) builds and returns a wired RunCoordinator.
         Nothing is written to the terminal at import time — this enables:
           - Multiple isolated coordinators in one test session
           - Pointing the output at a StringIO console in tests
           - Reusing the same wiring from the pytest plugin and the CLI

Responsibilities:
  1. Build the display (rich Console) unless one is given
  2. Pick the coverage provider: explicit > static snapshot > coverage.py
     file > none. A data file is only read when one is named, so a stale
     .coverage left in the working directory never reaches the summary line
  3. Pick the options loader: explicit options > resolve_options() at `end`
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping

from rich.console import Console

from mindot.app.display import ConsoleDisplay
from mindot.app.models.options import ReporterOptions
from mindot.app.services.coordinator import RunCoordinator
from mindot.app.services.coverage_service import (
    CoverageDataProvider,
    CoverageProvider,
    NullCoverageProvider,
    StaticCoverageProvider,
)


def create_coordinator(
        console: Console | None = None,
        *,
        coverage_provider: CoverageProvider | None = None,
        coverage_snapshot: Mapping | None = None,
        coverage_file: str | os.PathLike | None = None,
        options: ReporterOptions | None = None,
        options_loader: Callable[[], ReporterOptions] | None = None,
        grid_width: int | None = None,
) -> RunCoordinator:
    """
    Creates a RunCoordinator writing to `console`.

    Args:
        coverage_snapshot: A fabricated {file: counts} map; wins over
                           coverage_file when no provider is given.
        coverage_file:     coverage.py data file. None with no provider and
                           no snapshot means coverage is not measured
                           ("no coverage").
        options:           Fixed options. When omitted, options are resolved
                           from pyproject / env when the run ends.
        grid_width:        Fixed grid width; defaults to options.width, then
                           to the width carried by the start event, then to
                           the console width.
    """
    if coverage_provider is None:
        if coverage_snapshot is not None:
            coverage_provider = StaticCoverageProvider(coverage_snapshot)
        elif coverage_file is not None:
            coverage_provider = CoverageDataProvider(coverage_file)
        else:
            coverage_provider = NullCoverageProvider()

    if options_loader is None:
        if options is not None:
            options_loader = lambda: options  # noqa: E731
        else:
            from mindot.config import resolve_options
            options_loader = resolve_options

    if grid_width is None and options is not None:
        grid_width = options.width

    return RunCoordinator(
        ConsoleDisplay(console),
        coverage_provider=coverage_provider,
        options_loader=options_loader,
        grid_width=grid_width,
    )
