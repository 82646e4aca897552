"""
tests/integration/test_end_to_end.py — Full runs through create_coordinator().

What this file proves:
  - A scripted run renders the grid, the summary line and the failure report
    onto a real rich Console
  - Nested suites indent by exactly one level per suite
  - The coverage gate decides the exit status from a fabricated snapshot
  - The factory reads coverage only from a snapshot or a named data file
  - Repainting without new outcomes is byte-identical

Output is read from a StringIO-backed console (`captured`), escapes
stripped where only the text matters.
"""

from __future__ import annotations

import pytest

from mindot.app import create_coordinator
from mindot.app.errors import ExitStatus
from mindot.app.models.event import End, Fail, Pass, Start, SuiteClose, SuiteOpen
from mindot.app.models.options import ReporterOptions
from mindot.app.services.coverage_service import (
    CoverageDataProvider,
    NullCoverageProvider,
    StaticCoverageProvider,
)


NINETY_PERCENT = {"lib/calc.py": [1] * 45 + [0] * 5}


def _coordinator(captured, options=None, snapshot=None):
    return create_coordinator(
        captured.console,
        coverage_snapshot=snapshot if snapshot is not None else {},
        options=options or ReporterOptions(),
    )


# ═══════════════════════════════════════════════════════════════════════════
# Report
# ═══════════════════════════════════════════════════════════════════════════

class TestReport:

    def test_pass_pass_fail(self, captured):
        coord = _coordinator(captured)
        status = coord.run([
            Start(total=3, width=80),
            SuiteOpen("math"),
            Pass("t1"),
            Pass("t2"),
            Fail("t3", "boom"),
            SuiteClose(),
            End(),
        ])

        assert status == ExitStatus.OK
        assert "2 passed  1 failed  no coverage\n" in captured.plain
        assert captured.plain.endswith("math\n    t3\n        boom\n\n")

    def test_nested_suites_indent_by_depth(self, captured):
        coord = _coordinator(captured)
        coord.run([
            Start(total=1),
            SuiteOpen("A"),
            SuiteOpen("B"),
            Fail("x", "m"),
            SuiteClose(),
            SuiteClose(),
            End(),
        ])

        report = captured.plain.split("no coverage\n", 1)[1]
        assert report == "A\n    B\n        x\n            m\n\n"

    def test_clean_suites_are_pruned(self, captured):
        coord = _coordinator(captured)
        coord.run([
            Start(total=2),
            SuiteOpen("clean"),
            Pass("ok"),
            SuiteClose(),
            SuiteOpen("dirty"),
            Fail("bad", "why"),
            SuiteClose(),
            End(),
        ])

        report = captured.plain.split("no coverage\n", 1)[1]
        assert "clean" not in report
        assert report.startswith("dirty\n")

    def test_grid_wraps_at_configured_width(self, make_captured):
        captured = make_captured(width=80)
        coord = create_coordinator(
            captured.console,
            coverage_snapshot={},
            options=ReporterOptions(width=4),
        )
        coord.run([Start(total=6, width=80)])

        assert coord.matrix.grid_width == 4
        assert captured.plain.endswith("....\n..\n\n")

    def test_cursor_is_restored(self, captured):
        coord = _coordinator(captured)
        coord.run([Start(total=0), End()])
        assert captured.raw.startswith("\x1b[?25l")
        assert captured.raw.endswith("\x1b[?25h")


# ═══════════════════════════════════════════════════════════════════════════
# Coverage gate
# ═══════════════════════════════════════════════════════════════════════════

class TestGate:

    @pytest.mark.parametrize("threshold,status", [
        (95, ExitStatus.GATE_FAILED),
        (80, ExitStatus.OK),
    ])
    def test_threshold(self, captured, threshold, status):
        coord = _coordinator(
            captured,
            options=ReporterOptions(threshold=threshold),
            snapshot=NINETY_PERCENT,
        )
        result = coord.run([Start(total=1), SuiteOpen("s"), Pass("p"), SuiteClose(), End()])

        assert result == status
        assert "1 passed  0 failed  90% coverage" in captured.plain

    def test_gate_ignores_test_failures(self, captured):
        coord = _coordinator(
            captured,
            options=ReporterOptions(threshold=80),
            snapshot=NINETY_PERCENT,
        )
        result = coord.run([Start(total=1), SuiteOpen("s"), Fail("f", ""), SuiteClose(), End()])
        assert result == ExitStatus.OK


# ═══════════════════════════════════════════════════════════════════════════
# Factory
# ═══════════════════════════════════════════════════════════════════════════

class TestFactoryCoverageProvider:

    def test_nothing_named_means_no_coverage(self, captured, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".coverage").write_bytes(b"")

        coord = create_coordinator(captured.console, options=ReporterOptions())

        assert isinstance(coord.coverage_provider, NullCoverageProvider)

    def test_named_file_is_read(self, captured, tmp_path):
        coord = create_coordinator(captured.console, coverage_file=tmp_path / "run.coverage")
        assert isinstance(coord.coverage_provider, CoverageDataProvider)
        assert coord.coverage_provider.data_file == tmp_path / "run.coverage"

    def test_snapshot_wins_over_file(self, captured, tmp_path):
        coord = create_coordinator(
            captured.console,
            coverage_snapshot=NINETY_PERCENT,
            coverage_file=tmp_path / "run.coverage",
        )
        assert isinstance(coord.coverage_provider, StaticCoverageProvider)


# ═══════════════════════════════════════════════════════════════════════════
# Repaint
# ═══════════════════════════════════════════════════════════════════════════

def test_repaint_is_idempotent(make_captured):
    captured = make_captured(width=80)
    coord = _coordinator(captured)
    coord.run([Start(total=5, width=2), SuiteOpen("s"), Pass("a"), Fail("b", "")])

    captured.reset()
    coord.matrix.repaint()
    first = captured.raw

    captured.reset()
    coord.matrix.repaint()

    assert captured.raw == first
    assert first.startswith("\x1b[4A\x1b[1G")
