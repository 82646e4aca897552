"""
services/coverage_service.py — Coverage snapshots and the coverage gate.

The coordinator never reaches into a coverage tool directly. It is handed
a provider: any zero-argument callable returning a CoverageSnapshot. Three
are defined here:

  NullCoverageProvider     always unknown ("no coverage")
  StaticCoverageProvider   a fabricated per-file hit map, for tests and replay
  CoverageDataProvider     a coverage.py data file, as written by pytest-cov

Snapshot reduction (reduce_snapshot):
  Input is {file: per-statement counts}. Counts may be a mapping
  {statement_id: count} or a plain sequence; an istanbul-style entry
  {"s": {...}} is unwrapped. Every entry that is not None counts toward
  soc; every non-zero entry is a hit.

Gate (evaluate_gate):
  No threshold → no gate. Otherwise the percentage is computed with the
  configured formula and compared against the threshold. Unknown coverage
  either counts as 0% or passes, depending on options.unknown_coverage.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Protocol

import coverage
from coverage.exceptions import CoverageException

from mindot.app.models.coverage import CoverageSnapshot, GateResult
from mindot.app.models.options import GateFormula, ReporterOptions, UnknownCoverage


logger = logging.getLogger(__name__)


class CoverageProvider(Protocol):
    def __call__(self) -> CoverageSnapshot: ...


# ── Reduction ──────────────────────────────────────────────────────────────

def _statement_counts(entry):
    if isinstance(entry, Mapping):
        inner = entry.get("s")
        if isinstance(inner, Mapping):
            return inner.values()
        return entry.values()
    return entry


def reduce_snapshot(snapshot: Mapping | None) -> CoverageSnapshot:
    """Reduces a per-file hit map to {hits, soc}."""
    hits = soc = 0
    for entry in (snapshot or {}).values():
        for count in _statement_counts(entry):
            if count is None:
                continue
            soc += 1
            if count:
                hits += 1
    return CoverageSnapshot(hits=hits, soc=soc)


# ── Providers ──────────────────────────────────────────────────────────────

class NullCoverageProvider:
    def __call__(self) -> CoverageSnapshot:
        return CoverageSnapshot()


class StaticCoverageProvider:
    """Reduces a fixed snapshot mapping on every call."""

    def __init__(self, snapshot: Mapping) -> None:
        self.snapshot = snapshot

    def __call__(self) -> CoverageSnapshot:
        return reduce_snapshot(self.snapshot)


class CoverageDataProvider:
    """
    Reads a coverage.py data file and reduces it.

    Each measured file contributes its executable statements: 1 for an
    executed statement, 0 for a missing one. coverage.py does not keep
    per-line hit counts, so "executed" is the best signal available.

    data_file=None uses whatever coverage.py is configured with
    (.coveragerc / [tool.coverage.run] data_file, else ".coverage").
    """

    def __init__(self, data_file: str | os.PathLike | None = None) -> None:
        self.data_file = data_file

    def hit_map(self) -> dict[str, dict[int, int]]:
        kwargs = {}
        if self.data_file is not None:
            kwargs["data_file"] = os.fspath(self.data_file)
            if not os.path.exists(kwargs["data_file"]):
                logger.warning("coverage data file %s does not exist", kwargs["data_file"])
                return {}

        cov = coverage.Coverage(**kwargs)
        try:
            cov.load()
        except CoverageException as exc:
            logger.warning("could not load coverage data: %s", exc)
            return {}

        result: dict[str, dict[int, int]] = {}
        for filename in sorted(cov.get_data().measured_files()):
            try:
                _, statements, _, missing, _ = cov.analysis2(filename)
            except CoverageException as exc:
                logger.warning("skipping %s: %s", filename, exc)
                continue
            missed = set(missing)
            result[filename] = {line: 0 if line in missed else 1 for line in statements}
        return result

    def __call__(self) -> CoverageSnapshot:
        return reduce_snapshot(self.hit_map())


# ── Gate ───────────────────────────────────────────────────────────────────

def gate_percent(snapshot: CoverageSnapshot, formula: GateFormula) -> int:
    """
    ROUND:    half-up round(hits / soc * 100)
    TRUNCATE: floor(hits / soc) * 100, so anything short of full coverage is 0
    Unknown coverage is 0 under both.
    """
    if not snapshot.known:
        return 0
    if formula is GateFormula.TRUNCATE:
        return (snapshot.hits // snapshot.soc) * 100
    return snapshot.percent()


def evaluate_gate(snapshot: CoverageSnapshot, options: ReporterOptions) -> GateResult | None:
    if not options.gated:
        return None

    threshold = options.threshold
    percent   = gate_percent(snapshot, options.gate_formula)

    if not snapshot.known and options.unknown_coverage is UnknownCoverage.PASS:
        passed = True
    else:
        passed = percent >= threshold

    logger.debug(
        "coverage gate: %d%% vs threshold %s (%s, unknown=%s) → %s",
        percent, threshold, options.gate_formula.value,
        not snapshot.known, "pass" if passed else "FAIL",
    )
    return GateResult(
        percent=percent,
        threshold=threshold,
        passed=passed,
        unknown=not snapshot.known,
    )
