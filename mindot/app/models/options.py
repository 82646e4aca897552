"""
models/options.py — Reporter options, as resolved from pyproject / env / flags.

Built only by schemas/options_schema.py after validation; nothing else
constructs these from raw input.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class GateFormula(str, enum.Enum):
    """How the coverage gate turns hits/soc into a percentage."""
    ROUND    = "round"      # half-up round(hits / soc * 100)
    TRUNCATE = "truncate"   # floor(hits / soc) * 100: only 100% or 0%


class UnknownCoverage(str, enum.Enum):
    """What the gate does when hits or soc is zero."""
    FAIL = "fail"   # counts as 0%
    PASS = "pass"   # never trips the gate


@dataclass(frozen=True)
class ReporterOptions:
    threshold:        float | None = None   # None → no gate
    gate_formula:     GateFormula = GateFormula.ROUND
    unknown_coverage: UnknownCoverage = UnknownCoverage.FAIL
    show_messages:    bool = True
    width:            int | None = None

    @property
    def gated(self) -> bool:
        return self.threshold is not None
