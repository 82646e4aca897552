"""
models/coverage.py — CoverageSnapshot and GateResult value objects.

A snapshot is the reduced form of whatever the coverage tool produced:
a count of executed statements (hits) and a count of instrumentable
statements (soc). Either being zero means coverage is UNKNOWN, which is
rendered as "no coverage" and is never confused with a measured 0%.

Percentages on the summary line use half-up rounding (Decimal
ROUND_HALF_UP), so 12.5% reads as 13%, not as Python's banker's 12%.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal


@dataclass(frozen=True)
class CoverageSnapshot:
    hits: int = 0
    soc:  int = 0   # statements of code

    @property
    def known(self) -> bool:
        return self.hits != 0 and self.soc != 0

    def percent(self) -> int:
        """hits/soc × 100, rounded half-up. 0 when coverage is unknown."""
        if not self.known:
            return 0
        ratio = Decimal(self.hits) / Decimal(self.soc)
        return int((ratio * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def text(self) -> str:
        if not self.known:
            return "no coverage"
        return f"{self.percent()}% coverage"


@dataclass(frozen=True)
class GateResult:
    percent:   int
    threshold: float
    passed:    bool
    unknown:   bool = False   # snapshot had hits == 0 or soc == 0
