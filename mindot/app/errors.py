"""
errors.py — ReporterError base class and error code registry.

Every error raised by mindot itself must use a code defined here.
Do not raise strings or generic exceptions from service or schema code.

Rules:
  - Error codes are a stable contract for the CLI and the pytest plugin.
    They do not change once published.
  - Error messages are human-readable prose. They may be improved at any time.
  - Protocol violations by the event source (a fail with no open suite, a
    suite end with nothing open) are NOT reported through this module. The
    coordinator trusts the event order and lets the IndexError surface.
"""

from __future__ import annotations


class ReporterError(Exception):

    def __init__(
            self,
            code: str,
            message: str,
            field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code    = code
        self.message = message
        self.field   = field  # which option / event field caused the error

    def __repr__(self) -> str:
        return (
            f"ReporterError(code={self.code!r}, "
            f"message={self.message!r})"
        )


# ── Error Code Registry ────────────────────────────────────────────────────

class ErrorCode:

    # ── Configuration ──────────────────────────────────────────────────────
    INVALID_OPTION = "INVALID_OPTION"

    # ── Dot matrix ─────────────────────────────────────────────────────────
    INVALID_GRID   = "INVALID_GRID"
    GRID_OVERFLOW  = "GRID_OVERFLOW"   # more outcomes than collected tests

    # ── Event replay ───────────────────────────────────────────────────────
    INVALID_EVENT  = "INVALID_EVENT"


# ── Exit statuses ──────────────────────────────────────────────────────────
#
# The coverage gate is the only thing that produces a failing status.
# Success is never signalled explicitly; callers fall through to 0.
# ──────────────────────────────────────────────────────────────────────────

class ExitStatus:
    OK           = 0
    GATE_FAILED  = 1
    USAGE_ERROR  = 2
