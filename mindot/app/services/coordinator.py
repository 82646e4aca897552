"""
services/coordinator.py — Runner lifecycle → dot matrix + failure tree.

State machine:

    event        precondition              action
    ──────────   ───────────────────────   ─────────────────────────────────────
    start        none                      build + initialize the DotMatrix
    suite        any                       push SuiteNode(title) on the stack
    suite end    stack non-empty           pop; attach to new top, or make root
    pass         started                   matrix.record_pass()
    fail         started, suite open       matrix.record_fail(); record failure
                                           on the innermost open suite
    end          stack empty               load options, read coverage, close
                                           the matrix, print the failure tree,
                                           evaluate the coverage gate

Only `end` returns an exit status; every other event is fire-and-forget.
Events arriving out of order are a caller bug. They are not guarded: a
fail with no open suite raises IndexError from the stack lookup.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from mindot.app.display import Display
from mindot.app.errors import ExitStatus
from mindot.app.models.coverage import GateResult
from mindot.app.models.event import End, Event, Fail, Pass, Start, SuiteClose, SuiteOpen
from mindot.app.models.options import ReporterOptions
from mindot.app.models.suite import FailureRecord, SuiteNode
from mindot.app.services.coverage_service import (
    CoverageProvider,
    NullCoverageProvider,
    evaluate_gate,
)
from mindot.app.services.dot_matrix import DotMatrix


logger = logging.getLogger(__name__)


class RunCoordinator:

    def __init__(
            self,
            display: Display,
            coverage_provider: CoverageProvider | None = None,
            options_loader: Callable[[], ReporterOptions] | None = None,
            grid_width: int | None = None,
    ) -> None:
        self.display           = display
        self.coverage_provider = coverage_provider or NullCoverageProvider()
        self.options_loader    = options_loader or ReporterOptions
        self.grid_width        = grid_width   # overrides Start.width and the display

        self.matrix: DotMatrix | None = None
        self.roots:  list[SuiteNode]  = []
        self.gate:   GateResult | None = None
        self._stack: list[SuiteNode]  = []

        self._handlers: dict[type, Callable[[Event], int | None]] = {
            Start:      self._on_start,
            SuiteOpen:  self._on_suite,
            SuiteClose: self._on_suite_end,
            Pass:       self._on_pass,
            Fail:       self._on_fail,
            End:        self._on_end,
        }

    @property
    def current_suite(self) -> SuiteNode | None:
        return self._stack[-1] if self._stack else None

    @property
    def depth(self) -> int:
        return len(self._stack)

    def handle(self, event: Event) -> int | None:
        return self._handlers[type(event)](event)

    def run(self, events: Iterable[Event]) -> int:
        """Feeds a whole event sequence; returns the status from `end` (0 without one)."""
        status = ExitStatus.OK
        for event in events:
            result = self.handle(event)
            if result is not None:
                status = result
        return status

    # ── Handlers ───────────────────────────────────────────────────────────

    def _on_start(self, event: Start) -> None:
        width = self.grid_width or event.width or self.display.width
        self.matrix = DotMatrix(self.display, event.total, width)
        self.matrix.initialize()

    def _on_suite(self, event: SuiteOpen) -> None:
        self._stack.append(SuiteNode(event.title))
        logger.debug("suite open %r (depth %d)", event.title, self.depth)

    def _on_suite_end(self, event: SuiteClose) -> None:
        node = self._stack.pop()
        if self._stack:
            self._stack[-1].add_child(node)
        else:
            self.roots.append(node)
        logger.debug("suite end %r (depth %d)", node.title, self.depth)

    def _on_pass(self, event: Pass) -> None:
        self.matrix.record_pass()

    def _on_fail(self, event: Fail) -> None:
        self.matrix.record_fail()
        self._stack[-1].add_failure(FailureRecord(event.title, event.message))

    def _on_end(self, event: End) -> int:
        if self._stack:
            logger.warning("run ended with %d suite(s) still open", self.depth)

        options  = self.options_loader()
        snapshot = self.coverage_provider()

        self.matrix.close(snapshot)
        for root in self.roots:
            self.display.write(root.render(show_messages=options.show_messages))
        self.display.write("\n")
        self.display.show_cursor()

        self.gate = evaluate_gate(snapshot, options)
        if self.gate is not None and not self.gate.passed:
            return ExitStatus.GATE_FAILED
        return ExitStatus.OK
