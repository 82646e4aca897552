"""
plugin.py — pytest plugin: pytest hooks → lifecycle events → coordinator.

Enabled with --mindot. Registered through the pytest11 entry point, so
installing the package is enough.

pytest has no suite events, so they are derived from each test's collector
chain (everything between the session and the test item: packages,
directories, modules, classes). Before every test the chain is diffed
against the suites currently open, closing the ones left behind and
opening the new ones. Tests that run out of file order simply reopen a
suite; each opening is its own node in the failure tree.

One outcome per collected test:
  - any phase failed (setup / call / teardown)  → Fail
  - call passed                                  → Pass
  - skipped / xfailed                            → nothing; the cell stays pending

An item that reports again after its cell is filled (rerun plugins) keeps
its first outcome, so the grid never receives more outcomes than there
are collected tests.

The standard terminal reporter is unregistered while mindot is active:
the dot grid repaints a fixed terminal region in place and any other
writer would corrupt it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pytest

from mindot.app import create_coordinator
from mindot.app.display import make_console
from mindot.app.errors import ExitStatus, ReporterError
from mindot.app.models.event import End, Fail, Pass, Start, SuiteClose, SuiteOpen
from mindot.app.models.suite import FailureRecord, SuiteNode
from mindot.app.services.coverage_service import (
    CoverageDataProvider,
    CoverageProvider,
    NullCoverageProvider,
)


logger = logging.getLogger(__name__)

PLUGIN_NAME = "mindot-reporter"

_MESSAGE_KEYS = ("AssertionError", "Error:", "assert ", "FAILED")


def condense_longrepr(longrepr) -> str:
    """One line out of a pytest failure repr: the last line that looks like the error."""
    if not longrepr:
        return ""
    raw   = str(longrepr)
    lines = [l.strip() for l in raw.splitlines() if l.strip()]
    for ln in reversed(lines):
        if any(k in ln for k in _MESSAGE_KEYS):
            return ln[:160]
    return lines[-1][:160] if lines else ""


# ── Options ────────────────────────────────────────────────────────────────

def pytest_addoption(parser):
    group = parser.getgroup("mindot", "minimal dot-matrix reporter")
    group.addoption(
        "--mindot", action="store_true", default=False,
        help="Replace the terminal reporter with the mindot dot grid.",
    )
    group.addoption(
        "--mindot-threshold", metavar="PERCENT", default=None,
        help="Fail the run when coverage is below PERCENT (overrides [tool.mindot]).",
    )
    group.addoption(
        "--mindot-width", metavar="COLUMNS", default=None,
        help="Grid width in columns (default: terminal width).",
    )
    group.addoption(
        "--mindot-coverage-file", metavar="PATH", default=None,
        help="coverage.py data file to read at the end (default: the data pytest-cov "
             "writes in this session; without --cov, coverage is not measured).",
    )


@pytest.hookimpl(trylast=True)
def pytest_configure(config):
    if not config.getoption("mindot"):
        return
    if hasattr(config, "workerinput"):   # xdist worker: the controller reports
        return

    from mindot.config import resolve_options

    overrides = {
        "threshold": config.getoption("mindot_threshold"),
        "width":     config.getoption("mindot_width"),
    }
    try:
        options = resolve_options(overrides, root=config.rootpath)
    except ReporterError as err:
        raise pytest.UsageError(err.message) from err

    writer = config.get_terminal_writer()
    standard = config.pluginmanager.getplugin("terminalreporter")
    if standard is not None:
        config.pluginmanager.unregister(standard)

    console = make_console(file=writer, width=writer.fullwidth)
    coordinator = create_coordinator(
        console,
        coverage_provider=_coverage_provider(config),
        options=options,
    )
    config.pluginmanager.register(MindotReporter(coordinator), PLUGIN_NAME)


def _cov_active(config) -> bool:
    """True when pytest-cov measures this session (it saves its data before sessionfinish)."""
    if getattr(config.option, "no_cov", False):
        return False
    return config.pluginmanager.hasplugin("_cov") and bool(getattr(config.option, "cov_source", None))


def _coverage_provider(config) -> CoverageProvider:
    """
    Explicit --mindot-coverage-file, else pytest-cov's data for this run,
    else nothing. A .coverage file merely present in the working directory
    belongs to some earlier run and is never read.
    """
    data_file = config.getoption("mindot_coverage_file")
    if data_file is not None:
        return CoverageDataProvider(data_file)
    if _cov_active(config):
        return CoverageDataProvider()
    return NullCoverageProvider()


def pytest_unconfigure(config):
    reporter = config.pluginmanager.get_plugin(PLUGIN_NAME)
    if reporter is not None:
        config.pluginmanager.unregister(reporter)


# ── Reporter ───────────────────────────────────────────────────────────────

@dataclass
class _TestState:
    title:   str
    passed:  bool = False
    failed:  bool = False
    message: str  = ""


class MindotReporter:
    """Translates pytest's hooks into coordinator events."""

    def __init__(self, coordinator) -> None:
        self.coordinator = coordinator
        self.status: int | None = None
        self._items:  dict[str, pytest.Item] = {}
        self._open:   list[str] = []          # nodeids of the open suites
        self._states: dict[str, _TestState] = {}
        self._collect_errors: list[FailureRecord] = []
        self._finished: set[str] = set()      # nodeids whose cell is already filled
        self._started = False

    def _emit(self, event):
        return self.coordinator.handle(event)

    # collection finished → we now know the total
    def pytest_collection_finish(self, session):
        self._items = {item.nodeid: item for item in session.items}
        self._start(len(session.items))

    def pytest_collectreport(self, report):
        if report.failed:
            self._collect_errors.append(
                FailureRecord(report.nodeid or "<session>", condense_longrepr(report.longrepr))
            )

    def pytest_runtest_logstart(self, nodeid, location):
        item = self._items.get(nodeid)
        if item is None:
            return
        self._sync_suites(item.listchain()[1:-1])
        self._states[nodeid] = _TestState(title=item.name)

    def pytest_runtest_logreport(self, report):
        state = self._states.get(report.nodeid)
        if state is None:
            return
        if report.failed:
            if not state.failed:
                state.message = condense_longrepr(report.longrepr)
            state.failed = True
        elif report.when == "call" and report.passed:
            state.passed = True

    def pytest_runtest_logfinish(self, nodeid, location):
        state = self._states.pop(nodeid, None)
        if state is None:
            return
        if nodeid in self._finished:
            # rerun plugins run an item again; its cell keeps the first outcome
            logger.debug("ignoring repeated outcome for %s", nodeid)
            return
        if state.failed or state.passed:
            self._finished.add(nodeid)
        if state.failed:
            self._emit(Fail(title=state.title, message=state.message))
        elif state.passed:
            self._emit(Pass(title=state.title))

    @pytest.hookimpl(trylast=True)
    def pytest_sessionfinish(self, session, exitstatus):
        self._start(0)
        while self._open:
            self._open.pop()
            self._emit(SuiteClose())
        self.status = self._emit(End())

        if self._collect_errors:
            errors = SuiteNode("collection errors", failures=self._collect_errors)
            self.coordinator.display.write(errors.render())

        if self.status == ExitStatus.GATE_FAILED and session.exitstatus == pytest.ExitCode.OK:
            session.exitstatus = pytest.ExitCode.TESTS_FAILED

    # ── Private ────────────────────────────────────────────────────────────

    def _start(self, total: int) -> None:
        if self._started:
            return
        self._started = True
        self._emit(Start(total=total))

    def _sync_suites(self, chain) -> None:
        keys = [node.nodeid for node in chain]

        common = 0
        while (common < len(keys) and common < len(self._open)
               and self._open[common] == keys[common]):
            common += 1

        while len(self._open) > common:
            self._open.pop()
            self._emit(SuiteClose())

        for node in chain[common:]:
            self._open.append(node.nodeid)
            self._emit(SuiteOpen(title=node.name))
