"""
models/event.py — Runner lifecycle events.

The coordinator is a state machine over exactly these six types. Anything
that drives it (the pytest plugin, a replayed JSON-lines stream, a test)
translates its own notifications into these first.

Event names follow the mocha runner's lifecycle notifications:

    start       Start(total, width)
    suite       SuiteOpen(title)
    suite end   SuiteClose()
    pass        Pass(title)
    fail        Fail(title, message)
    end         End()
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Start:
    total: int
    width: int | None = None   # None → the display's own width


@dataclass(frozen=True)
class SuiteOpen:
    title: str = ""


@dataclass(frozen=True)
class SuiteClose:
    pass


@dataclass(frozen=True)
class Pass:
    title: str = ""


@dataclass(frozen=True)
class Fail:
    title:   str
    message: str = ""


@dataclass(frozen=True)
class End:
    pass


Event = Start | SuiteOpen | SuiteClose | Pass | Fail | End


# Wire names used by the JSON-lines replay format.
EVENT_NAMES: dict[str, type] = {
    "start":     Start,
    "suite":     SuiteOpen,
    "suite end": SuiteClose,
    "pass":      Pass,
    "fail":      Fail,
    "end":       End,
}
