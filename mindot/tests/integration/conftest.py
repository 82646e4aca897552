"""
tests/integration/conftest.py — Fixtures for integration tests.

Design:
  - End-to-end tests drive a real RunCoordinator through create_coordinator()
    onto a rich Console over a StringIO (the `captured` fixture), with a
    fabricated coverage snapshot.
  - Plugin tests run pytest in-process through `pytester`. The mindot plugin
    is normally loaded from the pytest11 entry point of the installed
    package; when the package is not installed (running from a source
    checkout) it is passed explicitly with -p instead. Passing it both ways
    would register the module twice.
"""

from __future__ import annotations

from importlib.metadata import entry_points

import pytest


def _entry_point_installed() -> bool:
    return any(ep.name == "mindot" for ep in entry_points(group="pytest11"))


PLUGIN_ARGS: tuple[str, ...] = () if _entry_point_installed() else ("-p", "mindot.app.plugin")


@pytest.fixture
def run_mindot(pytester):
    """Runs pytest in-process with the mindot reporter enabled."""

    def _run(*args: str):
        return pytester.runpytest(*PLUGIN_ARGS, "--mindot", "-p", "no:cacheprovider", *args)

    return _run


@pytest.fixture
def output_of(strip):
    """pytester result → its stdout with every escape sequence removed."""

    def _plain(result) -> str:
        return strip("\n".join(result.outlines))

    return _plain
