"""
models/suite.py — The failure tree: SuiteNode and FailureRecord.

No output side effects. Both types render to rich Text; writing that text
is the coordinator's job.

Key design points:
  - Every opened suite is recorded, whether or not anything inside it
    failed. Pruning happens at render time: a branch with no failures
    anywhere below it renders as an empty Text, title included.
  - has_failures() is recomputed on every call. The tree is only queried
    after the run has ended, so there is nothing to keep in sync.
  - A SuiteNode is safe to render only after its suite-end event. Before
    that it may still receive children and failures.
  - Indentation is literal spaces (INDENT per level), never tab stops.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rich.text import Text


INDENT = "    "


def _indent(depth: int) -> str:
    return INDENT * max(depth, 0)


@dataclass(frozen=True)
class FailureRecord:
    """One failing test, attached to the innermost suite open when it failed."""

    title:   str
    message: str = ""

    def render(self, depth: int, show_message: bool = True) -> Text:
        """
        Title line at `depth` in the fail style, then the message one level
        deeper in the error style.

        With show_message the message line is always present, even when the
        message is empty, so the report keeps one title line plus one
        message line per failure for anything scraping it line by line.
        A multi-line message is folded onto that one line.
        """
        out = Text()
        out.append(f"{_indent(depth)}{self.title}\n", style="fail")
        if not show_message:
            return out

        message = self.one_line_message()
        if not message:
            out.append("\n")
            return out

        out.append(f"{_indent(depth + 1)}{message}\n", style="error")
        return out

    def one_line_message(self) -> str:
        """The message with line breaks and runs of whitespace collapsed to single spaces."""
        return " ".join(self.message.split())


@dataclass
class SuiteNode:
    """A suite in the runner's nesting, with its own failures and child suites."""

    title:    str = ""
    children: list[SuiteNode] = field(default_factory=list)
    failures: list[FailureRecord] = field(default_factory=list)

    def add_child(self, child: SuiteNode) -> None:
        self.children.append(child)

    def add_failure(self, failure: FailureRecord) -> None:
        self.failures.append(failure)

    def has_failures(self) -> bool:
        if self.failures:
            return True
        return any(child.has_failures() for child in self.children)

    def render(self, depth: int = 0, show_messages: bool = True) -> Text:
        """
        Header, then direct failures, then children (depth + 1 each).

        Returns an empty Text when nothing in this subtree failed.
        """
        if not self.has_failures():
            return Text()

        out = Text()
        out.append(f"{_indent(depth)}{self.title}\n", style="fail-header")

        for failure in self.failures:
            out.append_text(failure.render(depth + 1, show_message=show_messages))
        for child in self.children:
            out.append_text(child.render(depth + 1, show_messages=show_messages))

        return out
