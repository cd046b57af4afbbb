# src/picotest_explorer/cli/console_host.py

"""
A TestExplorerHost that renders load results and test states with rich.
"""

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from picotest_explorer.host import (
    LoadEvent,
    LoadFinishedEvent,
    RetireEvent,
    RunFinishedEvent,
    StateEvent,
    SuiteStateEvent,
    TestStateEvent,
)
from picotest_explorer.projection import TestInfo, TestSuiteInfo


def _location(node: TestSuiteInfo | TestInfo) -> str:
    if node.file is None or node.line is None:
        return ""
    # Host lines are 0-based; people read 1-based.
    return f" [dim]{escape(node.file)}:{node.line + 1}[/]"


def render_tree(suite: TestSuiteInfo) -> Tree:
    """Builds a rich tree of `suite` and everything below it."""
    tree = Tree(f"[bold]{escape(suite.label)}[/]{_location(suite)}")

    def add_children(branch: Tree, parent: TestSuiteInfo) -> None:
        for child in parent.children:
            if isinstance(child, TestSuiteInfo):
                add_children(branch.add(f"[bold]{escape(child.label)}[/]{_location(child)}"), child)
            else:
                branch.add(f"{escape(child.label)}{_location(child)}")

    add_children(tree, suite)
    return tree


class ConsoleHost:
    """Prints adapter notifications and keeps the counts the CLI exits on."""

    def __init__(self, console: Console | None = None, err_console: Console | None = None, show_tree: bool = True):
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)
        self.show_tree = show_tree
        self.suite: TestSuiteInfo | None = None
        self.load_error: str | None = None
        self.passed = 0
        self.failed = 0
        self.errored = False
        self.retired = False

    def tests_changed(self, event: LoadEvent) -> None:
        if not isinstance(event, LoadFinishedEvent):
            return
        self.suite = event.suite
        self.load_error = event.error_message
        if event.error_message is not None:
            self.err_console.print(f"[red]Error loading tests:[/] {escape(event.error_message)}")
        elif event.suite is not None and self.show_tree:
            self.console.print(render_tree(event.suite))

    def test_state_changed(self, event: StateEvent) -> None:
        match event:
            case SuiteStateEvent(suite=suite, state="running"):
                self.console.print(f"[bold]▶ {escape(suite)}[/]")
            case SuiteStateEvent(suite=suite, state="errored", message=message):
                self.errored = True
                self.err_console.print(f"[red]✖ {escape(suite)} errored:[/] {escape(message or '')}")
            case TestStateEvent(test=test, state="passed"):
                self.passed += 1
                self.console.print(f"  [green]✔[/] {escape(test)}")
            case TestStateEvent(test=test, state="failed", message=message):
                self.failed += 1
                self.console.print(f"  [red]✘ {escape(test)}[/]")
                for line in (message or "").splitlines():
                    self.console.print(f"      {escape(line)}")
            case RunFinishedEvent():
                self._print_summary()

    def tests_retired(self, event: RetireEvent) -> None:
        self.retired = True
        self.console.print(f"[yellow]Run cancelled, results retired for {', '.join(map(escape, event.tests))}[/]")

    def _print_summary(self) -> None:
        style = "red" if self.failed or self.errored else "green"
        self.console.print(f"[{style}]{self.passed} passed, {self.failed} failed[/]")

# 🖥️⚙️
