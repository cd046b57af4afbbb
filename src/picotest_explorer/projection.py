#
# src/picotest_explorer/projection.py
#
"""
Projection of discovered tests and failures onto the host's suite/test model.

The test command reports 1-based line numbers; the host expects 0-based ones.
The conversion happens here and nowhere else.
"""

from collections.abc import Iterator
from pathlib import Path

from attrs import define, field

from picotest_explorer.runner.discovery import TestNode
from picotest_explorer.runner.events import FailureEvent

# Reserved id of the synthetic root suite; running it means "run everything".
ROOT_SUITE_ID = "*"
ROOT_SUITE_LABEL = "PicoTest"


@define(frozen=True, slots=True)
class TestInfo:
    """A leaf test as shown by the host. `line` is 0-based."""

    __test__ = False  # Not a pytest test class.

    id: str
    label: str
    file: str | None = field(default=None)
    line: int | None = field(default=None)
    type: str = field(default="test", init=False)


@define(frozen=True, slots=True)
class TestSuiteInfo:
    """A suite as shown by the host. `line` is 0-based."""

    __test__ = False  # Not a pytest test class.

    id: str
    label: str
    children: tuple["TestSuiteInfo | TestInfo", ...] = field(factory=tuple)
    file: str | None = field(default=None)
    line: int | None = field(default=None)
    type: str = field(default="suite", init=False)


@define(frozen=True, slots=True)
class Decoration:
    """A failure marker attached to a source line. `line` is 0-based."""

    line: int
    message: str
    file: str | None = field(default=None)


def _resolve_file(file: str, base_dir: Path | None) -> str:
    if base_dir is None or Path(file).is_absolute():
        return file
    return str(base_dir / file)


def convert_test_node(node: TestNode, base_dir: Path | None = None) -> TestSuiteInfo | TestInfo:
    """
    Converts a discovered node into a host suite (if it has children) or test.

    Relative file paths are resolved against `base_dir` when one is given.
    """
    file = _resolve_file(node.file, base_dir)
    if node.children is not None:
        return TestSuiteInfo(
            id=node.name,
            label=node.name,
            file=file,
            line=node.line - 1,
            children=tuple(convert_test_node(child, base_dir) for child in node.children),
        )
    return TestInfo(id=node.name, label=node.name, file=file, line=node.line - 1)


def build_root_suite(nodes: list[TestNode], base_dir: Path | None = None) -> TestSuiteInfo:
    """Wraps the top-level discovered nodes in the synthetic root suite."""
    return TestSuiteInfo(
        id=ROOT_SUITE_ID,
        label=ROOT_SUITE_LABEL,
        children=tuple(convert_test_node(node, base_dir) for node in nodes),
    )


def get_error_message(failure: FailureEvent) -> str:
    if failure.msg:
        return f"[{failure.type}] {failure.test} | {failure.msg}"
    return f"[{failure.type}] {failure.test}"


def to_decoration(failure: FailureEvent, base_dir: Path | None = None) -> Decoration:
    return Decoration(
        line=failure.line - 1,
        file=_resolve_file(failure.file, base_dir),
        message=get_error_message(failure),
    )


def to_message(failure: FailureEvent) -> str:
    """Formats a failure as `file:line - [type] test | msg`, keeping the 1-based line."""
    return f"{failure.file}:{failure.line} - {get_error_message(failure)}"


def iter_tests(suite: TestSuiteInfo) -> Iterator[TestSuiteInfo | TestInfo]:
    """Yields every node below `suite`, depth first."""
    for child in suite.children:
        yield child
        if isinstance(child, TestSuiteInfo):
            yield from iter_tests(child)

# 🔼⚙️
