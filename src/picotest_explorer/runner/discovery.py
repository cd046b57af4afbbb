#
# src/picotest_explorer/runner/discovery.py
#
"""
Test discovery: runs the test command in list mode and builds the test tree.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
from attrs import define, field

from picotest_explorer.exceptions import DiscoveryError, StreamParseError
from picotest_explorer.runner.decoder import ConcatJsonDecoder, decode_stream
from picotest_explorer.runner.process import launch, split_args
from picotest_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runner.discovery")

INCOMPATIBLE_RUNNER_MESSAGE = "Error parsing test list - Make sure to use a compatible test runner"


@define(frozen=True, slots=True)
class TestNode:
    """
    A discovered suite or case, as reported by the test command.

    `children` is None for a case and a (possibly empty) tuple for a suite.
    `line` is 1-based.
    """

    __test__ = False  # Not a pytest test class.

    name: str
    file: str
    line: int
    children: tuple["TestNode", ...] | None = field(default=None)

    @property
    def is_suite(self) -> bool:
        return self.children is not None


def parse_test_node(raw: Any) -> TestNode:
    """
    Converts a decoded JSON object into a `TestNode`, recursively.

    Older runners name the children list `subtests`; it is accepted as well.

    Raises:
        DiscoveryError: If the object does not describe a test node.
    """
    if not isinstance(raw, Mapping):
        raise DiscoveryError(f"Expected a JSON object for a test node, got {type(raw).__name__}")

    name, file, line = raw.get("name"), raw.get("file"), raw.get("line")
    if not isinstance(name, str) or not name:
        raise DiscoveryError(f"Test node has no valid 'name': {raw!r}")
    if not isinstance(file, str):
        raise DiscoveryError(f"Test node '{name}' has no valid 'file'")
    if isinstance(line, bool) or not isinstance(line, int) or line < 1:
        raise DiscoveryError(f"Test node '{name}' has invalid 'line' {line!r}, expected an integer >= 1")

    raw_children = raw["children"] if "children" in raw else raw.get("subtests")
    if raw_children is None:
        return TestNode(name=name, file=file, line=line)
    if not isinstance(raw_children, list):
        raise DiscoveryError(f"Test node '{name}' has non-list children")
    return TestNode(
        name=name,
        file=file,
        line=line,
        children=tuple(parse_test_node(child) for child in raw_children),
    )


def collect_test_nodes(values: list[Any]) -> list[TestNode]:
    """
    Builds the top-level node list from the decoded documents.

    A single root document and a concatenation of top-level documents both
    reduce to the same rule: each document is one top-level node. A document
    that is a JSON array contributes each of its items.
    """
    nodes: list[TestNode] = []
    for value in values:
        if isinstance(value, list):
            nodes.extend(parse_test_node(item) for item in value)
        else:
            nodes.append(parse_test_node(value))
    return nodes


async def load_tests(command: str, cwd: Path, load_args: str) -> list[TestNode]:
    """
    Runs `command` in list mode and returns the discovered top-level nodes.

    Raises:
        ConfigurationError: If `cwd` does not exist.
        SpawnError: If the command cannot be launched.
        DiscoveryError: If the output is not a usable test list.
    """
    args = split_args(load_args)
    load_log = log.bind(command=command, cwd=str(cwd), args=args)
    load_log.info("Loading test list", emoji_key="load")

    decoder = ConcatJsonDecoder()
    values: list[Any] = []
    async with launch(command, args, cwd) as process:
        try:
            async for value in decode_stream(process.chunks(), decoder):
                values.append(value)
        except StreamParseError as e:
            load_log.error("Cannot decode test list", error=str(e))
            raise DiscoveryError(INCOMPATIBLE_RUNNER_MESSAGE, command=command, cwd=cwd, details=e) from e
        exit_code = await process.wait()

    if not values:
        load_log.error("Test command produced no test list", exit_code=exit_code)
        raise DiscoveryError(INCOMPATIBLE_RUNNER_MESSAGE, command=command, cwd=cwd)

    try:
        nodes = collect_test_nodes(values)
    except DiscoveryError as e:
        load_log.error("Test list has an unexpected shape", error=str(e))
        raise DiscoveryError(INCOMPATIBLE_RUNNER_MESSAGE, command=command, cwd=cwd, details=e) from e

    load_log.info("Test list loaded", top_level_nodes=len(nodes), exit_code=exit_code, emoji_key="success")
    return nodes

# 🔼⚙️
