import json
import shlex
import sys
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from picotest_explorer.host import LoadEvent, RetireEvent, StateEvent


class RecordingHost:
    """TestExplorerHost double that keeps every notification in order."""

    def __init__(self):
        self.load_events: list[LoadEvent] = []
        self.state_events: list[StateEvent] = []
        self.retire_events: list[RetireEvent] = []

    def tests_changed(self, event: LoadEvent) -> None:
        self.load_events.append(event)

    def test_state_changed(self, event: StateEvent) -> None:
        self.state_events.append(event)

    def tests_retired(self, event: RetireEvent) -> None:
        self.retire_events.append(event)


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def write_script(tmp_path: Path) -> Callable[[str], Path]:
    """Writes a Python script standing in for a PicoTest binary."""

    def _write(body: str, name: str = "fake_runner.py") -> Path:
        script = tmp_path / name
        script.write_text(textwrap.dedent(body), encoding="utf-8")
        return script

    return _write


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def write_config(workspace: Path) -> Callable[..., Path]:
    """Writes a picotest.toml pointing at a fake runner script run by this interpreter."""

    def _write(script: Path, test_cwd: str = "", extra: str = "") -> Path:
        quoted = shlex.quote(str(script))
        config_path = workspace / "picotest.toml"
        config_path.write_text(
            "[explorer]\n"
            f"test_command = {json.dumps(sys.executable)}\n"
            f"test_cwd = {json.dumps(test_cwd)}\n"
            f"load_args = {json.dumps(quoted + ' --list')}\n"
            f"run_args = {json.dumps(quoted + ' --run')}\n"
            f"{extra}",
            encoding="utf-8",
        )
        return config_path

    return _write


# Prints `TREE` for --list, or streams `EVENTS` for --run and records its test ids.
FAKE_PICOTEST = """
import json
import sys

TREE = {
    "name": "mainSuite", "file": "tests/main.c", "line": 3,
    "children": [
        {"name": "testPass", "file": "tests/main.c", "line": 5},
        {"name": "testFail", "file": "tests/main.c", "line": 9},
        {"name": "subSuite", "file": "tests/sub.c", "line": 1, "children": []},
    ],
}

EVENTS = [
    {"hook": "SUITE_ENTER", "suiteName": "mainSuite", "nb": 2},
    {"hook": "CASE_ENTER", "testName": "testPass"},
    {"hook": "CASE_LEAVE", "testName": "testPass", "fail": 0},
    {"hook": "CASE_ENTER", "testName": "testFail"},
    {"hook": "FAILURE", "file": "tests/main.c", "line": 11, "type": "ASSERT", "test": "testFail", "msg": "x != y"},
    {"hook": "CASE_LEAVE", "testName": "testFail", "fail": 1},
    {"hook": "SUITE_LEAVE", "suiteName": "mainSuite", "nb": 2, "fail": 1},
]

if sys.argv[1] == "--list":
    sys.stdout.write(json.dumps(TREE))
else:
    with open("argv.json", "w") as f:
        json.dump(sys.argv[2:], f)
    for event in EVENTS:
        sys.stdout.write(json.dumps(event))
        sys.stdout.flush()
sys.exit(1 if sys.argv[1] == "--run" else 0)
"""


@pytest.fixture
def fake_picotest(write_script: Callable[[str], Path]) -> Path:
    return write_script(FAKE_PICOTEST)
