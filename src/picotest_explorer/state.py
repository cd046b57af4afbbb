# src/picotest_explorer/state.py
#
"""
Run state of the adapter and the translation of lifecycle events into
host notifications.
"""

from collections.abc import Callable
from enum import Enum, auto
from pathlib import Path

import structlog

from picotest_explorer.host import StateEvent, SuiteStateEvent, TestStateEvent
from picotest_explorer.projection import to_decoration, to_message
from picotest_explorer.runner.events import (
    CaseEnterEvent,
    CaseLeaveEvent,
    FailureEvent,
    LifecycleEvent,
    SuiteEnterEvent,
    SuiteLeaveEvent,
)
from picotest_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("state")


class AdapterState(Enum):
    """Single guard against overlapping loads and runs."""

    IDLE = auto()
    LOADING = auto()
    RUNNING = auto()
    CANCELLED = auto()  # Run still winding down after a cancel request.


class TestStateTracker:
    """
    Turns the lifecycle events of one run into suite and test notifications.

    Failures are buffered from one CASE_ENTER to the following CASE_LEAVE and
    attached to the test result. No nesting validation is done: a CASE_LEAVE
    without a CASE_ENTER reports whatever was buffered since the last reset.
    """

    __test__ = False  # Not a pytest test class.

    def __init__(self, emit: Callable[[StateEvent], None], base_dir: Path | None = None):
        self._emit = emit
        self._base_dir = base_dir
        self.failures: list[FailureEvent] = []
        self.passed = 0
        self.failed = 0

    def handle(self, event: LifecycleEvent) -> None:
        match event:
            case FailureEvent():
                self.failures.append(event)
            case SuiteEnterEvent(suite_name=name):
                self._emit(SuiteStateEvent(suite=name, state="running"))
            case SuiteLeaveEvent(suite_name=name):
                self._emit(SuiteStateEvent(suite=name, state="completed"))
            case CaseEnterEvent(test_name=name):
                self._emit(TestStateEvent(test=name, state="running"))
                self.failures = []
            case CaseLeaveEvent(test_name=name):
                self._leave_case(name, event.failed)

    def _leave_case(self, name: str, failed: bool) -> None:
        if failed:
            self.failed += 1
        else:
            self.passed += 1
        log.debug("Case finished", test=name, failed=failed, failures=len(self.failures))
        self._emit(
            TestStateEvent(
                test=name,
                state="failed" if failed else "passed",
                message="\n".join(to_message(failure) for failure in self.failures),
                decorations=tuple(to_decoration(failure, self._base_dir) for failure in self.failures),
            )
        )

# 🔼⚙️
