#
# tests/unit/test_state.py
#
"""
Tests for turning lifecycle events into suite and test notifications.
"""

from picotest_explorer.host import StateEvent, SuiteStateEvent, TestStateEvent
from picotest_explorer.projection import Decoration
from picotest_explorer.runner.events import (
    CaseEnterEvent,
    CaseLeaveEvent,
    FailureEvent,
    SuiteEnterEvent,
    SuiteLeaveEvent,
)
from picotest_explorer.state import TestStateTracker


def track(*events) -> tuple[TestStateTracker, list[StateEvent]]:
    emitted: list[StateEvent] = []
    tracker = TestStateTracker(emitted.append)
    for event in events:
        tracker.handle(event)
    return tracker, emitted


class TestTestStateTracker:
    def test_failed_case_in_suite(self) -> None:
        tracker, emitted = track(
            SuiteEnterEvent("S", 1),
            CaseEnterEvent("c1"),
            FailureEvent("f.c", 10, "ASSERT", "c1", "x!=y"),
            CaseLeaveEvent("c1", 1),
            SuiteLeaveEvent("S", 1, 1),
        )

        assert emitted == [
            SuiteStateEvent(suite="S", state="running"),
            TestStateEvent(test="c1", state="running"),
            TestStateEvent(
                test="c1",
                state="failed",
                message="f.c:10 - [ASSERT] c1 | x!=y",
                decorations=(Decoration(line=9, file="f.c", message="[ASSERT] c1 | x!=y"),),
            ),
            SuiteStateEvent(suite="S", state="completed"),
        ]
        assert (tracker.passed, tracker.failed) == (0, 1)

    def test_passed_case_has_no_failures(self) -> None:
        _, emitted = track(CaseEnterEvent("c"), CaseLeaveEvent("c", 0))

        assert emitted[-1] == TestStateEvent(test="c", state="passed", message="", decorations=())

    def test_multiple_failures_join_one_line_each(self) -> None:
        _, emitted = track(
            CaseEnterEvent("c"),
            FailureEvent("f.c", 3, "ASSERT", "c", "a"),
            FailureEvent("g.c", 4, "FAILURE", "c"),
            CaseLeaveEvent("c", 2),
        )

        leave = emitted[-1]
        assert leave.message == "f.c:3 - [ASSERT] c | a\ng.c:4 - [FAILURE] c"
        assert [d.line for d in leave.decorations] == [2, 3]

    def test_failures_reset_on_case_enter(self) -> None:
        _, emitted = track(
            CaseEnterEvent("a"),
            FailureEvent("f.c", 3, "ASSERT", "a"),
            CaseLeaveEvent("a", 1),
            CaseEnterEvent("b"),
            CaseLeaveEvent("b", 0),
        )

        assert emitted[-1].decorations == ()

    def test_case_leave_without_enter_is_tolerated(self) -> None:
        _, emitted = track(FailureEvent("f.c", 3, "ASSERT", "x"), CaseLeaveEvent("x", 1))

        assert emitted == [
            TestStateEvent(
                test="x",
                state="failed",
                message="f.c:3 - [ASSERT] x",
                decorations=(Decoration(line=2, file="f.c", message="[ASSERT] x"),),
            )
        ]

    def test_failure_alone_emits_nothing(self) -> None:
        _, emitted = track(FailureEvent("f.c", 3, "ASSERT", "x"))
        assert emitted == []
