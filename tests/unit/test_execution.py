#
# tests/unit/test_execution.py
#
"""
Tests for lifecycle event parsing and test execution (run mode).
"""

import asyncio
import json
import shlex
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from picotest_explorer.exceptions import EventDispatchError, StreamParseError
from picotest_explorer.runner.events import (
    CaseEnterEvent,
    CaseLeaveEvent,
    FailureEvent,
    LifecycleEvent,
    SuiteEnterEvent,
    SuiteLeaveEvent,
    parse_event,
)
from picotest_explorer.runner.execution import (
    RunResult,
    cancel_test_process,
    execute_test_process,
    schedule_test_process,
)


class TestParseEvent:
    """Dispatch on the `hook` discriminator."""

    def test_all_variants(self) -> None:
        assert parse_event({"hook": "SUITE_ENTER", "suiteName": "S", "nb": 2}) == SuiteEnterEvent("S", 2)
        assert parse_event({"hook": "SUITE_LEAVE", "suiteName": "S", "nb": 2, "fail": 1}) == SuiteLeaveEvent("S", 2, 1)
        assert parse_event({"hook": "CASE_ENTER", "testName": "c"}) == CaseEnterEvent("c")
        assert parse_event({"hook": "CASE_LEAVE", "testName": "c", "fail": 0}) == CaseLeaveEvent("c", 0)
        assert parse_event(
            {"hook": "FAILURE", "file": "f.c", "line": 10, "type": "ASSERT", "test": "c", "msg": "x!=y"}
        ) == FailureEvent("f.c", 10, "ASSERT", "c", "x!=y")

    def test_failure_without_message(self) -> None:
        event = parse_event({"hook": "FAILURE", "file": "f.c", "line": 1, "type": "FAILURE", "test": "c"})
        assert event == FailureEvent("f.c", 1, "FAILURE", "c", None)

    def test_boolean_fail_flag(self) -> None:
        event = parse_event({"hook": "CASE_LEAVE", "testName": "c", "fail": True})
        assert isinstance(event, CaseLeaveEvent)
        assert event.failed

    def test_unknown_hook_is_skipped(self) -> None:
        assert parse_event({"hook": "PROGRESS", "value": 3}) is None

    @pytest.mark.parametrize(
        "raw",
        [
            ["CASE_ENTER"],
            {"hook": "CASE_ENTER"},
            {"hook": "CASE_LEAVE", "testName": "c", "fail": "no"},
            {"hook": "FAILURE", "file": "f.c", "line": "10", "type": "ASSERT", "test": "c"},
            {"hook": "FAILURE", "file": "f.c", "line": 0, "type": "ASSERT", "test": "c"},
            {"hook": "FAILURE", "file": "f.c", "line": True, "type": "ASSERT", "test": "c"},
        ],
    )
    def test_malformed_events(self, raw) -> None:
        with pytest.raises(StreamParseError):
            parse_event(raw)


@pytest.mark.asyncio
class TestExecuteTestProcess:
    """Running a fake test binary and collecting its events."""

    async def test_delivers_events_in_order_and_exit_code(self, fake_picotest: Path, tmp_path: Path) -> None:
        events: list[LifecycleEvent] = []
        process = await schedule_test_process(
            sys.executable, tmp_path, ["mainSuite", "testPass"], f"{shlex.quote(str(fake_picotest))} --run"
        )

        result = await execute_test_process(process, events.append)

        assert result == RunResult(exit_code=1)
        assert [type(event) for event in events] == [
            SuiteEnterEvent,
            CaseEnterEvent,
            CaseLeaveEvent,
            CaseEnterEvent,
            FailureEvent,
            CaseLeaveEvent,
            SuiteLeaveEvent,
        ]
        assert json.loads((tmp_path / "argv.json").read_text()) == ["mainSuite", "testPass"]

    async def test_empty_test_ids_pass_only_run_args(self, fake_picotest: Path, tmp_path: Path) -> None:
        process = await schedule_test_process(sys.executable, tmp_path, [], f"{shlex.quote(str(fake_picotest))} --run")
        await execute_test_process(process, lambda event: None)

        assert json.loads((tmp_path / "argv.json").read_text()) == []

    async def test_events_arrive_before_process_exits(
        self, write_script: Callable[..., Path], tmp_path: Path
    ) -> None:
        script = write_script(
            """
            import sys, time
            sys.stdout.write('{"hook":"CASE_ENTER","testName":"slow"}')
            sys.stdout.flush()
            time.sleep(0.5)
            sys.stdout.write('{"hook":"CASE_LEAVE","testName":"slow","fail":0}')
            """
        )
        first_event = asyncio.Event()
        events: list[LifecycleEvent] = []

        def on_event(event: LifecycleEvent) -> None:
            events.append(event)
            first_event.set()

        process = await schedule_test_process(sys.executable, tmp_path, [], shlex.quote(str(script)))
        task = asyncio.create_task(execute_test_process(process, on_event))
        await asyncio.wait_for(first_event.wait(), timeout=10)

        assert events == [CaseEnterEvent("slow")]
        assert not task.done()
        result = await asyncio.wait_for(task, timeout=10)
        assert result.exit_code == 0
        assert events[-1] == CaseLeaveEvent("slow", 0)

    async def test_cancel_kills_process_and_resolves(self, write_script: Callable[..., Path], tmp_path: Path) -> None:
        script = write_script(
            """
            import sys, time
            sys.stdout.write('{"hook":"CASE_ENTER","testName":"hang"}{"hook":"CASE_LE')
            sys.stdout.flush()
            time.sleep(30)
            """
        )
        events: list[LifecycleEvent] = []
        process = await schedule_test_process(sys.executable, tmp_path, [], shlex.quote(str(script)))

        def on_event(event: LifecycleEvent) -> None:
            events.append(event)
            cancel_test_process(process)

        result = await asyncio.wait_for(execute_test_process(process, on_event), timeout=10)

        assert events == [CaseEnterEvent("hang")]
        assert process.terminated
        if sys.platform != "win32":
            assert result.exit_code is None

    async def test_malformed_output_is_an_error(self, write_script: Callable[..., Path], tmp_path: Path) -> None:
        script = write_script("print('{\"hook\": oops}')\n")
        process = await schedule_test_process(sys.executable, tmp_path, [], shlex.quote(str(script)))

        try:
            with pytest.raises(StreamParseError):
                await execute_test_process(process, lambda event: None)
        finally:
            await process.aclose()

    async def test_handler_failure_is_a_dispatch_error(self, fake_picotest: Path, tmp_path: Path) -> None:
        def on_event(event: LifecycleEvent) -> None:
            raise KeyError("no such test")

        process = await schedule_test_process(sys.executable, tmp_path, [], f"{shlex.quote(str(fake_picotest))} --run")
        try:
            with pytest.raises(EventDispatchError, match="SuiteEnterEvent") as exc_info:
                await execute_test_process(process, on_event)
        finally:
            await process.aclose()

        assert isinstance(exc_info.value.__cause__, KeyError)
