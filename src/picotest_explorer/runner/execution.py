#
# src/picotest_explorer/runner/execution.py
#
"""
Test execution: runs the test command in run mode and streams lifecycle events.
"""

from collections.abc import Callable, Sequence
from pathlib import Path

import structlog
from attrs import define

from picotest_explorer.exceptions import EventDispatchError, StreamParseError
from picotest_explorer.runner.decoder import ConcatJsonDecoder
from picotest_explorer.runner.events import LifecycleEvent, parse_event
from picotest_explorer.runner.process import TestProcess, spawn, split_args
from picotest_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runner.execution")

EventSink = Callable[[LifecycleEvent], None]


@define(frozen=True, slots=True)
class RunResult:
    """Outcome of one execution. `exit_code` is None if the process was killed."""

    exit_code: int | None


async def schedule_test_process(
    command: str,
    cwd: Path,
    test_ids: Sequence[str],
    run_args: str,
) -> TestProcess:
    """
    Starts the test command in run mode for `test_ids` (empty for all tests).

    Raises:
        ConfigurationError: If `cwd` does not exist.
        SpawnError: If the command cannot be launched.
    """
    args = split_args(run_args) + list(test_ids)
    log.info("Scheduling test process", command=command, cwd=str(cwd), args=args, emoji_key="run")
    return await spawn(command, args, cwd)


async def execute_test_process(process: TestProcess, on_event: EventSink) -> RunResult:
    """
    Decodes the lifecycle events written by `process` and hands each to `on_event`.

    Events are delivered synchronously and in write order. The call resolves
    when the process exits. A value truncated at end of output, as left by a
    killed process, is logged and otherwise ignored.

    Raises:
        StreamParseError: If the output contains malformed JSON.
        EventDispatchError: If `on_event` raises.
    """
    exec_log = log.bind(command=process.command, pid=process.pid)
    decoder = ConcatJsonDecoder()
    delivered = 0

    async for chunk in process.chunks():
        for value in decoder.feed(chunk):
            event = parse_event(value)
            if event is None:
                continue
            try:
                on_event(event)
            except Exception as e:
                exec_log.error("Event handler failed", lifecycle_event=repr(event), error=str(e), exc_info=True)
                raise EventDispatchError(
                    f"Error while handling event {type(event).__name__}",
                    command=process.command,
                    cwd=process.cwd,
                    details=e,
                ) from e
            delivered += 1

    try:
        decoder.close()
    except StreamParseError as e:
        exec_log.warning("Event stream ended inside a value", error=str(e), terminated=process.terminated)

    exit_code = await process.wait()
    exec_log.info("Test process finished", exit_code=exit_code, events=delivered)
    return RunResult(exit_code=exit_code)


def cancel_test_process(process: TestProcess) -> None:
    """Requests immediate termination of a running test process."""
    process.terminate()

# 🔼⚙️
