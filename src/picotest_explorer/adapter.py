# src/picotest_explorer/adapter.py

"""
Test adapter: loads and runs PicoTest tests on behalf of a host.
"""

import asyncio
from collections.abc import Sequence
from pathlib import Path

import structlog

from picotest_explorer.config import DEFAULT_CONFIG_NAME, RunSpec, load_config, resolve_run_spec
from picotest_explorer.host import (
    LoadFinishedEvent,
    LoadStartedEvent,
    RetireEvent,
    RunFinishedEvent,
    RunStartedEvent,
    StateEvent,
    SuiteStateEvent,
    TestExplorerHost,
    TestStateEvent,
)
from picotest_explorer.projection import ROOT_SUITE_ID, TestInfo, TestSuiteInfo, build_root_suite, iter_tests
from picotest_explorer.runner.discovery import TestNode, load_tests
from picotest_explorer.runner.execution import (
    RunResult,
    cancel_test_process,
    execute_test_process,
    schedule_test_process,
)
from picotest_explorer.runner.process import TestProcess
from picotest_explorer.state import AdapterState, TestStateTracker
from picotest_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("adapter")


class PicotestAdapter:
    """
    Discovers and runs the tests of one workspace folder.

    At most one load or run is in flight: requests made while busy are ignored.
    Configuration is re-read before every load and run.
    """

    def __init__(
        self,
        workspace: Path,
        host: TestExplorerHost,
        config_path: Path | None = None,
    ):
        self.workspace = workspace
        self.host = host
        self.config_path = config_path or workspace / DEFAULT_CONFIG_NAME
        self.state = AdapterState.IDLE
        self.tests: list[TestNode] = []
        self.suite: TestSuiteInfo | None = None
        self._current_process: TestProcess | None = None
        self._log = log.bind(workspace=str(workspace))
        self._log.info("Initializing PicoTest adapter")

    async def load(self) -> None:
        """Reloads the test tree and reports it to the host."""
        if self.state is not AdapterState.IDLE:
            self._log.debug("Ignoring load request while busy", state=self.state.name)
            return

        self.state = AdapterState.LOADING
        self._log.info("Loading PicoTest tests", emoji_key="load")
        # Host errors propagate, but never leave the adapter busy.
        try:
            self.host.tests_changed(LoadStartedEvent())
            try:
                suite = await self._load_test_suite()
            except Exception as e:
                self._log.error("Failed to load tests", error=str(e))
                self.host.tests_changed(LoadFinishedEvent(error_message=str(e)))
            else:
                self.host.tests_changed(LoadFinishedEvent(suite=suite))
        finally:
            self.state = AdapterState.IDLE

    async def run(self, tests: Sequence[str]) -> None:
        """
        Runs the given test or suite ids. `[ROOT_SUITE_ID]` runs everything.
        """
        if self.state is not AdapterState.IDLE:
            self._log.debug("Ignoring run request while busy", state=self.state.name)
            return

        self.state = AdapterState.RUNNING
        test_ids = tuple(tests)
        self._log.info("Running PicoTest tests", tests=list(test_ids), emoji_key="run")
        try:
            self.host.test_state_changed(RunStartedEvent(tests=test_ids))
            if test_ids == (ROOT_SUITE_ID,):
                await self._run_all()
            else:
                try:
                    await self._run_tests(list(test_ids))
                except Exception as e:
                    # The host only needs the run finished notification.
                    self._log.warning("Test run failed", error=str(e))

            if self.state is AdapterState.CANCELLED:
                self._log.info("Test run cancelled, retiring tests", tests=list(test_ids))
                self.host.tests_retired(RetireEvent(tests=test_ids))
        finally:
            self.state = AdapterState.IDLE
            self.host.test_state_changed(RunFinishedEvent())

    def cancel(self) -> None:
        """Kills the running test process. The run then winds down on its own."""
        if self.state is not AdapterState.RUNNING:
            return

        if self._current_process is not None:
            cancel_test_process(self._current_process)
        self._log.info("Test run cancel requested")
        self.state = AdapterState.CANCELLED

    def dispose(self) -> None:
        self.cancel()
        self._log.debug("Adapter disposed")

    async def _run_all(self) -> None:
        self._emit_state(SuiteStateEvent(suite=ROOT_SUITE_ID, state="running"))
        try:
            await self._run_tests([])
        except Exception as e:
            self._log.error("Test run failed", error=str(e))
            self._emit_state(SuiteStateEvent(suite=ROOT_SUITE_ID, state="errored", message=str(e)))
        else:
            self._emit_state(SuiteStateEvent(suite=ROOT_SUITE_ID, state="completed"))

    async def _run_tests(self, tests: list[str]) -> RunResult | None:
        """
        Runs `tests` (empty for all) and forwards their states to the host.

        Returns None if the run was cancelled before the process started.
        """
        spec = await asyncio.to_thread(self._resolve_run_spec)
        if self.state is AdapterState.CANCELLED:
            return None

        tracker = TestStateTracker(self._emit_state, base_dir=spec.cwd)
        process = await schedule_test_process(spec.command, spec.cwd, tests, spec.run_args)
        self._current_process = process
        try:
            if self.state is AdapterState.CANCELLED:
                cancel_test_process(process)
            result = await execute_test_process(process, tracker.handle)
        finally:
            self._current_process = None
            await process.aclose()

        self._log.info(
            "Test run complete",
            exit_code=result.exit_code,
            passed=tracker.passed,
            failed=tracker.failed,
            emoji_key="fail" if tracker.failed else "success",
        )
        return result

    async def _load_test_suite(self) -> TestSuiteInfo:
        spec = await asyncio.to_thread(self._resolve_run_spec)
        self.tests = await load_tests(spec.command, spec.cwd, spec.load_args)
        self.suite = build_root_suite(self.tests, base_dir=spec.cwd)
        self._log.info(
            "Tests loaded",
            tests=sum(1 for node in iter_tests(self.suite) if isinstance(node, TestInfo)),
            emoji_key="success",
        )
        return self.suite

    def _resolve_run_spec(self) -> RunSpec:
        config = load_config(self.config_path)
        return resolve_run_spec(config.explorer, self.workspace)

    def _emit_state(self, event: StateEvent) -> None:
        # Results arriving after a cancel are not reported; the tests are retired instead.
        if self.state is AdapterState.CANCELLED and isinstance(event, SuiteStateEvent | TestStateEvent):
            return
        self.host.test_state_changed(event)

# 🔼⚙️
