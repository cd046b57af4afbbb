#
# src/picotest_explorer/runner/process.py
#
"""
Launches the test command as an asyncio subprocess and exposes its output stream.
"""

import asyncio
import contextlib
import shlex
from collections.abc import AsyncIterator, Sequence
from pathlib import Path

import structlog

from picotest_explorer.exceptions import ConfigurationError, SpawnError
from picotest_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runner.process")

CHUNK_SIZE = 64 * 1024


def split_args(args: str) -> list[str]:
    """Splits an argument string using shell quoting rules."""
    try:
        return shlex.split(args)
    except ValueError as e:
        raise ConfigurationError(f"Cannot split arguments {args!r}: {e}", details=e) from e


class TestProcess:
    """
    Handle to a running test command.

    Exposes stdout as a stream of byte chunks, the exit code, and a one-shot
    `terminate()`. Stderr is drained in the background and logged.
    """

    __test__ = False  # Not a pytest test class.

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        command: str,
        args: Sequence[str],
        cwd: Path,
    ) -> None:
        self._process = process
        self.command = command
        self.args = list(args)
        self.cwd = cwd
        self._terminated = False
        self._log = log.bind(command=command, pid=process.pid)
        self._stderr_task: asyncio.Task[None] | None = None
        if process.stderr is not None:
            self._stderr_task = asyncio.create_task(self._drain_stderr(process.stderr))

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    @property
    def terminated(self) -> bool:
        """Whether `terminate()` was requested on this handle."""
        return self._terminated

    async def chunks(self) -> AsyncIterator[bytes]:
        """Yields stdout chunks as they arrive until the pipe is closed."""
        stdout = self._process.stdout
        if stdout is None:
            return
        while True:
            chunk = await stdout.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk

    async def wait(self) -> int | None:
        """
        Waits for the process to exit.

        Returns:
            The exit code, or None if the process was killed by a signal.
        """
        returncode = await self._process.wait()
        if self._stderr_task is not None:
            await self._stderr_task
        if returncode < 0:
            self._log.info("Test command killed by signal", signal=-returncode)
            return None
        self._log.debug("Test command exited", exit_code=returncode)
        return returncode

    def terminate(self) -> None:
        """Kills the process. Further calls, or calls after exit, do nothing."""
        if self._terminated or self.returncode is not None:
            return
        self._terminated = True
        self._log.info("Terminating test command")
        try:
            self._process.kill()
        except ProcessLookupError:
            self._log.debug("Test command already gone when terminating")

    async def aclose(self) -> None:
        """Kills the process if it is still running and waits for it to be reaped."""
        if self.returncode is None:
            self.terminate()
        # Shielded so that a cancelled caller still reaps the child.
        await asyncio.shield(self.wait())

    async def _drain_stderr(self, stream: asyncio.StreamReader) -> None:
        while line := await stream.readline():
            self._log.debug("Test command stderr", line=line.decode("utf-8", errors="replace").rstrip())


async def spawn(command: str, args: Sequence[str], cwd: Path) -> TestProcess:
    """
    Starts `command` with `args` inside `cwd`.

    Raises:
        ConfigurationError: If `cwd` is not an existing directory. Nothing is spawned.
        SpawnError: If the process could not be started.
    """
    cwd = Path(cwd)
    if not cwd.is_dir():
        raise ConfigurationError(f"Directory '{cwd}' does not exist", command=command, cwd=cwd)

    spawn_log = log.bind(command=command, args=list(args), cwd=str(cwd))
    try:
        process = await asyncio.create_subprocess_exec(
            command,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
    except OSError as e:
        spawn_log.error("Cannot launch test command", error=str(e))
        raise SpawnError(f"Cannot launch command '{command}'", command=command, cwd=cwd, details=e) from e

    spawn_log.debug("Test command started", pid=process.pid)
    return TestProcess(process, command, args, cwd)


@contextlib.asynccontextmanager
async def launch(command: str, args: Sequence[str], cwd: Path) -> AsyncIterator[TestProcess]:
    """
    Spawns a test process that is guaranteed to be killed and reaped on exit.
    """
    process = await spawn(command, args, cwd)
    try:
        yield process
    finally:
        await process.aclose()

# 🔼⚙️
