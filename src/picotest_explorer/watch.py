# src/picotest_explorer/watch.py

"""
Reloads the test list when the test command file changes.
"""

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path

import structlog
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from picotest_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("watch")
# Rebuilding a test binary fires several events in a row; group them into one reload.
DEBOUNCE_DELAY = 0.25  # 250 milliseconds


class _CommandChangeHandler(FileSystemEventHandler):
    def __init__(self, watcher: "TestCommandWatcher"):
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in ("created", "modified", "moved"):
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        if any(p and self._watcher.matches(Path(str(p))) for p in paths):
            self._watcher.notify_change()


class TestCommandWatcher:
    """
    Watches the test command file and calls `on_change` after it settles.

    The watchdog observer runs in its own thread; changes are handed over to
    the event loop with `call_soon_threadsafe`.
    """

    __test__ = False  # Not a pytest test class.

    def __init__(
        self,
        command_path: Path,
        on_change: Callable[[], Awaitable[None]],
        loop: asyncio.AbstractEventLoop,
        debounce: float = DEBOUNCE_DELAY,
    ):
        self.command_path = command_path.resolve()
        self._on_change = on_change
        self._loop = loop
        self._debounce = debounce
        self._timer: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._observer: Observer | None = None
        self._log = log.bind(path=str(self.command_path))

    @property
    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def matches(self, path: Path) -> bool:
        return path.resolve() == self.command_path

    def start(self) -> None:
        watch_dir = self.command_path.parent
        if not watch_dir.is_dir():
            self._log.warning("Cannot watch test command, directory does not exist", directory=str(watch_dir))
            return
        self._observer = Observer()
        self._observer.schedule(_CommandChangeHandler(self), str(watch_dir), recursive=False)
        self._observer.start()
        self._log.info("Watching test command for changes", emoji_key="path")

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
            self._log.debug("Stopped watching test command")

    def notify_change(self) -> None:
        """Thread-safe entry point for observer callbacks."""
        self._loop.call_soon_threadsafe(self._schedule_reload)

    def _schedule_reload(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._loop.call_later(self._debounce, self._fire)

    def _fire(self) -> None:
        self._timer = None
        self._log.info("Test command changed, reloading tests", emoji_key="load")
        task = self._loop.create_task(self._on_change())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

# 🔼⚙️
