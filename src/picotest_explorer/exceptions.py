# src/picotest_explorer/exceptions.py

"""
Custom exceptions for picotest-explorer.
"""

from pathlib import Path


class PicotestError(Exception):
    """Base class for all picotest-explorer errors."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        cwd: Path | str | None = None,
        details: Exception | None = None,
    ):
        self.command = command
        self.cwd = str(cwd) if cwd is not None else None
        self.details = details
        super().__init__(message)
        if details and hasattr(self, "add_note"):
            self.add_note(f"Original error: {type(details).__name__}: {details}")


class ConfigurationError(PicotestError):
    """Raised for an invalid configuration file or an unusable working directory."""

    pass


class SpawnError(PicotestError):
    """Raised when the test command cannot be launched."""

    pass


class StreamParseError(PicotestError):
    """Raised for malformed or truncated concatenated-JSON output."""

    pass


class DiscoveryError(PicotestError):
    """Raised when the test command does not produce a usable test list."""

    pass


class EventDispatchError(PicotestError):
    """Raised when the host fails while handling a lifecycle event."""

    pass


# 🔼⚙️
