#
# src/picotest_explorer/host.py
#
"""
Defines the notifications the adapter sends to its host and the host protocol.
"""

from typing import Literal, Protocol, TypeAlias, runtime_checkable

from attrs import define, field

from picotest_explorer.projection import Decoration, TestSuiteInfo

SuiteState: TypeAlias = Literal["running", "completed", "errored"]
TestState: TypeAlias = Literal["running", "passed", "failed", "skipped", "errored"]


@define(frozen=True, slots=True)
class LoadStartedEvent:
    type: str = field(default="started", init=False)


@define(frozen=True, slots=True)
class LoadFinishedEvent:
    """End of a load. Exactly one of `suite` or `error_message` is set."""

    suite: TestSuiteInfo | None = field(default=None)
    error_message: str | None = field(default=None)
    type: str = field(default="finished", init=False)


@define(frozen=True, slots=True)
class RunStartedEvent:
    tests: tuple[str, ...]
    type: str = field(default="started", init=False)


@define(frozen=True, slots=True)
class RunFinishedEvent:
    type: str = field(default="finished", init=False)


@define(frozen=True, slots=True)
class SuiteStateEvent:
    suite: str
    state: SuiteState
    message: str | None = field(default=None)
    type: str = field(default="suite", init=False)


@define(frozen=True, slots=True)
class TestStateEvent:
    __test__ = False  # Not a pytest test class.

    test: str
    state: TestState
    message: str | None = field(default=None)
    decorations: tuple[Decoration, ...] = field(factory=tuple)
    type: str = field(default="test", init=False)


@define(frozen=True, slots=True)
class RetireEvent:
    """Marks the results of `tests` as stale."""

    tests: tuple[str, ...]


LoadEvent: TypeAlias = LoadStartedEvent | LoadFinishedEvent
StateEvent: TypeAlias = RunStartedEvent | RunFinishedEvent | SuiteStateEvent | TestStateEvent


@runtime_checkable
class TestExplorerHost(Protocol):
    """
    Protocol for the front end that displays tests and their states.
    """

    __test__ = False  # Not a pytest test class.

    def tests_changed(self, event: LoadEvent) -> None:
        """Receives load started/finished notifications."""
        ...

    def test_state_changed(self, event: StateEvent) -> None:
        """Receives run, suite and test state notifications, in order."""
        ...

    def tests_retired(self, event: RetireEvent) -> None:
        """Receives notifications that results are stale."""
        ...

# 🔼⚙️
