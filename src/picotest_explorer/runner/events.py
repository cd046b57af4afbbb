#
# src/picotest_explorer/runner/events.py
#
"""
Lifecycle events emitted by the test command while running tests.

Each event is a JSON object keyed by a `hook` discriminator. They are decoded
into a closed set of frozen attrs classes.
"""

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

import structlog
from attrs import define, field

from picotest_explorer.exceptions import StreamParseError
from picotest_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runner.events")


@define(frozen=True, slots=True)
class FailureEvent:
    """A failed assertion reported while a case is running. `line` is 1-based."""

    file: str
    line: int
    type: str
    test: str
    msg: str | None = field(default=None)


@define(frozen=True, slots=True)
class SuiteEnterEvent:
    suite_name: str
    nb: int


@define(frozen=True, slots=True)
class SuiteLeaveEvent:
    suite_name: str
    nb: int
    fail: int


@define(frozen=True, slots=True)
class CaseEnterEvent:
    test_name: str


@define(frozen=True, slots=True)
class CaseLeaveEvent:
    test_name: str
    fail: int

    @property
    def failed(self) -> bool:
        return bool(self.fail)


LifecycleEvent: TypeAlias = FailureEvent | SuiteEnterEvent | SuiteLeaveEvent | CaseEnterEvent | CaseLeaveEvent


def _str(raw: Mapping[str, Any], key: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise StreamParseError(f"Event field '{key}' must be a string, got {value!r}")
    return value


def _int(raw: Mapping[str, Any], key: str) -> int:
    value = raw.get(key)
    # JSON booleans are accepted for counters such as `fail`.
    if not isinstance(value, int):
        raise StreamParseError(f"Event field '{key}' must be an integer, got {value!r}")
    return int(value)


def _line(raw: Mapping[str, Any]) -> int:
    value = raw.get("line")
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise StreamParseError(f"Event field 'line' must be an integer >= 1, got {value!r}")
    return value


def _parse_failure(raw: Mapping[str, Any]) -> FailureEvent:
    msg = raw.get("msg")
    return FailureEvent(
        file=_str(raw, "file"),
        line=_line(raw),
        type=_str(raw, "type"),
        test=_str(raw, "test"),
        msg=msg if isinstance(msg, str) and msg else None,
    )


def _parse_suite_enter(raw: Mapping[str, Any]) -> SuiteEnterEvent:
    return SuiteEnterEvent(suite_name=_str(raw, "suiteName"), nb=_int(raw, "nb"))


def _parse_suite_leave(raw: Mapping[str, Any]) -> SuiteLeaveEvent:
    return SuiteLeaveEvent(suite_name=_str(raw, "suiteName"), nb=_int(raw, "nb"), fail=_int(raw, "fail"))


def _parse_case_enter(raw: Mapping[str, Any]) -> CaseEnterEvent:
    return CaseEnterEvent(test_name=_str(raw, "testName"))


def _parse_case_leave(raw: Mapping[str, Any]) -> CaseLeaveEvent:
    return CaseLeaveEvent(test_name=_str(raw, "testName"), fail=_int(raw, "fail"))


EVENT_PARSERS: dict[str, Callable[[Mapping[str, Any]], LifecycleEvent]] = {
    "FAILURE": _parse_failure,
    "SUITE_ENTER": _parse_suite_enter,
    "SUITE_LEAVE": _parse_suite_leave,
    "CASE_ENTER": _parse_case_enter,
    "CASE_LEAVE": _parse_case_leave,
}


def parse_event(raw: Any) -> LifecycleEvent | None:
    """
    Converts a decoded JSON value into a lifecycle event.

    Returns None for objects with an unknown `hook`, which are skipped.

    Raises:
        StreamParseError: If the value is not an object or a known event is malformed.
    """
    if not isinstance(raw, Mapping):
        raise StreamParseError(f"Expected a JSON object for a lifecycle event, got {type(raw).__name__}")
    hook = raw.get("hook")
    parser = EVENT_PARSERS.get(hook) if isinstance(hook, str) else None
    if parser is None:
        log.debug("Ignoring event with unknown hook", hook=hook)
        return None
    return parser(raw)

# 🔼⚙️
