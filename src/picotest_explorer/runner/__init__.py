#
# src/picotest_explorer/runner/__init__.py
#
"""
Test runner protocol sub-package: process launching, stream decoding,
discovery and execution.
"""
from .decoder import ConcatJsonDecoder, decode_stream
from .discovery import TestNode, load_tests
from .events import LifecycleEvent, parse_event
from .execution import RunResult, cancel_test_process, execute_test_process, schedule_test_process
from .process import TestProcess, launch, spawn, split_args

__all__ = [
    "ConcatJsonDecoder",
    "LifecycleEvent",
    "RunResult",
    "TestNode",
    "TestProcess",
    "cancel_test_process",
    "decode_stream",
    "execute_test_process",
    "launch",
    "load_tests",
    "parse_event",
    "schedule_test_process",
    "spawn",
    "split_args",
]

# 🔼⚙️
