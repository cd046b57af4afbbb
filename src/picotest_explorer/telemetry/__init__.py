# src/picotest_explorer/telemetry/__init__.py

"""
Logging setup and logger type for picotest-explorer.
"""

from .logger import StructLogger, setup_logging

__all__ = ["StructLogger", "setup_logging"]

# 🔼⚙️
