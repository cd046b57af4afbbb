#
# src/picotest_explorer/__init__.py
#
"""
picotest-explorer: discovers and runs PicoTest tests from their JSON output.
"""

from .adapter import PicotestAdapter
from .projection import ROOT_SUITE_ID

__all__ = ["ROOT_SUITE_ID", "PicotestAdapter"]

# 🔼⚙️
