# src/picotest_explorer/cli/__init__.py

"""
Command line interface for picotest-explorer.
"""

# 🖥️⚙️
