#
# config/__init__.py
#
"""
Configuration handling sub-package for picotest-explorer.

Exports the loading functions and core configuration models.
"""

from .loader import DEFAULT_CONFIG_NAME, load_config, resolve_run_spec, substitute_variables
from .models import ExplorerConfig, GlobalConfig, PicotestConfig, RunSpec

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "ExplorerConfig",
    "GlobalConfig",
    "PicotestConfig",
    "RunSpec",
    "load_config",
    "resolve_run_spec",
    "substitute_variables",
]

# 🔼⚙️
