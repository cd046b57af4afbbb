#
# config/models.py
#
"""
Attrs-based data models for picotest-explorer configuration.
"""

import logging
from pathlib import Path
from typing import Any

from attrs import define, field
from attrs.validators import instance_of, optional


def _validate_log_level(inst: Any, attr: Any, value: str) -> None:
    """Validator for standard logging level names."""
    valid = logging.getLevelNamesMapping().keys()
    if not isinstance(value, str) or value.upper() not in valid:
        raise ValueError(f"Invalid log_level '{value}'. Must be one of {list(valid)}.")


@define(frozen=True, slots=True)
class ExplorerConfig:
    """Settings for discovering and running tests."""

    # Test command/path, absolute or relative to the workspace folder.
    test_command: str = field(default="", validator=instance_of(str))
    # Directory to run the tests within, absolute or relative to the workspace folder.
    test_cwd: str = field(default="", validator=instance_of(str))
    load_args: str = field(default="-J", validator=instance_of(str))
    run_args: str = field(default="-j", validator=instance_of(str))
    auto_reload: bool = field(default=True, validator=instance_of(bool))
    log_file: str | None = field(default=None, validator=optional(instance_of(str)))


@define(frozen=True, slots=True)
class GlobalConfig:
    """Global default settings."""

    log_level: str = field(default="WARNING", validator=_validate_log_level)


@define(frozen=True, slots=True)
class PicotestConfig:
    """Root configuration object."""

    explorer: ExplorerConfig = field(factory=ExplorerConfig)
    global_config: GlobalConfig = field(factory=GlobalConfig)


@define(frozen=True, slots=True)
class RunSpec:
    """
    Fully resolved settings for one load or run.

    Rebuilt from configuration before every invocation.
    """

    cwd: Path
    command: str
    load_args: str
    run_args: str

# 🔼⚙️
