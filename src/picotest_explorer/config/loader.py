#
# config/loader.py
#
"""
Loads picotest-explorer configuration from TOML and resolves it into run specs.
"""

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import attrs
import structlog

from picotest_explorer.config.models import ExplorerConfig, GlobalConfig, PicotestConfig, RunSpec
from picotest_explorer.exceptions import ConfigurationError
from picotest_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("config.loader")

DEFAULT_CONFIG_NAME = "picotest.toml"
WORKSPACE_FOLDER_VAR = "${workspaceFolder}"


def _build_section(cls: type, data: Any, section: str) -> Any:
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Section [{section}] must be a table")
    known = {a.name for a in attrs.fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown key(s) in [{section}]: {', '.join(unknown)}")
    try:
        return cls(**data)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value in [{section}]: {e}", details=e) from e


def load_config(config_path: Path) -> PicotestConfig:
    """
    Reads and validates a configuration file.

    A missing file yields the default configuration.

    Raises:
        ConfigurationError: If the file cannot be read or is invalid.
    """
    config_log = log.bind(path=str(config_path))
    if not config_path.exists():
        config_log.debug("No configuration file, using defaults")
        return PicotestConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in '{config_path}': {e}", details=e) from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file '{config_path}'", details=e) from e

    unknown = sorted(set(data) - {"explorer", "global"})
    if unknown:
        raise ConfigurationError(f"Unknown section(s) in '{config_path}': {', '.join(unknown)}")

    config = PicotestConfig(
        explorer=_build_section(ExplorerConfig, data.get("explorer", {}), "explorer"),
        global_config=_build_section(GlobalConfig, data.get("global", {}), "global"),
    )
    config_log.debug("Configuration loaded", explorer=attrs.asdict(config.explorer))
    return config


def substitute_variables(value: str, workspace: Path) -> str:
    """Replaces every `${workspaceFolder}` in `value` with the workspace path."""
    return value.replace(WORKSPACE_FOLDER_VAR, str(workspace))


def resolve_run_spec(config: ExplorerConfig, workspace: Path) -> RunSpec:
    """
    Builds the run spec for `workspace` from `config`.

    Raises:
        ConfigurationError: If no test command is configured.
    """
    command = substitute_variables(config.test_command, workspace).strip()
    if not command:
        raise ConfigurationError("No test command configured (set 'test_command' in [explorer])")

    # Bare names are looked up on PATH, anything with a separator is a path.
    if os.sep in command or (os.altsep and os.altsep in command):
        command = str(workspace / Path(command).expanduser())

    cwd = workspace / substitute_variables(config.test_cwd, workspace)
    return RunSpec(
        cwd=cwd,
        command=command,
        load_args=substitute_variables(config.load_args, workspace),
        run_args=substitute_variables(config.run_args, workspace),
    )

# 🔼⚙️
