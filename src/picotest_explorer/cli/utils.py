# src/picotest_explorer/cli/utils.py

"""
Options shared by the CLI commands and the logging setup they trigger.
"""

import logging
from collections.abc import Callable
from pathlib import Path

import click
import structlog

from picotest_explorer.config import DEFAULT_CONFIG_NAME
from picotest_explorer.telemetry import setup_logging

log = structlog.get_logger("cli.utils")

LEVEL_NAMES = logging.getLevelNamesMapping()
ENV_PREFIX = "PICOTEST_"

_LOGGING_OPTIONS = (
    click.option(
        "-l",
        "--log-level",
        type=click.Choice(list(LEVEL_NAMES), case_sensitive=False),
        default=None,
        envvar=f"{ENV_PREFIX}LOG_LEVEL",
        help="Logging level (overrides [global] log_level).",
    ),
    click.option(
        "--log-file",
        type=click.Path(dir_okay=False, writable=True, resolve_path=True),
        default=None,
        envvar=f"{ENV_PREFIX}LOG_FILE",
        help="Also write JSON logs to this file (overrides [explorer] log_file).",
    ),
    click.option(
        "--json-logs",
        is_flag=True,
        default=None,
        envvar=f"{ENV_PREFIX}JSON_LOGS",
        help="Render console logs as JSON.",
    ),
)

_WORKSPACE_OPTIONS = (
    click.option(
        "-w",
        "--workspace",
        type=click.Path(exists=True, file_okay=False, dir_okay=True, resolve_path=True, path_type=Path),
        default=Path("."),
        show_default=True,
        help="Workspace folder the configured paths are relative to.",
    ),
    click.option(
        "-c",
        "--config-path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        envvar=f"{ENV_PREFIX}CONF",
        show_envvar=True,
        help=f"Configuration file (default: <workspace>/{DEFAULT_CONFIG_NAME}).",
    ),
)


def _with_options(options: tuple[Callable, ...]) -> Callable:
    def decorator(f):
        # Applied last-to-first so --help lists them in declaration order.
        for option in reversed(options):
            f = option(f)
        return f

    return decorator


logging_options = _with_options(_LOGGING_OPTIONS)
workspace_options = _with_options(_WORKSPACE_OPTIONS)


def resolve_config_path(workspace: Path, config_path: Path | None) -> Path:
    return config_path if config_path is not None else workspace / DEFAULT_CONFIG_NAME


def setup_logging_from_context(
    ctx: click.Context,
    local_log_level: str | None = None,
    local_log_file: str | None = None,
    local_json_logs: bool | None = None,
    default_log_level: str = "WARNING",
    config_log_level: str | None = None,
    config_log_file: str | None = None,
) -> None:
    """
    Configures logging for a subcommand.

    Each setting is taken from the first source that provides it: the
    subcommand's own options, then the group options stored in `ctx.obj`,
    then the configuration file, then the default.
    """
    obj = ctx.obj or {}
    level_name = (local_log_level or obj.get("LOG_LEVEL") or config_log_level or default_log_level).upper()
    log_file = local_log_file or obj.get("LOG_FILE") or config_log_file
    json_logs = local_json_logs if local_json_logs is not None else obj.get("JSON_LOGS", False)

    setup_logging(level=LEVEL_NAMES.get(level_name, logging.WARNING), json_logs=json_logs, log_file=log_file)
    log.debug("CLI logging configured", level=level_name, file=log_file or "console", json=json_logs)

# ⚙️🛠️
